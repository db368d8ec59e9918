from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    PROJECT_NAME: str = "AI Front Desk Webhook"

    # Server
    PORT: int = 3001
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/errors.log"

    # Cal.com
    CAL_API_KEY: str = ""
    CAL_API_BASE_URL: str = "https://api.cal.com/v1"
    CAL_EVENT_TYPE_ID: int = 3917527  # 30 Min Meeting
    CAL_LOCATION: str = "integrations:zoom"
    CAL_LANGUAGE: str = "en"

    # Business
    BUSINESS_TIMEZONE: str = "Europe/London"
    PLACEHOLDER_EMAIL_DOMAIN: str = "scteeth.temp"
    PUBLIC_BASE_URL: str = "https://vapiwebhook.onrender.com"

    # Notifications
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_PHONE_NUMBER: str = ""

    RESEND_API_KEY: str = ""
    EMAIL_FROM: str = "AI Front Desk <bookings@resend.dev>"

    HTTP_TIMEOUT_SECONDS: float = 15.0

    @property
    def cal_api_configured(self) -> bool:
        return bool(self.CAL_API_KEY)


@lru_cache
def get_settings() -> Settings:
    """Builds the settings once per process. Components receive it explicitly."""
    return Settings()
