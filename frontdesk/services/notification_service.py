from dataclasses import dataclass
from typing import Optional

import requests

from frontdesk.core.config import Settings
from frontdesk.core.logger import logger

TWILIO_API_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"
RESEND_API_URL = "https://api.resend.com/emails"


@dataclass
class NotificationResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class WhatsAppClient:
    """
    Sends WhatsApp messages through Twilio.
    Never raises: failures come back as NotificationResult(success=False).
    """

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        s = self.settings
        return bool(s.TWILIO_ACCOUNT_SID and s.TWILIO_AUTH_TOKEN and s.TWILIO_PHONE_NUMBER)

    def close(self):
        self.session.close()

    def send(self, to_number: str, body: str) -> NotificationResult:
        if not self.is_configured:
            logger.warning("⚠️ Twilio not configured, skipping WhatsApp message")
            return NotificationResult(success=False, error="Twilio not configured")

        clean_number = to_number.replace(" ", "").strip()
        url = TWILIO_API_URL.format(sid=self.settings.TWILIO_ACCOUNT_SID)
        form = {
            "To": f"whatsapp:{clean_number}",
            "From": f"whatsapp:{self.settings.TWILIO_PHONE_NUMBER}",
            "Body": body,
        }

        try:
            logger.info(f"📱 Sending WhatsApp to {clean_number}...")
            response = self.session.post(
                url,
                data=form,
                auth=(self.settings.TWILIO_ACCOUNT_SID, self.settings.TWILIO_AUTH_TOKEN),
                timeout=self.settings.HTTP_TIMEOUT_SECONDS,
            )
            if not response.ok:
                logger.error(f"❌ Twilio WhatsApp error {response.status_code}: {response.text}")
                return NotificationResult(success=False, error=response.text)

            data = response.json()
            sid = data.get("sid") if isinstance(data, dict) else None
            logger.info(f"✅ WhatsApp message sent: {sid}")
            return NotificationResult(success=True, message_id=sid)
        except (requests.RequestException, ValueError) as e:
            logger.error(f"❌ Error sending WhatsApp: {e}")
            return NotificationResult(success=False, error=str(e))


class EmailClient:
    """Transactional email through Resend. Soft-fails like WhatsAppClient."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.RESEND_API_KEY)

    def close(self):
        self.session.close()

    def send(self, to_email: str, subject: str, html: str) -> NotificationResult:
        if not self.is_configured:
            logger.warning("⚠️ Email provider not configured, skipping email")
            return NotificationResult(success=False, error="Email provider not configured")

        payload = {
            "from": self.settings.EMAIL_FROM,
            "to": to_email,
            "subject": subject,
            "html": html,
        }
        headers = {"Authorization": f"Bearer {self.settings.RESEND_API_KEY}"}

        try:
            logger.info(f"📧 Sending email to {to_email}: '{subject}'")
            response = self.session.post(
                RESEND_API_URL, json=payload, headers=headers, timeout=self.settings.HTTP_TIMEOUT_SECONDS
            )
            if not response.ok:
                logger.error(f"❌ Resend error {response.status_code}: {response.text}")
                return NotificationResult(success=False, error=response.text)

            data = response.json()
            email_id = data.get("id") if isinstance(data, dict) else None
            logger.info(f"✅ Email sent to {to_email} ({email_id})")
            return NotificationResult(success=True, message_id=email_id)
        except (requests.RequestException, ValueError) as e:
            logger.error(f"❌ Error sending email: {e}")
            return NotificationResult(success=False, error=str(e))
