from unittest.mock import MagicMock

import pytest

from frontdesk.core.config import Settings


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        CAL_API_KEY="cal_test_key",
        CAL_API_BASE_URL="https://cal.test/v1",
        BUSINESS_TIMEZONE="Europe/London",
        PLACEHOLDER_EMAIL_DOMAIN="scteeth.temp",
        PUBLIC_BASE_URL="https://frontdesk.test",
        TWILIO_ACCOUNT_SID="AC123",
        TWILIO_AUTH_TOKEN="secret",
        TWILIO_PHONE_NUMBER="+14155238886",
        RESEND_API_KEY="re_test",
        LOG_FILE="",
    )


def make_response(status_code=200, json_data=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text
    if json_data is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = json_data
    return response


def booking_payload(uid="uid-original", email="pending-447700900123@scteeth.temp", **overrides):
    data = {
        "id": 101,
        "uid": uid,
        "startTime": "2024-01-15T14:00:00.000Z",
        "eventTypeId": 3917527,
        "attendees": [{"name": "Jane Smith", "email": email, "timeZone": "Europe/London"}],
        "metadata": {"videoCallUrl": "https://zoom.us/j/123"},
        "description": "",
    }
    data.update(overrides)
    return data
