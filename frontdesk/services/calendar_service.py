import asyncio
import re
from typing import Any, Dict, List, Optional

import requests

from frontdesk.core.config import Settings
from frontdesk.core.exceptions import RemoteFailure, SchemaMismatchError
from frontdesk.core.logger import logger
from frontdesk.models.calendar_models import (
    Booking,
    BookingRequest,
    BookingsResponse,
    Slot,
    SlotsResponse,
    parse_response,
)
from frontdesk.services.time_formatter import parse_date_time

DEFAULT_CANCEL_REASON = "Cancelled by customer"
DEFAULT_RESCHEDULE_REASON = "Rescheduled by customer"

NOTES_PENDING_EMAIL = "Booked via AI Receptionist - Email pending via WhatsApp"
NOTES_REAL_EMAIL = "Booked via AI Receptionist"


def placeholder_email(phone: str, domain: str) -> str:
    digits = re.sub(r"\D", "", phone or "")
    return f"pending-{digits}@{domain}"


def is_placeholder_email(email: Optional[str], domain: str) -> bool:
    return bool(email) and f"@{domain}" in email


class CalendarClient:
    """
    Cal.com v1 client. Each call is a single blocking request, run in a
    worker thread so the event loop stays free.
    """

    SERVICE = "Cal.com"

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.base_url = settings.CAL_API_BASE_URL.rstrip("/")
        self.session = session or requests.Session()

    def close(self):
        self.session.close()

    def _request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None, json: Optional[Dict[str, Any]] = None, expect_body: bool = True) -> Any:
        url = f"{self.base_url}{path}"
        query = {"apiKey": self.settings.CAL_API_KEY}
        query.update(params or {})

        # apiKey stays out of the log line
        logger.info(f"📤 Cal.com {method} {path} {params or ''}")
        try:
            response = self.session.request(
                method, url, params=query, json=json, timeout=self.settings.HTTP_TIMEOUT_SECONDS
            )
        except requests.RequestException as e:
            logger.error(f"❌ Cal.com unreachable: {e}")
            raise RemoteFailure(self.SERVICE, str(e)) from e

        if not response.ok:
            logger.error(f"❌ Cal.com error {response.status_code}: {response.text}")
            raise RemoteFailure(self.SERVICE, response.text, response.status_code)

        if not expect_body:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise SchemaMismatchError(self.SERVICE, f"body is not JSON: {e}") from e

    async def _call(self, method: str, path: str, params: Optional[Dict[str, Any]] = None, json: Optional[Dict[str, Any]] = None, expect_body: bool = True) -> Any:
        return await asyncio.to_thread(self._request, method, path, params, json, expect_body)

    async def list_slots(self, date: str) -> List[Slot]:
        params = {
            "eventTypeId": self.settings.CAL_EVENT_TYPE_ID,
            "startTime": f"{date}T00:00:00Z",
            "endTime": f"{date}T23:59:59Z",
            "timeZone": self.settings.BUSINESS_TIMEZONE,
        }
        data = await self._call("GET", "/slots", params=params)
        slots = parse_response(SlotsResponse, data, self.SERVICE).slots.get(date, [])
        logger.info(f"📅 {len(slots)} slot(s) on {date}")
        return slots

    async def submit_booking(self, request: BookingRequest) -> Booking:
        data = await self._call("POST", "/bookings", json=request.to_payload())
        booking = parse_response(Booking, data, self.SERVICE)
        logger.info(f"✅ Booking created: ID {booking.id}, UID {booking.uid}")
        return booking

    async def create_booking(self, name: str, email: str, phone: str, date: str, time: str, notes: Optional[str] = None) -> Booking:
        start = parse_date_time(date, time, self.settings.BUSINESS_TIMEZONE)
        if not notes:
            pending = is_placeholder_email(email, self.settings.PLACEHOLDER_EMAIL_DOMAIN)
            notes = NOTES_PENDING_EMAIL if pending else NOTES_REAL_EMAIL

        request = BookingRequest(
            eventTypeId=self.settings.CAL_EVENT_TYPE_ID,
            start=start,
            timeZone=self.settings.BUSINESS_TIMEZONE,
            language=self.settings.CAL_LANGUAGE,
            name=name,
            email=email,
            location=self.settings.CAL_LOCATION,
            notes=notes,
        )
        logger.info(f"📝 Booking {start} for {name} (phone {phone})")
        return await self.submit_booking(request)

    async def cancel_booking(self, uid: str, reason: Optional[str] = None) -> None:
        await self._call(
            "POST", f"/bookings/{uid}/cancel",
            json={"cancellationReason": reason or DEFAULT_CANCEL_REASON},
            expect_body=False,
        )
        logger.info(f"🗑️ Booking {uid} cancelled")

    async def reschedule_booking(self, uid: str, new_date: str, new_time: str, reason: Optional[str] = None) -> Booking:
        start = parse_date_time(new_date, new_time, self.settings.BUSINESS_TIMEZONE)
        data = await self._call(
            "POST", f"/bookings/{uid}/reschedule",
            json={"start": start, "reschedulingReason": reason or DEFAULT_RESCHEDULE_REASON},
        )
        booking = parse_response(Booking, data, self.SERVICE)
        logger.info(f"🔄 Booking {uid} moved to {start}")
        return booking

    async def get_booking(self, uid: str) -> Optional[Booking]:
        data = await self._call("GET", "/bookings")
        for booking in parse_response(BookingsResponse, data, self.SERVICE).bookings:
            if booking.uid == uid:
                return booking
        return None
