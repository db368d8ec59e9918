import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from html import escape
from typing import Optional, Union

from pydantic import BaseModel

from frontdesk.core.config import Settings
from frontdesk.core.exceptions import NotFoundError, PreconditionError, RemoteFailure, SchemaMismatchError
from frontdesk.core.logger import logger
from frontdesk.models.calendar_models import Booking, BookingRequest, CorrectionRecord
from frontdesk.services.calendar_service import CalendarClient, is_placeholder_email
from frontdesk.services.correction_store import CorrectionStore
from frontdesk.services.notification_service import EmailClient
from frontdesk.services.time_formatter import format_booking_date, format_time, to_utc_iso

REBOOK_NOTES = "Email confirmed via WhatsApp link"
REBOOK_CANCEL_REASON = "Rebooked with confirmed email address"


class EmailCorrectionRequest(BaseModel):
    bookingUid: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class Rebooked:
    """The placeholder booking was replaced; Cal.com sends the confirmation."""
    new_booking: Booking


@dataclass(frozen=True)
class FallbackNotified:
    """No rebook happened. We sent (or tried to send) our own confirmation."""
    email_sent: bool
    rebook_error: Optional[str] = None


CorrectionOutcome = Union[Rebooked, FallbackNotified]


@dataclass(frozen=True)
class CorrectionResult:
    outcome: CorrectionOutcome
    record: CorrectionRecord
    date: str
    time: str
    name: str


class EmailCorrectionWorkflow:
    """
    Attaches a real email address to a booking made over the phone.

    Bookings still carrying a placeholder address are cancelled and booked
    again with the real address, so the calendar provider sends its own
    confirmation. If that rebook fails, or the booking already had a real
    address, the correction is recorded and we email the customer ourselves.
    """

    def __init__(self, settings: Settings, calendar: CalendarClient, email_client: EmailClient, store: CorrectionStore):
        self.settings = settings
        self.calendar = calendar
        self.email_client = email_client
        self.store = store

    async def correct_email(self, request: EmailCorrectionRequest) -> CorrectionResult:
        uid = (request.bookingUid or "").strip()
        email = (request.email or "").strip()
        if not uid or not email:
            raise PreconditionError("Booking ID and email are required")

        logger.info(f"📧 Email update request for booking {uid}")

        booking = await self._lookup(uid)
        original = booking.attendee
        name = (request.name or "").strip() or original.name

        outcome: Optional[CorrectionOutcome] = None
        rebook_error = None
        if is_placeholder_email(original.email, self.settings.PLACEHOLDER_EMAIL_DOMAIN):
            logger.info(f"🔁 Booking {uid} has a placeholder email, rebooking")
            try:
                outcome = await self._rebook(booking, name, email)
            except (RemoteFailure, SchemaMismatchError) as e:
                logger.error(f"❌ Rebook failed for {uid}, falling back to manual notification: {e}")
                rebook_error = str(e)

        record = CorrectionRecord(
            original_uid=uid,
            name=name,
            email=email,
            phone=request.phone,
            original_email=original.email,
            original_name=original.name,
            corrected_at=datetime.now(timezone.utc),
            new_booking_uid=outcome.new_booking.uid if outcome else None,
        )
        self.store.put(record)
        logger.info(f"💾 Correction stored for {uid}")

        if outcome is None:
            email_sent = await self._send_confirmation(booking, name, email)
            outcome = FallbackNotified(email_sent=email_sent, rebook_error=rebook_error)

        date_str, time_str = self._format_start(booking)
        return CorrectionResult(
            outcome=outcome,
            record=record,
            date=date_str,
            time=time_str,
            name=name,
        )

    async def _lookup(self, uid: str) -> Booking:
        try:
            booking = await self.calendar.get_booking(uid)
        except (RemoteFailure, SchemaMismatchError) as e:
            logger.error(f"❌ Failed to fetch booking {uid}: {e}")
            raise NotFoundError("Booking not found") from e

        if booking is None:
            logger.warning(f"⚠️ Booking {uid} not found")
            raise NotFoundError("Booking not found")
        return booking

    def _time_zone(self, booking: Booking) -> str:
        return booking.attendee.timeZone or self.settings.BUSINESS_TIMEZONE

    def _format_start(self, booking: Booking) -> tuple:
        if booking.startTime is None:
            return "", ""
        tz = self._time_zone(booking)
        return format_booking_date(booking.startTime, tz), format_time(booking.startTime, tz)

    async def _rebook(self, booking: Booking, name: str, email: str) -> Rebooked:
        if booking.startTime is None:
            raise SchemaMismatchError(self.calendar.SERVICE, f"booking {booking.uid} has no startTime")

        try:
            await self.calendar.cancel_booking(booking.uid, REBOOK_CANCEL_REASON)
        except RemoteFailure as e:
            # The new booking still goes ahead
            logger.warning(f"⚠️ Could not cancel placeholder booking {booking.uid}: {e}")

        request = BookingRequest(
            eventTypeId=booking.eventTypeId or self.settings.CAL_EVENT_TYPE_ID,
            start=to_utc_iso(booking.startTime),
            timeZone=self._time_zone(booking),
            language=self.settings.CAL_LANGUAGE,
            metadata=booking.metadata,
            name=name,
            email=email,
            location=self.settings.CAL_LOCATION,
            notes=REBOOK_NOTES,
        )
        new_booking = await self.calendar.submit_booking(request)
        logger.info(f"✅ Rebooked {booking.uid} as {new_booking.uid} for {email}")
        return Rebooked(new_booking=new_booking)

    async def _send_confirmation(self, booking: Booking, name: str, email: str) -> bool:
        if not self.email_client.is_configured:
            logger.warning("⚠️ Email provider not configured, confirmation email skipped")
            return False

        subject, html = self.compose_confirmation(booking, name)
        result = await asyncio.to_thread(self.email_client.send, email, subject, html)
        if not result.success:
            logger.error(f"❌ Confirmation email to {email} failed: {result.error}")
        return result.success

    def compose_confirmation(self, booking: Booking, name: str) -> tuple:
        tz = self._time_zone(booking)
        date_str, time_str = self._format_start(booking)

        meeting_html = ""
        if booking.meeting_url:
            url = escape(booking.meeting_url, quote=True)
            meeting_html = f'<p><strong>Join your meeting:</strong> <a href="{url}">{escape(booking.meeting_url)}</a></p>'

        subject = f"Your appointment on {date_str} is confirmed"
        html = (
            f"<h2>Appointment confirmed</h2>"
            f"<p>Hi {escape(name)},</p>"
            f"<p>Your appointment is booked for <strong>{date_str}</strong> at <strong>{time_str}</strong> ({escape(tz)}).</p>"
            f"{meeting_html}"
            f"<p>Thank you! - AI Front Desk</p>"
        )
        return subject, html
