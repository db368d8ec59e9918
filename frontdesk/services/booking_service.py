import asyncio
from typing import Any, Dict, Optional
from urllib.parse import quote

from pydantic import BaseModel

from frontdesk.core.config import Settings
from frontdesk.core.exceptions import RemoteFailure, SchemaMismatchError
from frontdesk.core.logger import logger
from frontdesk.models.vapi_models import ToolResult
from frontdesk.services.calendar_service import CalendarClient, is_placeholder_email, placeholder_email
from frontdesk.services.notification_service import WhatsAppClient
from frontdesk.services.time_formatter import format_slots

MAX_SPOKEN_SLOTS = 5


# --- Tool arguments ---

class GetSlotsArgs(BaseModel):
    date: str


class BookAppointmentArgs(BaseModel):
    customerName: str
    customerPhone: str
    date: str
    time: str
    customerEmail: Optional[str] = None
    notes: Optional[str] = None


class CancelAppointmentArgs(BaseModel):
    bookingUid: str
    reason: Optional[str] = None


class RescheduleAppointmentArgs(BaseModel):
    bookingUid: str
    newDate: str
    newTime: str
    reason: Optional[str] = None


class BookingService:
    """
    The four scheduling tools exposed to the voice assistant.
    Calendar failures never escape a handler; they become a spoken apology.
    """

    def __init__(self, settings: Settings, calendar: CalendarClient, whatsapp: WhatsAppClient):
        self.settings = settings
        self.calendar = calendar
        self.whatsapp = whatsapp

    def email_confirm_link(self, booking_uid: str, phone: str) -> str:
        base = self.settings.PUBLIC_BASE_URL.rstrip("/")
        return f"{base}/confirm-email.html?booking={booking_uid}&phone={quote(phone, safe='')}"

    async def get_available_slots(self, arguments: Dict[str, Any]) -> ToolResult:
        args = GetSlotsArgs.model_validate(arguments)
        logger.info(f"📅 Getting available slots for: {args.date}")

        try:
            slots = await self.calendar.list_slots(args.date)
        except RemoteFailure:
            return ToolResult(
                success=False,
                error="Failed to get available slots",
                message="I apologize, but I am having trouble checking the calendar right now. Please try again in a moment.",
            )
        except SchemaMismatchError as e:
            return ToolResult(
                success=False,
                error=str(e),
                message="I apologize, but I am having trouble checking the calendar. Please try again.",
            )

        formatted = format_slots(slots, self.settings.BUSINESS_TIMEZONE)
        logger.info(f"✅ Found {len(formatted)} available slots")

        if not formatted:
            return ToolResult(
                success=True,
                slots=[],
                message=f"I do not have any available appointments on {args.date}. Would you like to try a different date?",
            )

        slots_text = ", ".join(formatted[:MAX_SPOKEN_SLOTS])
        return ToolResult(
            success=True,
            slots=formatted,
            message=f"I have the following times available on {args.date}: {slots_text}. Which time works best for you?",
        )

    async def book_appointment(self, arguments: Dict[str, Any]) -> ToolResult:
        args = BookAppointmentArgs.model_validate(arguments)
        logger.info(f"📝 Booking appointment for: {args.customerName}")

        domain = self.settings.PLACEHOLDER_EMAIL_DOMAIN
        email = (args.customerEmail or "").strip()
        pending_email = not email or is_placeholder_email(email, domain)
        if pending_email:
            # Real address arrives later through the WhatsApp link
            email = placeholder_email(args.customerPhone, domain)

        try:
            booking = await self.calendar.create_booking(
                args.customerName, email, args.customerPhone, args.date, args.time, args.notes
            )
        except RemoteFailure as e:
            return ToolResult(
                success=False,
                error=e.detail,
                message="I apologize, but I was unable to create the booking. The time slot may no longer be available. Would you like to try a different time?",
            )
        except SchemaMismatchError as e:
            return ToolResult(
                success=False,
                error=str(e),
                message="I apologize, but I encountered an error while booking your appointment. Please try again.",
            )

        confirm_link = None
        if pending_email:
            confirm_link = self.email_confirm_link(booking.uid, args.customerPhone)
            whatsapp_body = (
                f"Hi {args.customerName}! Your appointment is confirmed for {args.date} at {args.time}.\n\n"
                f"Please click this link to provide your email address and receive your Zoom meeting link:\n"
                f"{confirm_link}\n\nThank you! - AI Front Desk"
            )
            spoken = (
                f"Perfect! I have booked your appointment for {args.time} on {args.date}. "
                "You will receive a WhatsApp message with a link to confirm your email address and get your Zoom meeting link. "
                "Is there anything else I can help you with?"
            )
        else:
            whatsapp_body = (
                f"Hi {args.customerName}! Your appointment is confirmed for {args.date} at {args.time}.\n\n"
                f"A confirmation email with your Zoom meeting link has been sent to {email}.\n\n"
                "Thank you! - AI Front Desk"
            )
            spoken = (
                f"Perfect! I have booked your appointment for {args.time} on {args.date}. "
                f"You will receive a confirmation email at {email} with your Zoom meeting link. "
                "Is there anything else I can help you with?"
            )

        whatsapp_result = await asyncio.to_thread(self.whatsapp.send, args.customerPhone, whatsapp_body)
        if not whatsapp_result.success:
            logger.warning(f"⚠️ WhatsApp send failed: {whatsapp_result.error}")

        return ToolResult(
            success=True,
            bookingId=booking.id,
            bookingUid=booking.uid,
            emailConfirmLink=confirm_link,
            whatsappSent=whatsapp_result.success,
            message=spoken,
        )

    async def cancel_appointment(self, arguments: Dict[str, Any]) -> ToolResult:
        args = CancelAppointmentArgs.model_validate(arguments)
        logger.info(f"❌ Cancelling appointment: {args.bookingUid}")

        try:
            await self.calendar.cancel_booking(args.bookingUid, args.reason)
        except RemoteFailure as e:
            return ToolResult(
                success=False,
                error=e.detail,
                message="I apologize, but I was unable to cancel that appointment. Could you provide your booking confirmation number?",
            )

        return ToolResult(
            success=True,
            message="I have cancelled your appointment. You will receive a confirmation email shortly. Is there anything else I can help you with?",
        )

    async def reschedule_appointment(self, arguments: Dict[str, Any]) -> ToolResult:
        args = RescheduleAppointmentArgs.model_validate(arguments)
        logger.info(f"🔄 Rescheduling appointment: {args.bookingUid}")

        try:
            booking = await self.calendar.reschedule_booking(args.bookingUid, args.newDate, args.newTime, args.reason)
        except RemoteFailure as e:
            return ToolResult(
                success=False,
                error=e.detail,
                message="I apologize, but I was unable to reschedule that appointment. The new time may not be available.",
            )
        except SchemaMismatchError as e:
            return ToolResult(
                success=False,
                error=str(e),
                message="I apologize, but I encountered an error while rescheduling your appointment.",
            )

        return ToolResult(
            success=True,
            bookingId=booking.id,
            bookingUid=booking.uid,
            message=f"Perfect! I have rescheduled your appointment to {args.newTime} on {args.newDate}. You will receive an updated confirmation email. Is there anything else I can help you with?",
        )
