from functools import lru_cache

from frontdesk.core.config import get_settings
from frontdesk.services.booking_service import BookingService
from frontdesk.services.calendar_service import CalendarClient
from frontdesk.services.correction_store import CorrectionStore, InMemoryCorrectionStore
from frontdesk.services.email_correction import EmailCorrectionWorkflow
from frontdesk.services.notification_service import EmailClient, WhatsAppClient
from frontdesk.services.tool_dispatcher import ToolDispatcher


@lru_cache
def get_calendar_client() -> CalendarClient:
    return CalendarClient(get_settings())


@lru_cache
def get_whatsapp_client() -> WhatsAppClient:
    return WhatsAppClient(get_settings())


@lru_cache
def get_email_client() -> EmailClient:
    return EmailClient(get_settings())


@lru_cache
def get_correction_store() -> CorrectionStore:
    return InMemoryCorrectionStore()


def get_booking_service() -> BookingService:
    return BookingService(get_settings(), get_calendar_client(), get_whatsapp_client())


def get_tool_dispatcher() -> ToolDispatcher:
    return ToolDispatcher(get_booking_service())


def get_email_correction_workflow() -> EmailCorrectionWorkflow:
    return EmailCorrectionWorkflow(
        get_settings(), get_calendar_client(), get_email_client(), get_correction_store()
    )


def close_clients() -> None:
    """Closes the HTTP sessions of any client created so far."""
    for factory in (get_calendar_client, get_whatsapp_client, get_email_client):
        if factory.cache_info().currsize:
            factory().close()
