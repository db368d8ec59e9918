from unittest.mock import MagicMock

import pytest
import requests

from conftest import booking_payload, make_response
from frontdesk.core.exceptions import RemoteFailure, SchemaMismatchError
from frontdesk.services.calendar_service import (
    NOTES_PENDING_EMAIL,
    NOTES_REAL_EMAIL,
    CalendarClient,
    is_placeholder_email,
    placeholder_email,
)


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(settings, session):
    return CalendarClient(settings, session=session)


def test_placeholder_email_keeps_only_digits():
    assert placeholder_email("+44 7700 900-123", "scteeth.temp") == "pending-447700900123@scteeth.temp"


def test_is_placeholder_email():
    assert is_placeholder_email("pending-1@scteeth.temp", "scteeth.temp")
    assert not is_placeholder_email("jane@example.com", "scteeth.temp")
    assert not is_placeholder_email(None, "scteeth.temp")


@pytest.mark.asyncio
async def test_list_slots_reads_the_requested_day(client, session):
    session.request.return_value = make_response(json_data={
        "slots": {"2024-01-15": [{"time": "2024-01-15T09:00:00Z"}, {"time": "2024-01-15T10:00:00Z"}]}
    })

    slots = await client.list_slots("2024-01-15")

    assert len(slots) == 2
    method, url = session.request.call_args.args
    params = session.request.call_args.kwargs["params"]
    assert method == "GET"
    assert url == "https://cal.test/v1/slots"
    assert params["apiKey"] == "cal_test_key"
    assert params["eventTypeId"] == 3917527
    assert params["startTime"] == "2024-01-15T00:00:00Z"
    assert params["endTime"] == "2024-01-15T23:59:59Z"


@pytest.mark.asyncio
async def test_list_slots_missing_day_is_empty(client, session):
    session.request.return_value = make_response(json_data={"slots": {}})
    assert await client.list_slots("2024-01-15") == []


@pytest.mark.asyncio
async def test_list_slots_error_status_raises_remote_failure(client, session):
    session.request.return_value = make_response(status_code=500, text="boom")

    with pytest.raises(RemoteFailure) as exc:
        await client.list_slots("2024-01-15")
    assert exc.value.status_code == 500
    assert exc.value.detail == "boom"


@pytest.mark.asyncio
async def test_transport_error_raises_remote_failure(client, session):
    session.request.side_effect = requests.ConnectionError("refused")

    with pytest.raises(RemoteFailure):
        await client.list_slots("2024-01-15")


@pytest.mark.asyncio
async def test_create_booking_builds_payload(client, session):
    session.request.return_value = make_response(json_data=booking_payload())

    booking = await client.create_booking(
        "Jane Smith", "pending-447700900123@scteeth.temp", "+447700900123", "2024-01-15", "2:00 PM"
    )

    assert booking.id == 101
    assert booking.uid == "uid-original"
    payload = session.request.call_args.kwargs["json"]
    assert payload["eventTypeId"] == 3917527
    assert payload["start"] == "2024-01-15T14:00:00.000Z"
    assert payload["timeZone"] == "Europe/London"
    assert payload["responses"]["location"] == {"optionValue": "", "value": "integrations:zoom"}
    assert payload["responses"]["notes"] == NOTES_PENDING_EMAIL


@pytest.mark.asyncio
async def test_create_booking_real_email_notes(client, session):
    session.request.return_value = make_response(json_data=booking_payload(email="jane@example.com"))

    await client.create_booking("Jane Smith", "jane@example.com", "+447700900123", "2024-01-15", "14:00")

    assert session.request.call_args.kwargs["json"]["responses"]["notes"] == NOTES_REAL_EMAIL


@pytest.mark.asyncio
async def test_create_booking_schema_mismatch(client, session):
    session.request.return_value = make_response(json_data={"data": {"id": 1}})

    with pytest.raises(SchemaMismatchError):
        await client.create_booking("Jane", "jane@example.com", "+1", "2024-01-15", "14:00")


@pytest.mark.asyncio
async def test_cancel_booking_default_reason(client, session):
    session.request.return_value = make_response(json_data=None)

    await client.cancel_booking("uid-1")

    method, url = session.request.call_args.args
    assert method == "POST"
    assert url == "https://cal.test/v1/bookings/uid-1/cancel"
    assert session.request.call_args.kwargs["json"] == {"cancellationReason": "Cancelled by customer"}


@pytest.mark.asyncio
async def test_reschedule_booking(client, session):
    session.request.return_value = make_response(json_data=booking_payload(uid="uid-1", id=202))

    booking = await client.reschedule_booking("uid-1", "2024-01-16", "10:30 AM")

    assert booking.id == 202
    assert session.request.call_args.kwargs["json"] == {
        "start": "2024-01-16T10:30:00.000Z",
        "reschedulingReason": "Rescheduled by customer",
    }


@pytest.mark.asyncio
async def test_get_booking_filters_by_uid(client, session):
    session.request.return_value = make_response(json_data={
        "bookings": [booking_payload(uid="other", id=1), booking_payload(uid="wanted", id=2)]
    })

    booking = await client.get_booking("wanted")
    assert booking.id == 2
    assert await client.get_booking("missing") is None


@pytest.mark.asyncio
async def test_get_booking_tolerates_null_metadata(client, session):
    session.request.return_value = make_response(json_data={
        "bookings": [booking_payload(uid="uid-other", id=1, metadata=None), booking_payload()]
    })

    booking = await client.get_booking("uid-original")

    assert booking.id == 101
    assert booking.meeting_url == "https://zoom.us/j/123"
