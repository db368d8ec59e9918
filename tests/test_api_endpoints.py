from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from frontdesk.api.dependencies import get_email_correction_workflow, get_tool_dispatcher
from frontdesk.core.exceptions import NotFoundError, PreconditionError
from frontdesk.main import app
from frontdesk.models.calendar_models import CorrectionRecord
from frontdesk.models.vapi_models import ToolCallResult, ToolResult
from frontdesk.services.email_correction import CorrectionResult, FallbackNotified

client = TestClient(app)


@pytest.fixture
def dispatcher():
    mock = MagicMock()
    mock.dispatch = AsyncMock(return_value=[])
    app.dependency_overrides[get_tool_dispatcher] = lambda: mock
    yield mock
    app.dependency_overrides.clear()


@pytest.fixture
def workflow():
    mock = MagicMock()
    mock.correct_email = AsyncMock()
    app.dependency_overrides[get_email_correction_workflow] = lambda: mock
    yield mock
    app.dependency_overrides.clear()


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data
    assert isinstance(data["calApiConfigured"], bool)


def test_webhook_ignores_other_message_types(dispatcher):
    response = client.post("/webhook", json={"message": {"type": "status-update"}})

    assert response.status_code == 200
    assert response.json() == {"results": []}
    dispatcher.dispatch.assert_not_called()


def test_webhook_ignores_non_json_body(dispatcher):
    response = client.post("/webhook", content=b"not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 200
    assert response.json() == {"results": []}


def test_webhook_returns_results(dispatcher):
    dispatcher.dispatch.return_value = [
        ToolCallResult(toolCallId="call_1", result=ToolResult(success=True, slots=[], message="No slots."))
    ]
    calls = [{"id": "call_1", "type": "function", "function": {"name": "getAvailableSlots", "arguments": {"date": "2024-01-15"}}}]

    response = client.post("/webhook", json={"message": {"type": "tool-calls", "toolCallList": calls}})

    assert response.status_code == 200
    assert response.json() == {
        "results": [{"toolCallId": "call_1", "result": {"success": True, "message": "No slots.", "slots": []}}]
    }
    dispatcher.dispatch.assert_awaited_once_with(calls)


def test_webhook_empty_tool_call_list(dispatcher):
    response = client.post("/webhook", json={"message": {"type": "tool-calls", "toolCallList": []}})

    assert response.json() == {"results": []}


def test_update_email_success(workflow):
    record = CorrectionRecord(
        original_uid="uid-1", name="Jane", email="jane@example.com",
        original_email="pending-1@scteeth.temp", original_name="Jane",
    )
    workflow.correct_email.return_value = CorrectionResult(
        outcome=FallbackNotified(email_sent=True), record=record,
        date="Monday, 15 January 2024", time="2:00 PM", name="Jane",
    )

    response = client.post("/api/update-email", json={"bookingUid": "uid-1", "email": "jane@example.com", "phone": "+1"})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Email confirmed successfully",
        "booking": {"date": "Monday, 15 January 2024", "time": "2:00 PM", "name": "Jane"},
    }


def test_update_email_missing_fields(workflow):
    workflow.correct_email.side_effect = PreconditionError("Booking ID and email are required")

    response = client.post("/api/update-email", json={"phone": "+1"})

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_update_email_not_found(workflow):
    workflow.correct_email.side_effect = NotFoundError("Booking not found")

    response = client.post("/api/update-email", json={"bookingUid": "nope", "email": "jane@example.com"})

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Booking not found"}


def test_update_email_unexpected_error(workflow):
    workflow.correct_email.side_effect = RuntimeError("kaboom")

    response = client.post("/api/update-email", json={"bookingUid": "uid-1", "email": "jane@example.com"})

    assert response.status_code == 500
    assert response.json()["success"] is False
