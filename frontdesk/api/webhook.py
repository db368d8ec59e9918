from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from frontdesk.api.dependencies import get_tool_dispatcher
from frontdesk.core.logger import logger
from frontdesk.models.vapi_models import VapiToolCallResponse
from frontdesk.services.tool_dispatcher import ToolDispatcher

router = APIRouter()


@router.post("/webhook")
async def vapi_webhook(
    request: Request,
    dispatcher: ToolDispatcher = Depends(get_tool_dispatcher),
) -> Dict[str, Any]:
    """
    Handle incoming webhooks from Vapi. The body is read manually so that a
    malformed payload still gets a well-formed empty answer.
    """
    logger.info(f"🔔 Webhook received: {datetime.now(timezone.utc).isoformat()}")
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("⚠️ Webhook body is not JSON, ignoring")
        return VapiToolCallResponse().to_payload()

    message = payload.get("message") if isinstance(payload, dict) else None
    if not isinstance(message, dict) or message.get("type") != "tool-calls":
        msg_type = message.get("type") if isinstance(message, dict) else None
        logger.info(f"⚠️ Not a tool-calls message, ignoring (type: {msg_type})")
        return VapiToolCallResponse().to_payload()

    tool_calls = message.get("toolCallList") or message.get("toolCalls") or []
    if not isinstance(tool_calls, list):
        logger.warning("⚠️ toolCallList is not a list, ignoring")
        tool_calls = []

    results = await dispatcher.dispatch(tool_calls)
    return VapiToolCallResponse(results=results).to_payload()
