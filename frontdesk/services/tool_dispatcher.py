from typing import Any, Awaitable, Callable, Dict, List

from frontdesk.core.logger import logger
from frontdesk.models.vapi_models import ToolCallResult, ToolResult, VapiToolCall
from frontdesk.services.booking_service import BookingService

ToolHandler = Callable[[Dict[str, Any]], Awaitable[ToolResult]]


class ToolDispatcher:
    """
    Routes a batch of tool calls to their handlers, one at a time and in
    order. A failing call turns into an apology result; it never stops the
    rest of the batch.
    """

    def __init__(self, booking_service: BookingService):
        self.handlers: Dict[str, ToolHandler] = {
            "getAvailableSlots": booking_service.get_available_slots,
            "bookAppointment": booking_service.book_appointment,
            "cancelAppointment": booking_service.cancel_appointment,
            "rescheduleAppointment": booking_service.reschedule_appointment,
        }

    async def dispatch(self, tool_calls: List[Dict[str, Any]]) -> List[ToolCallResult]:
        results: List[ToolCallResult] = []
        if not tool_calls:
            logger.info("⚠️ No tool calls in message")
            return results

        logger.info(f"📞 Processing {len(tool_calls)} tool call(s)")

        for raw_call in tool_calls:
            if not isinstance(raw_call, dict):
                logger.warning(f"⚠️ Skipping malformed tool call: {raw_call!r}")
                continue

            call_type = raw_call.get("type", "function")
            if call_type != "function":
                logger.info(f"⚠️ Skipping non-function tool call: {call_type}")
                continue

            call_id = raw_call.get("id")
            if call_id is not None:
                call_id = str(call_id)
            try:
                tool_call = VapiToolCall.model_validate(raw_call)
                result = await self.run(tool_call)
            except Exception as e:
                logger.exception(f"❌ Error processing tool call {call_id}: {e}")
                result = ToolResult(
                    success=False,
                    error=str(e),
                    message="I apologize, but I encountered an unexpected error. Please try again.",
                )

            results.append(ToolCallResult(toolCallId=call_id, result=result))

        logger.info(f"✅ Returning {len(results)} result(s)")
        return results

    async def run(self, tool_call: VapiToolCall) -> ToolResult:
        name = tool_call.function.name
        logger.info(f"🔔 Function: {name}")
        logger.debug(f"📥 Parameters: {tool_call.function.arguments}")

        handler = self.handlers.get(name)
        if handler is None:
            logger.warning(f"❓ Unknown function: {name}")
            return ToolResult(
                success=False,
                error=f"Unknown function: {name}",
                message="I apologize, but I am not able to perform that action right now.",
            )

        result = await handler(tool_call.function.arguments)
        logger.debug(f"📤 Result: {result.model_dump(exclude_none=True)}")
        return result
