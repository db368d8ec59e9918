import json
from typing import Optional, List, Dict, Any, Union

from pydantic import BaseModel, ConfigDict, field_validator

# --- Incoming Request Models ---

class VapiFunction(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    arguments: Dict[str, Any] = {}

    @field_validator("arguments", mode="before")
    @classmethod
    def decode_arguments(cls, value: Union[str, Dict[str, Any], None]) -> Dict[str, Any]:
        # Some assistants deliver arguments as a JSON encoded string
        if value is None or value == "":
            return {}
        if isinstance(value, str):
            decoded = json.loads(value)
            if not isinstance(decoded, dict):
                raise ValueError("Tool arguments must decode to an object")
            return decoded
        return value


class VapiToolCall(BaseModel):
    """A single tool invocation from the voice assistant."""
    model_config = ConfigDict(frozen=True)

    id: str
    type: str = "function"
    function: VapiFunction


# --- Outgoing Response Models ---

class ToolResult(BaseModel):
    """
    Result of one tool call. `message` is read out to the caller, so it is
    required on failures too.
    """
    success: bool
    message: str
    error: Optional[str] = None
    slots: Optional[List[str]] = None
    bookingId: Optional[int] = None
    bookingUid: Optional[str] = None
    emailConfirmLink: Optional[str] = None
    whatsappSent: Optional[bool] = None


class ToolCallResult(BaseModel):
    toolCallId: Optional[str] = None
    result: ToolResult


class VapiToolCallResponse(BaseModel):
    results: List[ToolCallResult] = []

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
