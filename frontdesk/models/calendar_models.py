from typing import Optional, List, Dict, Any, Type, TypeVar
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from frontdesk.core.exceptions import SchemaMismatchError

T = TypeVar("T", bound=BaseModel)


def parse_response(model: Type[T], data: Any, service: str = "Cal.com") -> T:
    """Validates a collaborator response, failing fast on schema mismatch."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise SchemaMismatchError(service, str(e)) from e


# --- Cal.com v1 response schemas ---

class Slot(BaseModel):
    time: datetime


class SlotsResponse(BaseModel):
    # { "slots": { "2025-12-18": [{"time": "ISO"}, ...] } }
    slots: Dict[str, List[Slot]] = {}


class Attendee(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    email: str = ""
    timeZone: Optional[str] = None


class Booking(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    uid: str
    startTime: Optional[datetime] = None
    eventTypeId: Optional[int] = None
    attendees: List[Attendee] = []
    metadata: Dict[str, Any] = {}
    description: Optional[str] = None

    @field_validator("metadata", mode="before")
    @classmethod
    def null_metadata(cls, value: Any) -> Any:
        # Cal.com sends null for bookings without metadata
        return {} if value is None else value

    @property
    def attendee(self) -> Attendee:
        return self.attendees[0] if self.attendees else Attendee()

    @property
    def meeting_url(self) -> Optional[str]:
        return self.metadata.get("videoCallUrl")


class BookingsResponse(BaseModel):
    bookings: List[Booking] = []


# --- Outgoing request ---

class BookingRequest(BaseModel):
    """Body of POST /bookings."""
    eventTypeId: int
    start: str
    timeZone: str
    language: str = "en"
    metadata: Dict[str, Any] = {}
    name: str
    email: str
    location: str
    notes: str = ""

    def to_payload(self) -> Dict[str, Any]:
        return {
            "eventTypeId": self.eventTypeId,
            "start": self.start,
            "timeZone": self.timeZone,
            "language": self.language,
            "metadata": self.metadata,
            "responses": {
                "name": self.name,
                "email": self.email,
                "location": {"optionValue": "", "value": self.location},
                "notes": self.notes,
            },
        }


# --- Corrections ---

class CorrectionRecord(BaseModel):
    original_uid: str
    name: str
    email: str
    phone: Optional[str] = None
    original_email: str
    original_name: str
    corrected_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    new_booking_uid: Optional[str] = None
