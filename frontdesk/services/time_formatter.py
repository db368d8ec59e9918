import re
from datetime import datetime, timezone
from typing import Iterable, List
from zoneinfo import ZoneInfo

from frontdesk.models.calendar_models import Slot

TIME_PATTERN = re.compile(r"^\s*(\d{1,2})(?::(\d{2}))?(?::\d{2})?\s*([AaPp]\.?[Mm]\.?)?\s*$")


def parse_time_of_day(time_str: str) -> tuple:
    """
    Parses "2:00 PM", "2 pm", "14:00" or "14:00:00" into (hour, minute).
    12 PM is noon, 12 AM is midnight.
    """
    match = TIME_PATTERN.match(time_str or "")
    if not match:
        raise ValueError(f"Invalid time: {time_str!r}")

    hours = int(match.group(1))
    minutes = int(match.group(2) or 0)
    period = match.group(3)

    if period:
        if not 1 <= hours <= 12:
            raise ValueError(f"Invalid 12-hour time: {time_str!r}")
        is_pm = period.lower().startswith("p")
        if is_pm and hours != 12:
            hours += 12
        if not is_pm and hours == 12:
            hours = 0
    elif hours > 23:
        raise ValueError(f"Invalid 24-hour time: {time_str!r}")

    if minutes > 59:
        raise ValueError(f"Invalid minutes: {time_str!r}")

    return hours, minutes


def to_local_datetime(date_str: str, time_str: str, tz: str) -> datetime:
    day = datetime.strptime(date_str.strip(), "%Y-%m-%d")
    hours, minutes = parse_time_of_day(time_str)
    return day.replace(hour=hours, minute=minutes, tzinfo=ZoneInfo(tz))


def to_utc_iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_date_time(date_str: str, time_str: str, tz: str) -> str:
    """
    Combines a YYYY-MM-DD date and a time of day, read as wall-clock time in
    the business zone `tz`, into an ISO-8601 UTC instant.
    """
    return to_utc_iso(to_local_datetime(date_str, time_str, tz))


def format_time(dt: datetime, tz: str) -> str:
    local = dt.astimezone(ZoneInfo(tz))
    return local.strftime("%I:%M %p").lstrip("0")


def format_slots(slots: Iterable[Slot], tz: str) -> List[str]:
    return [format_time(slot.time, tz) for slot in slots]


def format_booking_date(dt: datetime, tz: str) -> str:
    local = dt.astimezone(ZoneInfo(tz))
    return f"{local.strftime('%A')}, {local.day} {local.strftime('%B %Y')}"
