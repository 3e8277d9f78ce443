"""open_now filter: decide whether a listing is currently open

DB-independent. Parses the Google Maps style opening hours stored on
Veterinarian.opening_hours:

    [{"day": "Monday", "hours": "9 AM to 6 PM"}, {"day": "Sunday", "hours": "Closed"}, ...]

All "today" / "now" resolution happens in a single business timezone
(config.BUSINESS_TIMEZONE), independent of server or client timezone.
Parse failures never raise: they yield None, False or the unchanged text.
"""
import re
from datetime import datetime, timezone, tzinfo
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo

from ..config import BUSINESS_TIMEZONE

# Python weekday() order
DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

OPEN_24_HOURS = "Open 24 hours"
CLOSED = "Closed"

_OPEN_24_RE = re.compile(r"open 24 hours", re.IGNORECASE)
_CLOSED_RE = re.compile(r"closed", re.IGNORECASE)
_CLOCK_RE = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*(AM|PM)?$", re.IGNORECASE)
_MERIDIEM_RE = re.compile(r"(AM|PM)", re.IGNORECASE)
# "9 AM to 6 PM", "10:30 AM to 8 PM", "12 to 3 PM": the end always carries AM/PM
_RANGE_RE = re.compile(
    r"([0-9]{1,2}(?::[0-9]{2})?\s*(?:AM|PM)?)\s*to\s*([0-9]{1,2}(?::[0-9]{2})?\s*(?:AM|PM))",
    re.IGNORECASE,
)


def sanitize(text: str) -> str:
    """Replace non-breaking / narrow spaces, collapse whitespace and trim"""
    return re.sub(r"\s+", " ", text.replace("\u00a0", " ").replace("\u202f", " ")).strip()


def _zone(tz: Union[str, tzinfo, None]) -> tzinfo:
    if tz is None:
        return ZoneInfo(BUSINESS_TIMEZONE)
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def to_local(now: datetime, tz: Union[str, tzinfo, None] = None) -> datetime:
    """Convert an instant to wall-clock time in tz (naive datetimes are taken as UTC)"""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(_zone(tz))


def resolve_local_weekday(now: datetime, tz: Union[str, tzinfo, None] = None) -> str:
    """Weekday name ("Monday".."Sunday") of the instant's local date in tz"""
    return DAY_NAMES[to_local(now, tz).weekday()]


def parse_clock_time(token: str, fallback_meridiem: Optional[str] = None) -> Optional[int]:
    """Minutes since midnight for "9 AM", "10:30 pm", "12" (with a fallback meridiem).

    12 AM is minute 0 and 12 PM is minute 720. Returns None when the token
    has no AM/PM and no fallback is given, or when it is not a clock time.
    """
    m = _CLOCK_RE.match(sanitize(token))
    if not m:
        return None
    hour = int(m.group(1))
    minute = int(m.group(2)) if m.group(2) else 0
    if hour > 12 or minute > 59:
        return None

    meridiem = (m.group(3) or fallback_meridiem or "").upper()
    if meridiem not in ("AM", "PM"):
        return None

    if hour == 12:
        hour = 0
    total = hour * 60 + minute
    if meridiem == "PM":
        total += 12 * 60
    return total


def parse_range(text: str) -> Optional[Tuple[int, int]]:
    """(start, end) minutes for the first "<start> to <end>" in text, or None.

    The start's meridiem is taken from the start token when present,
    otherwise inferred from the end ("12 to 3 PM" is 12 PM to 3 PM).
    """
    m = _RANGE_RE.search(sanitize(text))
    if not m:
        return None
    start_token = sanitize(m.group(1))
    end_token = sanitize(m.group(2))

    end = parse_clock_time(end_token)
    if end is None:
        return None

    # Step 1: the start's own meridiem; step 2: the one inferred from the end
    start = parse_clock_time(start_token)
    if start is None:
        end_meridiem = _MERIDIEM_RE.search(end_token).group(1)
        start = parse_clock_time(start_token, fallback_meridiem=end_meridiem)
    if start is None:
        return None
    return start, end


def _fmt(minutes: int) -> str:
    return f"{(minutes // 60) % 24:02d}:{minutes % 60:02d}"


def convert_range_to_display(hours_text: str) -> str:
    """Render an hours string as 24-hour "HH:MM–HH:MM"; unknown formats are returned as-is"""
    text = sanitize(hours_text or "")
    if not text:
        return ""
    if _OPEN_24_RE.search(text):
        return OPEN_24_HOURS
    if _CLOSED_RE.search(text):
        return CLOSED

    parsed = parse_range(text)
    if parsed is None:
        return text
    start, end = parsed

    if end < start:
        return f"{_fmt(start)}–{_fmt(end)} (next day)"
    return f"{_fmt(start)}–{_fmt(end)}"


def is_open_at(opening_hours: Optional[list], now: datetime, tz: Union[str, tzinfo, None] = None) -> bool:
    """True if the schedule says the listing is open at instant `now` (local to tz)"""
    if not opening_hours:
        return False

    local_now = to_local(now, tz)
    today = DAY_NAMES[local_now.weekday()]

    entry = next(
        (h for h in opening_hours if isinstance(h, dict) and h.get("day") == today),
        None,
    )
    if entry is None or not entry.get("hours"):
        return False

    text = sanitize(str(entry["hours"]))
    if _OPEN_24_RE.search(text):
        return True
    if _CLOSED_RE.search(text):
        return False

    parsed = parse_range(text)
    if parsed is None:
        return False
    start, end = parsed

    now_minutes = local_now.hour * 60 + local_now.minute

    # Overnight span, e.g. "10 PM to 2 AM"
    if end < start:
        return now_minutes >= start or now_minutes < end
    # Closing minute counts as open
    return start <= now_minutes <= end


def is_open_now(listing, now: Optional[datetime] = None) -> bool:
    """is_open_at for a Veterinarian row with the current instant and the business timezone"""
    if now is None:
        now = datetime.now(timezone.utc)
    return is_open_at(getattr(listing, "opening_hours", None), now, BUSINESS_TIMEZONE)


def format_opening_hours(opening_hours: Optional[list]) -> list:
    """Opening hours with a 24-hour display string per day, for detail views"""
    result = []
    for entry in opening_hours or []:
        if not isinstance(entry, dict) or not entry.get("day"):
            continue
        hours = str(entry.get("hours") or "")
        result.append({
            "day": entry["day"],
            "hours": hours,
            "display": convert_range_to_display(hours),
        })
    return result
