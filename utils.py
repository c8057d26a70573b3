import math
import re
from datetime import date, datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo

IST = ZoneInfo("Asia/Kolkata")

_LOOSE_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_CODECHEF_TEXT_FORMAT = "%d %b %Y %H:%M:%S"


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def now_ms() -> int:
    return int(now_utc().timestamp() * 1000)


def to_finite(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(num):
        return None
    return num


def to_count(value: Any) -> int:
    """Coerce an upstream counter to a non-negative int, 0 when unusable."""
    if isinstance(value, str):
        match = re.match(r"\s*-?\d+", value)
        if not match:
            return 0
        value = match.group(0)
    num = to_finite(value)
    if num is None:
        return 0
    return max(0, int(num))


def parse_datetime(value: Any, default_tz=timezone.utc) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    text = " ".join(value.split())
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        match = _LOOSE_DATE_RE.match(text)
        if match:
            try:
                dt = datetime(*(int(part) for part in match.groups()))
            except ValueError:
                return None
        else:
            try:
                dt = datetime.strptime(text, _CODECHEF_TEXT_FORMAT)
            except ValueError:
                return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=default_tz)
    return dt


def to_epoch_ms(value: Any, default_tz=timezone.utc) -> float | None:
    dt = parse_datetime(value, default_tz)
    if dt is None:
        return None
    return dt.timestamp() * 1000


def to_utc_date(value: Any) -> date | None:
    dt = parse_datetime(value)
    if dt is None:
        return None
    return dt.astimezone(timezone.utc).date()


def canonical_date(value: Any) -> str | None:
    day = to_utc_date(value)
    return day.isoformat() if day else None
