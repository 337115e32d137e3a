"""
Small numeric and datetime helpers shared by the pipeline stages
"""

from datetime import datetime, timezone
from typing import Optional, Union


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    """Clamp a value into [lower, upper]"""
    return max(lower, min(upper, value))


def utcnow() -> datetime:
    """Timezone-aware current UTC time"""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse an ISO-8601 string (or pass through a datetime) into an aware datetime"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    return ensure_aware(datetime.fromisoformat(text))


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime as ISO-8601"""
    if value is None:
        return None
    return ensure_aware(value).isoformat()


def hours_between(earlier: datetime, later: datetime) -> float:
    """Hours elapsed from earlier to later"""
    return (ensure_aware(later) - ensure_aware(earlier)).total_seconds() / 3600.0


def js_weekday(value: datetime) -> int:
    """Day of week with Sunday = 0 ... Saturday = 6"""
    return (value.weekday() + 1) % 7
