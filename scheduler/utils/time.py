import math
import time
from datetime import datetime, timezone
from typing import Optional

from ..config import MS_PER_DAY

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE


def now_ms() -> int:
    return int(time.time() * 1000)


def ms_to_datetime(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def to_utc_iso(ms: int) -> str:
    return ms_to_datetime(ms).isoformat()


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def pretty_print_interval(interval: float) -> str:
    """Largest unit the interval exceeds, rounded: "3 days", "1 hour", "45 seconds"."""
    days = interval / MS_PER_DAY
    if days > 1:
        return _plural(_round_half_up(days), "day")
    hours = interval / MS_PER_HOUR
    if hours > 1:
        return _plural(_round_half_up(hours), "hour")
    minutes = interval / MS_PER_MINUTE
    if minutes > 1:
        return _plural(_round_half_up(minutes), "minute")
    return _plural(_round_half_up(interval / MS_PER_SECOND), "second")


def pretty_print_due(when_due: int, now: Optional[int] = None) -> str:
    if now is None:
        now = now_ms()
    return f"Due in {pretty_print_interval(when_due - now)}"
