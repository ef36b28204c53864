# Countdown labels for events relative to a reference "now".
# Pure functions: the caller owns any timer and passes `now` on each tick.

from __future__ import annotations

import math
from datetime import datetime, timedelta
from enum import Enum
from typing import NamedTuple

ONE_DAY = timedelta(days=1)
FINISHED = "Ongoing/Finished"


class Bucket(str, Enum):
    FUTURE = "future"
    TODAY = "today"
    PAST = "past"


class Countdown(NamedTuple):
    bucket: Bucket
    label: str


def days_until(date: datetime, now: datetime) -> int:
    return math.ceil((date - now) / ONE_DAY)


def classify(date: datetime, now: datetime) -> Countdown:
    days = days_until(date, now)
    if days > 0:
        return Countdown(Bucket.FUTURE, f"In {days} day{'s' if days != 1 else ''}")
    if days == 0:
        return Countdown(Bucket.TODAY, "Today")
    return Countdown(Bucket.PAST, "Past event")


def needs_live_countdown(date: datetime, now: datetime) -> bool:
    """Whether a ticking countdown is worth showing (today or later)."""
    return days_until(date, now) >= 0


def _split(date: datetime, now: datetime) -> tuple[int, int, int]:
    total_minutes = int((date - now).total_seconds() // 60)
    days, rem = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(rem, 60)
    return days, hours, minutes


def live_remaining(date: datetime, now: datetime) -> str:
    """Remaining time as "2d 5h", "3h 15m" or "42m"; terminal text once started."""
    if date <= now:
        return FINISHED
    days, hours, minutes = _split(date, now)
    if days > 0:
        return f"{days}d {hours}h"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def is_urgent(date: datetime, now: datetime) -> bool:
    """True in the minutes-only tier of live_remaining."""
    if date <= now:
        return False
    days, hours, _ = _split(date, now)
    return days == 0 and hours == 0
