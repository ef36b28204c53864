# Display strings shared by the CLI, the API and the CSV export.

from datetime import datetime


def _hour12(dt: datetime) -> tuple:
    hour = dt.hour % 12 or 12
    return hour, "AM" if dt.hour < 12 else "PM"


def format_event_date(dt: datetime) -> str:
    """Card style date, e.g. "Wed, Mar 5, 2025, 09:30 AM"."""
    hour, ampm = _hour12(dt)
    return f"{dt.strftime('%a, %b')} {dt.day}, {dt.year}, {hour:02d}:{dt.minute:02d} {ampm}"


def format_local_datetime(dt: datetime) -> str:
    """Short locale style, e.g. "3/5/2025, 9:30:00 AM"."""
    hour, ampm = _hour12(dt)
    return f"{dt.month}/{dt.day}/{dt.year}, {hour}:{dt.minute:02d}:{dt.second:02d} {ampm}"


def format_time(dt: datetime) -> str:
    hour, ampm = _hour12(dt)
    return f"{hour}:{dt.minute:02d}:{dt.second:02d} {ampm}"


def event_count_label(count: int) -> str:
    return f"{count} event{'s' if count != 1 else ''}"
