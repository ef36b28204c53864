"""Import and export of the event collection.

Two interchange formats:

* structured: a JSON array of full records (lossless, importable)
* flat: CSV with a fixed column set (lossy, export only)

Imports are only parsed here; admission of each element is the store's job
(`EventStore.bulk_merge`).
"""

from __future__ import annotations

import csv
import io
import json
import logging
from datetime import date
from typing import Any, Iterable, List

from campus_events.core.display import format_local_datetime
from campus_events.core.errors import FormatError
from campus_events.models.event import EventRecord
from campus_events.utils.config import CONFIG

logger = logging.getLogger(__name__)

FLAT_HEADERS = ["Name", "Date", "Location", "Category", "Organizer", "Description"]
FORMATS = ("json", "csv")


def export_structured(records: Iterable[EventRecord]) -> str:
    return json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False)


def export_flat(records: Iterable[EventRecord]) -> str:
    """CSV text; every field quoted, embedded quotes doubled."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(FLAT_HEADERS)
    for r in records:
        writer.writerow([
            r.name,
            format_local_datetime(r.date),
            r.location,
            r.category_display,
            r.organizer or "",
            r.description or "",
        ])
    return buf.getvalue().rstrip("\n")


def import_structured(text: str) -> List[Any]:
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise FormatError(FormatError.MALFORMED, f"Invalid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise FormatError(FormatError.NOT_A_SEQUENCE, "Invalid format: Expected array of events")
    logger.debug("Parsed %d import candidate(s)", len(data))
    return data


def export_filename(fmt: str, today: date) -> str:
    if fmt not in FORMATS:
        raise ValueError(f"Unknown export format: {fmt!r}")
    return f"{CONFIG['export']['filename_prefix']}-{today.isoformat()}.{fmt}"


def storage_usage_kb(records: Iterable[EventRecord]) -> str:
    """Size of the compact JSON form, in KB with two decimals."""
    compact = json.dumps([r.to_dict() for r in records], separators=(",", ":"))
    return f"{len(compact) / 1024:.2f}"


__all__ = [
    "FLAT_HEADERS",
    "FORMATS",
    "export_structured",
    "export_flat",
    "import_structured",
    "export_filename",
    "storage_usage_kb",
]
