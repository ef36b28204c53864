"""Filtered, searched and sorted views over an event collection.

Everything here is a pure function of its arguments: the same records and
the same view settings always give the same ordering. Sorting is stable, so
ties keep the order of the input sequence for every sort key.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, List, NamedTuple, Tuple

from campus_events.models.event import EventRecord

ALL_CATEGORIES = "all"
DEFAULT_SORT = "date-asc"


def collation_key(text: str) -> str:
    """Locale-like comparison key: accents folded, case folded."""
    decomposed = unicodedata.normalize("NFKD", text or "")
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return stripped.casefold()


# sort key -> (key function, descending)
SORTS: Dict[str, Tuple[Callable[[EventRecord], object], bool]] = {
    "date-asc": (lambda e: e.date, False),
    "date-desc": (lambda e: e.date, True),
    "name-asc": (lambda e: collation_key(e.name), False),
    "name-desc": (lambda e: collation_key(e.name), True),
    "category": (lambda e: collation_key(e.category), False),
}


def _matches(event: EventRecord, term: str) -> bool:
    fields = (event.name, event.description, event.location, event.organizer, event.category)
    return any(term in (f or "").lower() for f in fields)


def view(records: Iterable[EventRecord], filter: str = ALL_CATEGORIES,
         search: str = "", sort: str = DEFAULT_SORT) -> List[EventRecord]:
    out = list(records)

    if filter != ALL_CATEGORIES:
        out = [e for e in out if e.category == filter]

    term = (search or "").strip().lower()
    if term:
        out = [e for e in out if _matches(e, term)]

    key, descending = SORTS.get(sort, SORTS[DEFAULT_SORT])
    # sorted(reverse=True) keeps equal elements in input order
    return sorted(out, key=key, reverse=descending)


@dataclass(frozen=True)
class ViewState:
    """Current filter/search/sort selection; ViewState() is the cleared state."""

    filter: str = ALL_CATEGORIES
    search: str = ""
    sort: str = DEFAULT_SORT

    def apply(self, records: Iterable[EventRecord]) -> List[EventRecord]:
        return view(records, self.filter, self.search, self.sort)


class Statistics(NamedTuple):
    total: int
    upcoming: int
    past: int


def statistics(records: Iterable[EventRecord], now: datetime) -> Statistics:
    records = list(records)
    upcoming = sum(1 for e in records if e.date >= now)
    return Statistics(total=len(records), upcoming=upcoming, past=len(records) - upcoming)


__all__ = ["ViewState", "Statistics", "view", "statistics", "collation_key", "SORTS"]
