# Event collection: the authoritative list of event records (with persistence)

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from campus_events.campus_calendar.backends import Persistence
from campus_events.campus_calendar.seed import sample_events
from campus_events.core.errors import EventValidationError, PersistenceError
from campus_events.models.event import EventDraft, EventId, EventRecord, same_id

logger = logging.getLogger(__name__)


def new_event_id() -> str:
    return uuid.uuid4().hex


def _is_blank_id(value: Any) -> bool:
    return value is None or value == "" or value == 0


class EventStore:
    """Ordered (insertion order) collection of EventRecord values.

    Mutations persist through the injected backend before they return; if the
    backend fails the in-memory change is undone and PersistenceError raised.
    """

    def __init__(self, persistence: Persistence,
                 clock: Callable[[], datetime] = datetime.now):
        self._persistence = persistence
        self._clock = clock
        self._events: List[EventRecord] = []
        self._lock = threading.RLock()

    # ---------- reading ----------
    def all(self) -> List[EventRecord]:
        with self._lock:
            return list(self._events)

    def get(self, event_id: EventId) -> Optional[EventRecord]:
        with self._lock:
            for ev in self._events:
                if same_id(ev.id, event_id):
                    return ev
        return None

    def __len__(self) -> int:
        return len(self._events)

    # ---------- loading ----------
    def load(self) -> List[EventRecord]:
        """Read the persisted collection; seed samples when nothing was ever stored."""
        with self._lock:
            try:
                raw = self._persistence.load()
                erased = not raw and self._persistence.is_erased()
            except PersistenceError as exc:
                logger.warning("Stored events unreadable, starting empty: %s", exc)
                self._events = []
                return self.all()

            if raw is not None and not isinstance(raw, list):
                logger.warning("Stored events are not a list (%s), starting empty",
                               type(raw).__name__)
                self._events = []
                return self.all()

            if not raw:
                if erased:
                    logger.info("Collection was cleared; not seeding")
                    self._events = []
                    return self.all()
                self._events = sample_events(self._clock())
                logger.info("No stored events; seeded %d samples", len(self._events))
                try:
                    self._persist()
                except PersistenceError as exc:
                    logger.warning("Could not persist sample events: %s", exc)
                return self.all()

            events = []
            for item in raw:
                try:
                    events.append(EventRecord.model_validate(item))
                except ValidationError as exc:
                    logger.warning("Skipping malformed stored event: %s",
                                   exc.errors(include_url=False))
            self._events = events
            logger.info("Loaded %d events", len(events))
            return self.all()

    # ---------- mutations ----------
    def add(self, draft: Union[EventDraft, Mapping]) -> EventRecord:
        """Create, validate and persist a new event. Its date must not be in the past."""
        if not isinstance(draft, EventDraft):
            try:
                draft = EventDraft.model_validate(draft)
            except ValidationError as exc:
                raise EventValidationError(
                    EventValidationError.INVALID_EVENT,
                    "Event is missing required fields or has invalid values",
                    exc.errors(include_url=False),
                ) from exc

        now = self._clock()
        if draft.date < now:
            raise EventValidationError(
                EventValidationError.FUTURE_DATE_REQUIRED,
                "Event date must be in the future!",
            )

        record = EventRecord(id=new_event_id(), created=now, **draft.model_dump())
        with self._lock:
            self._mutate(lambda events: events + [record])
        logger.info("Added event %s (%s)", record.id, record.name)
        return record

    def remove(self, event_id: EventId) -> bool:
        """Delete the event with *event_id*; returns False (no-op) if absent."""
        with self._lock:
            if self.get(event_id) is None:
                return False
            self._mutate(lambda events: [e for e in events if not same_id(e.id, event_id)])
        logger.info("Removed event %s", event_id)
        return True

    def bulk_merge(self, candidates: Iterable[Any]) -> int:
        """Admit valid candidates (no future-date rule), persist once, return the count."""
        with self._lock:
            taken = {str(e.id) for e in self._events}
            admitted: List[EventRecord] = []
            rejected = 0
            for idx, cand in enumerate(candidates):
                record = self._admit(cand, taken)
                if record is None:
                    rejected += 1
                    logger.debug("Rejected import candidate #%d", idx)
                    continue
                taken.add(str(record.id))
                admitted.append(record)

            if rejected:
                logger.warning("Import rejected %d invalid event(s)", rejected)
            if not admitted:
                return 0
            self._mutate(lambda events: events + admitted)
        logger.info("Imported %d event(s)", len(admitted))
        return len(admitted)

    def clear(self) -> None:
        """Drop every event and erase the stored collection."""
        with self._lock:
            previous = self._events
            self._events = []
            try:
                self._persistence.erase()
            except PersistenceError:
                self._events = previous
                logger.error("Failed to clear stored events; collection unchanged")
                raise
        logger.info("Cleared all events")

    # ---------- internals ----------
    def _admit(self, cand: Any, taken: set) -> Optional[EventRecord]:
        if not isinstance(cand, Mapping):
            return None
        data: Dict[str, Any] = dict(cand)
        if _is_blank_id(data.get("id")):
            data["id"] = new_event_id()
        try:
            record = EventRecord.model_validate(data)
        except ValidationError as exc:
            logger.debug("Invalid import candidate: %s", exc.errors(include_url=False))
            return None
        if str(record.id) in taken:
            fresh = new_event_id()
            logger.warning("Import id %s already in use; stored as %s", record.id, fresh)
            record = record.model_copy(update={"id": fresh})
        return record

    def _mutate(self, change: Callable[[List[EventRecord]], List[EventRecord]]) -> None:
        previous = self._events
        self._events = change(list(previous))
        try:
            self._persist()
        except PersistenceError:
            self._events = previous
            logger.error("Failed to persist events; change rolled back")
            raise

    def _persist(self) -> None:
        self._persistence.save([e.to_dict() for e in self._events])


__all__ = ["EventStore", "new_event_id"]
