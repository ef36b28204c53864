# campus_events/api/routes_events.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel
from starlette.requests import Request

from campus_events.campus_calendar.store import EventStore
from campus_events.core import countdown, query, transfer
from campus_events.core.display import event_count_label
from campus_events.core.errors import EventValidationError, FormatError, PersistenceError
from campus_events.models.event import EventDraft, EventRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["events"])


# ---------- App state accessors ----------
def get_store(request: Request) -> EventStore:
    store: EventStore = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=500, detail="Event store not initialized")
    return store


# ---------- Schemas ----------
class EventOut(BaseModel):
    id: str
    name: str
    date: datetime
    location: str
    category: str
    category_display: str
    description: Optional[str] = None
    organizer: str
    capacity: Optional[int] = None
    created: Optional[datetime] = None
    countdown: str
    bucket: str

    @classmethod
    def from_record(cls, r: EventRecord, now: datetime) -> "EventOut":
        cd = countdown.classify(r.date, now)
        return cls(
            id=str(r.id), name=r.name, date=r.date, location=r.location,
            category=r.category, category_display=r.category_display,
            description=r.description, organizer=r.organizer_display,
            capacity=r.capacity, created=r.created,
            countdown=cd.label, bucket=cd.bucket.value,
        )


class StatsOut(BaseModel):
    total: int
    upcoming: int
    past: int
    label: str
    data_kb: str


class CountdownOut(BaseModel):
    id: str
    bucket: str
    label: str
    remaining: str
    urgent: bool


class MessageResponse(BaseModel):
    message: str


def _persist_failed(exc: PersistenceError) -> HTTPException:
    return HTTPException(status_code=500, detail=f"Storage error: {exc}")


# ---------- Routes ----------
@router.get("/events", response_model=List[EventOut])
def list_events(category: str = query.ALL_CATEGORIES, search: str = "",
                sort: str = query.DEFAULT_SORT,
                store: EventStore = Depends(get_store)):
    state = query.ViewState(filter=category, search=search, sort=sort)
    now = datetime.now()
    return [EventOut.from_record(r, now) for r in state.apply(store.all())]


@router.post("/events", response_model=EventOut, status_code=201)
def add_event(body: EventDraft, store: EventStore = Depends(get_store)):
    try:
        ev = store.add(body)
    except EventValidationError as exc:
        raise HTTPException(status_code=422, detail={"kind": exc.kind, "message": exc.message})
    except PersistenceError as exc:
        raise _persist_failed(exc)
    return EventOut.from_record(ev, datetime.now())


@router.get("/events/{event_id}", response_model=EventOut)
def get_event(event_id: str, store: EventStore = Depends(get_store)):
    ev = store.get(event_id)
    if ev is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return EventOut.from_record(ev, datetime.now())


@router.get("/events/{event_id}/countdown", response_model=CountdownOut)
def event_countdown(event_id: str, store: EventStore = Depends(get_store)):
    ev = store.get(event_id)
    if ev is None:
        raise HTTPException(status_code=404, detail="Event not found")
    now = datetime.now()
    cd = countdown.classify(ev.date, now)
    return CountdownOut(
        id=str(ev.id), bucket=cd.bucket.value, label=cd.label,
        remaining=countdown.live_remaining(ev.date, now),
        urgent=countdown.is_urgent(ev.date, now),
    )


@router.delete("/events/{event_id}", response_model=MessageResponse)
def delete_event(event_id: str, store: EventStore = Depends(get_store)):
    try:
        ok = store.remove(event_id)
    except PersistenceError as exc:
        raise _persist_failed(exc)
    if not ok:
        raise HTTPException(status_code=404, detail="Event not found")
    return MessageResponse(message="Event deleted successfully!")


@router.delete("/events", response_model=MessageResponse)
def clear_events(store: EventStore = Depends(get_store)):
    try:
        store.clear()
    except PersistenceError as exc:
        raise _persist_failed(exc)
    return MessageResponse(message="All events cleared successfully!")


@router.get("/stats", response_model=StatsOut)
def stats(store: EventStore = Depends(get_store)):
    records = store.all()
    s = query.statistics(records, datetime.now())
    return StatsOut(total=s.total, upcoming=s.upcoming, past=s.past,
                    label=event_count_label(s.total),
                    data_kb=transfer.storage_usage_kb(records))


@router.get("/export/{fmt}")
def export_events(fmt: str, store: EventStore = Depends(get_store)):
    if fmt not in transfer.FORMATS:
        raise HTTPException(status_code=404, detail=f"Unknown export format: {fmt}")
    records = store.all()
    if fmt == "json":
        content, media_type = transfer.export_structured(records), "application/json"
    else:
        content, media_type = transfer.export_flat(records), "text/csv"
    filename = transfer.export_filename(fmt, date.today())
    return Response(content=content, media_type=media_type,
                    headers={"Content-Disposition": f'attachment; filename="{filename}"'})


@router.post("/import", response_model=MessageResponse)
async def import_events(request: Request, store: EventStore = Depends(get_store)):
    """Body: the raw structured export text (a JSON array of events)."""
    try:
        payload = (await request.body()).decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="Import failed: body is not UTF-8 text")
    try:
        candidates = transfer.import_structured(payload)
    except FormatError as exc:
        raise HTTPException(status_code=400, detail=f"Import failed: {exc.message}")
    try:
        count = store.bulk_merge(candidates)
    except PersistenceError as exc:
        raise _persist_failed(exc)
    if count == 0:
        raise HTTPException(status_code=400, detail="Import failed: No valid events found in file")
    return MessageResponse(message=f"{count} events imported successfully!")


# ---------- Mount helper ----------
def mount_event_routes(app, store: EventStore) -> None:
    """
    Attach the store to app.state and include this router.
        mount_event_routes(app, store)
    """
    app.state.store = store
    app.include_router(router)


__all__ = ["router", "mount_event_routes"]
