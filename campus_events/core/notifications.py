# Upcoming-event reminders: events starting within the reminder window get
# exactly one reminder. The check is idempotent and safe to skip; the caller
# decides how often to run it (the CLI `remind` command, cron, a timer).

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from campus_events.core.delivery import deliver_reminders
from campus_events.core.display import format_time
from campus_events.models.event import EventRecord
from campus_events.utils.config import CONFIG
from campus_events.utils.persistance import load_json, update_json

logger = logging.getLogger(__name__)


def due_reminders(records: Iterable[EventRecord], now: datetime,
                  window_minutes: int = 60,
                  notified: Iterable[str] = ()) -> List[Dict]:
    """
    Returns reminders for events with now < date < now + window that were not
    notified before. Each reminder: { "id", "title", "body", "at" }.
    """
    horizon = now + timedelta(minutes=window_minutes)
    seen = {str(n) for n in notified}
    out: List[Dict] = []
    for ev in records:
        if not (now < ev.date < horizon) or str(ev.id) in seen:
            continue
        out.append({
            "id": str(ev.id),
            "title": f"Upcoming Event: {ev.name}",
            "body": f"Starts at {format_time(ev.date)} in {ev.location}",
            "at": now.isoformat(timespec="seconds"),
        })
    return out


def check_upcoming_events(records: Iterable[EventRecord], now: Optional[datetime] = None,
                          ledger_path: str | Path | None = None) -> List[Dict]:
    """Deliver reminders not sent yet and remember their ids. Returns what was sent."""
    rcfg = CONFIG["reminders"]
    if not rcfg.get("enabled", True):
        return []

    now = now or datetime.now()
    records = list(records)
    ledger = Path(ledger_path or rcfg["ledger_path"])
    notified = load_json(ledger, [])

    reminders = due_reminders(records, now, rcfg.get("window_minutes", 60), notified)
    if not reminders:
        return []

    deliver_reminders(reminders, sent_at=now)
    # started or deleted events can never be due again
    upcoming = {str(ev.id) for ev in records if ev.date > now}
    new_ids = [r["id"] for r in reminders]
    update_json(ledger, lambda cur: [i for i in cur if i in upcoming] + new_ids, [])
    logger.info("Sent %d reminder(s)", len(reminders))
    return reminders
