# Reminder delivery: console echo plus an append-only JSONL outbox that other
# tools (a mailer, a desktop notifier) can tail.

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, Optional

from campus_events.utils.config import CONFIG

logger = logging.getLogger(__name__)

SOURCE = "campus-events"


def outbox_line(reminder: Dict, sent_at: datetime) -> str:
    """One outbox entry; `due` is when the check ran, `sent` when it was written."""
    return json.dumps({
        "event_id": reminder["id"],
        "title": reminder["title"],
        "body": reminder["body"],
        "due": reminder["at"],
        "sent": sent_at.isoformat(timespec="seconds"),
        "source": SOURCE,
    }, ensure_ascii=False)


def append_outbox(reminders: Iterable[Dict], path: str | Path | None = None,
                  sent_at: Optional[datetime] = None) -> int:
    outbox = Path(path or CONFIG["delivery"]["outbox_path"])
    outbox.parent.mkdir(parents=True, exist_ok=True)
    sent_at = sent_at or datetime.now()

    lines = [outbox_line(r, sent_at) for r in reminders]
    with outbox.open("a", encoding="utf-8") as f:
        f.writelines(line + "\n" for line in lines)
    logger.debug("Appended %d reminder(s) to %s", len(lines), outbox)
    return len(lines)


def deliver_reminders(reminders: list[Dict], sent_at: Optional[datetime] = None) -> int:
    """Echo (if configured) and write to the outbox. Returns the count written."""
    dcfg = CONFIG["delivery"]
    if dcfg.get("console_echo", True):
        for r in reminders:
            print(f"{r['title']}  -  {r['body']}")
    if not dcfg.get("enabled", True):
        return 0
    return append_outbox(reminders, sent_at=sent_at)
