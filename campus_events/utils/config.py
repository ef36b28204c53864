# Config flags and runtime settings (env overrides via .env)

import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


CONFIG = {
    "log_level": os.getenv("CAMPUS_EVENTS_LOG_LEVEL", "INFO"),

    # Where the collection lives: "json" (single file) or "sql" (SQLAlchemy URL)
    "storage": {
        "backend": os.getenv("CAMPUS_EVENTS_BACKEND", "json"),
        "json_path": os.getenv("CAMPUS_EVENTS_FILE", "data/campus_events.json"),
        "database_url": os.getenv("CAMPUS_EVENTS_DATABASE_URL", "sqlite:///./campus_events.db"),
    },

    # Upcoming-event reminders (checked by `remind`, idempotent)
    "reminders": {
        "enabled": _env_bool("CAMPUS_EVENTS_REMINDERS", True),
        "window_minutes": int(os.getenv("CAMPUS_EVENTS_REMINDER_WINDOW", "60")),
        "ledger_path": os.getenv("CAMPUS_EVENTS_NOTIFIED_FILE", "data/notified.json"),
    },

    # Delivery of reminders
    "delivery": {
        "enabled": True,
        "console_echo": _env_bool("CAMPUS_EVENTS_CONSOLE_ECHO", True),
        "outbox_path": os.getenv("CAMPUS_EVENTS_OUTBOX", "outbox/reminders.jsonl"),
    },

    # Export file naming
    "export": {
        "filename_prefix": "campus-events",
    },
}
