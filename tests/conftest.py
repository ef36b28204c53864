"""Shared fixtures: a fixed clock, record factories, isolated config paths."""

from datetime import datetime, timedelta

import pytest

from campus_events.campus_calendar.backends import MemoryPersistence
from campus_events.campus_calendar.store import EventStore
from campus_events.models.event import EventRecord
from campus_events.utils.config import CONFIG

NOW = datetime(2025, 3, 10, 12, 0)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point every file the app writes into the test's tmp dir."""
    monkeypatch.setitem(CONFIG["storage"], "backend", "json")
    monkeypatch.setitem(CONFIG["storage"], "json_path", str(tmp_path / "events.json"))
    monkeypatch.setitem(CONFIG["storage"], "database_url", f"sqlite:///{tmp_path / 'events.db'}")
    monkeypatch.setitem(CONFIG["reminders"], "ledger_path", str(tmp_path / "notified.json"))
    monkeypatch.setitem(CONFIG["reminders"], "enabled", True)
    monkeypatch.setitem(CONFIG["reminders"], "window_minutes", 60)
    monkeypatch.setitem(CONFIG["delivery"], "outbox_path", str(tmp_path / "outbox.jsonl"))
    monkeypatch.setitem(CONFIG["delivery"], "console_echo", True)
    return tmp_path


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_record():
    counter = iter(range(1, 10_000))

    def _make(**overrides) -> EventRecord:
        data = {
            "id": next(counter),
            "name": "Robotics Demo",
            "date": NOW + timedelta(days=1),
            "location": "Hall A",
            "category": "technical",
            "description": "Robots on parade",
            "organizer": "Robotics Club",
            "capacity": None,
            "created": NOW - timedelta(days=1),
        }
        data.update(overrides)
        return EventRecord(**data)

    return _make


@pytest.fixture
def draft():
    def _draft(**overrides) -> dict:
        data = {
            "name": "Hackathon",
            "date": (NOW + timedelta(days=2)).isoformat(),
            "location": "Lab 1",
            "category": "technical",
            "description": "24h build",
            "organizer": "Coding Club",
            "capacity": "40",
        }
        data.update(overrides)
        return data

    return _draft


@pytest.fixture
def memory_backend():
    return MemoryPersistence()


@pytest.fixture
def store(memory_backend):
    """Empty store on a memory backend with the clock pinned to NOW."""
    return EventStore(memory_backend, clock=lambda: NOW)
