from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from campus_events.campus_calendar.backends import JsonFilePersistence, MemoryPersistence
from campus_events.campus_calendar.store import EventStore
from campus_events.core import query, transfer
from campus_events.core.errors import EventValidationError, PersistenceError


class FailingSaves(MemoryPersistence):
    def save(self, rows):
        raise PersistenceError("disk full")

    def erase(self):
        raise PersistenceError("disk full")


class UnreadableState(MemoryPersistence):
    def is_erased(self):
        raise PersistenceError("database is locked")


class TestLoad:

    def test_seeds_samples_when_nothing_stored(self, store, memory_backend, now):
        events = store.load()

        assert [e.name for e in events] == [
            "Annual Tech Fest",
            "Cultural Night",
            "Machine Learning Workshop",
            "Inter-College Sports Meet",
            "Career Guidance Seminar",
        ]
        assert [e.id for e in events] == [1, 2, 3, 4, 5]
        assert events[1].date == now.replace(hour=18, minute=30) + timedelta(days=3)
        assert events[3].capacity is None
        assert memory_backend.save_count == 1
        assert len(memory_backend.load()) == 5

    def test_seeds_when_stored_list_is_empty(self, now):
        backend = MemoryPersistence(rows=[])
        events = EventStore(backend, clock=lambda: now).load()
        assert len(events) == 5

    def test_reads_stored_events_without_seeding(self, make_record, now):
        rec = make_record(name="Book Fair")
        backend = MemoryPersistence(rows=[rec.to_dict()])

        events = EventStore(backend, clock=lambda: now).load()

        assert events == [rec]
        assert backend.save_count == 0

    def test_clear_then_load_stays_empty(self, store, memory_backend, now):
        store.load()
        store.clear()

        reloaded = EventStore(memory_backend, clock=lambda: now).load()

        assert reloaded == []
        assert memory_backend.load() is None

    def test_corrupt_file_degrades_to_empty(self, tmp_path, now):
        path = tmp_path / "events.json"
        path.write_text("{not json", encoding="utf-8")

        events = EventStore(JsonFilePersistence(path), clock=lambda: now).load()

        assert events == []
        # left alone for recovery
        assert path.read_text(encoding="utf-8") == "{not json"

    def test_null_file_degrades_to_empty(self, tmp_path, now):
        path = tmp_path / "events.json"
        path.write_text("null", encoding="utf-8")

        events = EventStore(JsonFilePersistence(path), clock=lambda: now).load()

        assert events == []
        assert path.read_text(encoding="utf-8") == "null"

    def test_unreadable_erase_state_degrades_to_empty(self, now):
        backend = UnreadableState()

        assert EventStore(backend, clock=lambda: now).load() == []
        assert backend.save_count == 0

    def test_non_list_blob_degrades_to_empty(self, now):
        backend = MemoryPersistence(rows={"events": []})
        assert EventStore(backend, clock=lambda: now).load() == []

    def test_malformed_entries_are_skipped(self, make_record, now):
        good = make_record().to_dict()
        backend = MemoryPersistence(rows=[good, {"name": "no date"}, "junk"])

        events = EventStore(backend, clock=lambda: now).load()

        assert [e.id for e in events] == [good["id"]]


class TestAdd:

    def test_add_assigns_id_and_created(self, store, memory_backend, draft, now):
        ev = store.add(draft())

        assert isinstance(ev.id, str) and ev.id
        assert ev.created == now
        assert ev.capacity == 40
        assert store.all() == [ev]
        assert memory_backend.load()[0]["id"] == ev.id

    def test_ids_are_unique(self, store, draft):
        created = [store.add(draft(name=f"Talk {i}")) for i in range(25)]

        assert len(store.all()) == 25
        assert len({e.id for e in created}) == 25

    def test_past_date_is_rejected(self, store, memory_backend, draft, now):
        store.add(draft())

        with pytest.raises(EventValidationError) as excinfo:
            store.add(draft(date=(now - timedelta(minutes=1)).isoformat()))

        assert excinfo.value.kind == EventValidationError.FUTURE_DATE_REQUIRED
        assert len(store.all()) == 1
        assert memory_backend.save_count == 1

    def test_date_equal_to_now_is_accepted(self, store, draft, now):
        ev = store.add(draft(date=now.isoformat()))
        assert ev.date == now

    @pytest.mark.parametrize("missing", ["name", "date", "location", "category"])
    def test_required_fields(self, store, draft, missing):
        with pytest.raises(EventValidationError) as excinfo:
            store.add(draft(**{missing: ""}))

        assert excinfo.value.kind == EventValidationError.INVALID_EVENT
        assert excinfo.value.errors
        assert store.all() == []

    def test_unknown_category_is_kept(self, store, draft):
        ev = store.add(draft(category="hackathon"))
        assert ev.category == "hackathon"
        assert ev.category_display == "hackathon"

    def test_failed_save_rolls_back(self, draft, now):
        store = EventStore(FailingSaves(), clock=lambda: now)

        with pytest.raises(PersistenceError):
            store.add(draft())

        assert store.all() == []


class TestRemove:

    def test_remove_existing(self, store, memory_backend, draft):
        keep = store.add(draft(name="Keep"))
        drop = store.add(draft(name="Drop"))

        assert store.remove(drop.id) is True
        assert store.all() == [keep]
        assert [r["id"] for r in memory_backend.load()] == [keep.id]

    def test_remove_absent_is_noop(self, store, memory_backend, draft):
        store.add(draft())
        saves = memory_backend.save_count

        assert store.remove("nope") is False
        assert len(store.all()) == 1
        assert memory_backend.save_count == saves

    def test_integer_ids_match_their_text_form(self, store):
        store.load()
        assert store.remove("3") is True
        assert [e.id for e in store.all()] == [1, 2, 4, 5]


class TestBulkMerge:

    def test_admits_only_complete_candidates(self, store, memory_backend, make_record):
        candidates = [make_record().to_dict() for _ in range(5)]
        del candidates[1]["location"]
        candidates[3]["location"] = ""

        assert store.bulk_merge(candidates) == 3
        assert len(store.all()) == 3
        assert memory_backend.save_count == 1

    def test_past_dates_are_admitted(self, store, make_record, now):
        old = make_record(date=now - timedelta(days=30)).to_dict()
        assert store.bulk_merge([old]) == 1

    def test_missing_ids_are_synthesized(self, store, make_record):
        a = make_record().to_dict()
        b = make_record().to_dict()
        a.pop("id")
        b["id"] = None

        store.bulk_merge([a, b])

        ids = [e.id for e in store.all()]
        assert all(isinstance(i, str) and i for i in ids)
        assert ids[0] != ids[1]

    def test_colliding_ids_get_fresh_ones(self, store, make_record):
        store.load()
        dup = make_record(id=1, name="Duplicate").to_dict()

        assert store.bulk_merge([dup, dict(dup)]) == 2

        ids = [str(e.id) for e in store.all()]
        assert len(ids) == len(set(ids)) == 7

    def test_nothing_admitted_returns_zero(self, store, memory_backend):
        assert store.bulk_merge([1, "x", None, {"name": "only"}]) == 0
        assert store.all() == []
        assert memory_backend.save_count == 0

    def test_numeric_dates_become_local_time(self, store, make_record, now):
        store.bulk_merge([make_record().to_dict()])
        cand = {"name": "Night Sky Watch", "date": 1900000000, "location": "Roof", "category": "other",
                "created": 1900000000.5}

        assert store.bulk_merge([cand]) == 1

        rec = store.get(store.all()[-1].id)
        assert rec.date.tzinfo is None
        assert rec.date == datetime.fromtimestamp(1900000000)
        assert rec.created.tzinfo is None
        assert query.statistics(store.all(), now).total == 2
        assert query.view(store.all())[-1].name == "Night Sky Watch"

    def test_bad_capacity_is_rejected(self, store, make_record):
        cand = make_record().to_dict()
        cand["capacity"] = -4
        assert store.bulk_merge([cand]) == 0

    def test_structured_round_trip(self, make_record, now):
        originals = [
            make_record(name="A", capacity=10),
            make_record(name="B", organizer=None, description=None),
            make_record(id="abc", name="C", date=now - timedelta(days=3)),
        ]
        text = transfer.export_structured(originals)

        target = EventStore(MemoryPersistence(), clock=lambda: now)
        assert target.bulk_merge(transfer.import_structured(text)) == 3

        assert [e.to_dict() for e in target.all()] == [e.to_dict() for e in originals]


class TestSnapshot:

    def test_all_returns_a_copy(self, store, draft):
        store.add(draft())
        snap = store.all()
        snap.clear()
        assert len(store.all()) == 1

    def test_records_are_frozen(self, store, draft):
        ev = store.add(draft())
        with pytest.raises(ValidationError):
            ev.name = "changed"

    def test_failed_clear_keeps_events(self, make_record, now):
        backend = FailingSaves(rows=[make_record().to_dict()])
        store = EventStore(backend, clock=lambda: now)
        store.load()

        with pytest.raises(PersistenceError):
            store.clear()

        assert len(store.all()) == 1
