# Command-line front end for the campus event catalog

import argparse
import sys
from datetime import date, datetime
from pathlib import Path

from campus_events.campus_calendar.backends import backend_from_config
from campus_events.campus_calendar.store import EventStore
from campus_events.core import countdown, query, transfer
from campus_events.core.display import event_count_label, format_event_date
from campus_events.core.errors import CatalogError, EventValidationError, FormatError
from campus_events.core.notifications import check_upcoming_events
from campus_events.models.event import Category
from campus_events.utils.config import CONFIG
from campus_events.utils.logging_config import setup_logging


def open_store() -> EventStore:
    store = EventStore(backend_from_config())
    store.load()
    return store


def _print_event(e, now):
    cd = countdown.classify(e.date, now)
    print(f"{format_event_date(e.date)} | {e.name} [{e.category_display}] "
          f"@ {e.location} - {e.organizer_display} ({cd.label}) id={e.id}")
    if e.capacity:
        print(f"    Capacity: {e.capacity}")
    if e.description:
        print(f"    {e.description}")


def cmd_add(args):
    store = open_store()
    ev = store.add({
        "name": args.name,
        "date": args.date,
        "location": args.location,
        "category": args.category,
        "description": args.description or "",
        "organizer": args.organizer or "",
        "capacity": args.capacity,
    })
    print(f"Event added successfully! {ev.name} @ {format_event_date(ev.date)} (id={ev.id})")


def cmd_list(args):
    store = open_store()
    state = query.ViewState(filter=args.category, search=args.search or "", sort=args.sort)
    rows = state.apply(store.all())
    if not rows:
        print("No events found.")
        return
    now = datetime.now()
    for e in rows:
        _print_event(e, now)
    print(f"\n{event_count_label(len(rows))}")


def cmd_delete(args):
    store = open_store()
    if store.remove(args.id):
        print("Event deleted successfully!")
    else:
        print(f"No event with id {args.id}.")


def cmd_clear(args):
    if not args.yes:
        answer = input("Are you sure you want to clear all events? This action cannot be undone. [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            print("Cancelled.")
            return
    store = open_store()
    store.clear()
    print("All events cleared successfully!")


def cmd_stats(_args):
    store = open_store()
    records = store.all()
    s = query.statistics(records, datetime.now())
    print(f"Total: {s.total}  Upcoming: {s.upcoming}  Past: {s.past}")
    print(f"Data: {transfer.storage_usage_kb(records)} KB used")


def cmd_countdown(_args):
    store = open_store()
    now = datetime.now()
    for e in query.view(store.all()):
        if not countdown.needs_live_countdown(e.date, now):
            continue
        remaining = countdown.live_remaining(e.date, now)
        flag = "  (soon!)" if countdown.is_urgent(e.date, now) else ""
        print(f"{remaining:>16}  {e.name}{flag}")


def cmd_export(args):
    store = open_store()
    records = store.all()
    if args.format == "json":
        data = transfer.export_structured(records)
    else:
        data = transfer.export_flat(records)
    out = Path(args.output or transfer.export_filename(args.format, date.today()))
    out.write_text(data, encoding="utf-8")
    print(f"Events exported as {args.format.upper()} successfully! -> {out}")


def cmd_import(args):
    try:
        text = Path(args.file).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise FormatError(FormatError.MALFORMED, "file is not UTF-8 text") from e
    candidates = transfer.import_structured(text)
    store = open_store()
    count = store.bulk_merge(candidates)
    if count == 0:
        print("Import failed: No valid events found in file", file=sys.stderr)
        return 1
    print(f"{count} events imported successfully!")


def cmd_remind(_args):
    store = open_store()
    sent = check_upcoming_events(store.all())
    if not sent:
        print("No upcoming events to remind about.")


def cmd_serve(args):
    import uvicorn
    uvicorn.run("campus_events.main:create_app", factory=True, host=args.host, port=args.port)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Campus Events CLI")
    sub = p.add_subparsers(required=True)

    sp = sub.add_parser("add", help="Add an event (date must be in the future)")
    sp.add_argument("name")
    sp.add_argument("date", help="ISO time, e.g., 2025-08-09T10:00")
    sp.add_argument("location")
    sp.add_argument("--category", default=Category.OTHER.value,
                    help="academic|technical|cultural|sports|workshop|seminar|other")
    sp.add_argument("--description")
    sp.add_argument("--organizer")
    sp.add_argument("--capacity", type=int)
    sp.set_defaults(func=cmd_add)

    sp = sub.add_parser("list", help="List events (filter, search, sort)")
    sp.add_argument("--category", default=query.ALL_CATEGORIES)
    sp.add_argument("--search")
    sp.add_argument("--sort", default=query.DEFAULT_SORT, choices=sorted(query.SORTS))
    sp.set_defaults(func=cmd_list)

    sp = sub.add_parser("delete", help="Delete an event by id")
    sp.add_argument("id")
    sp.set_defaults(func=cmd_delete)

    sp = sub.add_parser("clear", help="Delete every event")
    sp.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    sp.set_defaults(func=cmd_clear)

    sp = sub.add_parser("stats", help="Total / upcoming / past counts")
    sp.set_defaults(func=cmd_stats)

    sp = sub.add_parser("countdown", help="Time left for today's and future events")
    sp.set_defaults(func=cmd_countdown)

    sp = sub.add_parser("export", help="Export events as JSON or CSV")
    sp.add_argument("--format", default="json", choices=list(transfer.FORMATS))
    sp.add_argument("--output", help="File to write (default: campus-events-<date>.<format>)")
    sp.set_defaults(func=cmd_export)

    sp = sub.add_parser("import", help="Import events from a JSON export")
    sp.add_argument("file")
    sp.set_defaults(func=cmd_import)

    sp = sub.add_parser("remind", help="Send reminders for events starting soon")
    sp.set_defaults(func=cmd_remind)

    sp = sub.add_parser("serve", help="Run the HTTP API")
    sp.add_argument("--host", default="127.0.0.1")
    sp.add_argument("--port", type=int, default=8000)
    sp.set_defaults(func=cmd_serve)
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(CONFIG["log_level"])
    try:
        return args.func(args) or 0
    except EventValidationError as e:
        print(e.message, file=sys.stderr)
        return 1
    except FormatError as e:
        print(f"Import failed: {e.message}", file=sys.stderr)
        return 1
    except CatalogError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
