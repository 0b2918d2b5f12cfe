#!/usr/bin/env python3
"""
DFW Drag Events CLI — database setup, event management, CSV import, JSON export.

USAGE:
  dragevents db init                          # Apply migrations
  dragevents db seed                          # Insert sample data

  dragevents track add "Texas Motorplex" --city Ennis --url https://texasmotorplex.com
  dragevents track list

  dragevents event add                        # Interactively add an event
  dragevents event list                       # List all events
  dragevents event delete 3                   # Delete event (and its classes/rules)
  dragevents event import events.csv          # Import events from CSV

  dragevents class import classes.csv         # Import event classes from CSV
  dragevents rule import rules.csv            # Import class rules from CSV

  dragevents export                           # Write JSON to site/data/
  dragevents export --output ./dist/data      # Custom output directory

  dragevents serve --port 8000                # Preview the site + read-only API

  dragevents --db /tmp/test.sqlite event list # Any command against another database
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from dragevents.config import DB_PATH, DEFAULT_PORT, DISPLAY_DATETIME_FORMAT, EXPORT_DIR
from dragevents.data.database import MigrationError, migrate, open_db
from dragevents.data.importer import (
    CSVImportError, import_event_class_rules, import_event_classes, import_events,
    parse_id, parse_optional_float,
)
from dragevents.data.repository import Repository
from dragevents.data.seed import seed
from dragevents.data.timestamps import try_parse_timestamp
from dragevents.export.assembler import export_all


def _repository(args) -> Repository:
    return Repository(open_db(args.db))


def _next_steps(*steps: str) -> None:
    print("\nNext steps:")
    for i, step in enumerate(steps, 1):
        print(f"  {i}. {step}")


# ---------------------------------------------------------------------------
# db
# ---------------------------------------------------------------------------

def cmd_db_init(args):
    """Apply migration scripts in filename order."""
    engine = open_db(args.db)
    try:
        applied = migrate(engine)
    finally:
        engine.dispose()
    print(f"Migrations applied ({len(applied)}).")


def cmd_db_seed(args):
    """Insert sample tracks, events, classes and rules."""
    repo = _repository(args)
    try:
        counts = seed(repo)
    finally:
        repo.engine.dispose()
    print(f"Seed data inserted: {counts['tracks']} tracks, {counts['events']} events, "
          f"{counts['classes']} classes, {counts['rules']} rules.")


# ---------------------------------------------------------------------------
# track
# ---------------------------------------------------------------------------

def cmd_track_add(args):
    repo = _repository(args)
    try:
        track_id = repo.create_track(args.name, args.city, args.address, args.url)
    finally:
        repo.engine.dispose()
    print(f"✓ Track created successfully! ID: {track_id}")


def cmd_track_list(args):
    repo = _repository(args)
    try:
        tracks = repo.list_tracks()
    finally:
        repo.engine.dispose()

    if not tracks:
        print("No tracks found.")
        return
    print(f"\n{'ID':<6}{'NAME':<32}{'CITY':<20}URL")
    for t in tracks:
        print(f"{t.id:<6}{t.name[:30]:<32}{t.city[:18]:<20}{t.url}")
    print(f"\nTotal: {len(tracks)} tracks")


# ---------------------------------------------------------------------------
# event
# ---------------------------------------------------------------------------

def _prompt(label: str, read: Callable[[str], str]) -> str:
    try:
        return read(label).strip()
    except EOFError:
        return ""


def _prompt_fee(label: str, read: Callable[[str], str]) -> Optional[float]:
    value = _prompt(f"{label} [optional, press Enter to skip]: ", read)
    return parse_optional_float(value, label.lower())


def prompt_event(read: Optional[Callable[[str], str]] = None) -> dict:
    """Ask for the fields of a new event. Raises ValueError on bad input."""
    read = read or input
    print("\n=== Add New Event ===")

    title = _prompt("Title: ", read)
    if not title:
        raise ValueError("Title is required")

    track = _prompt("Track ID: ", read)
    try:
        track_id = parse_id(track, "track ID")
    except ValueError:
        raise ValueError(f"Invalid track ID: {track!r}") from None

    start_date = _prompt("Start Date (YYYY-MM-DD HH:MM:SS): ", read)
    if not start_date:
        raise ValueError("Start date is required")
    if try_parse_timestamp(start_date) is None:
        raise ValueError(f"Unrecognised start date: {start_date!r}")

    end_date = _prompt("End Date (YYYY-MM-DD HH:MM:SS) [optional, press Enter to skip]: ", read)
    if end_date and try_parse_timestamp(end_date) is None:
        raise ValueError(f"Unrecognised end date: {end_date!r}")

    return {
        "title": title,
        "track_id": track_id,
        "start_date": start_date,
        "end_date": end_date,
        "driver_fee": _prompt_fee("Driver Fee", read),
        "spectator_fee": _prompt_fee("Spectator Fee", read),
        "url": _prompt("URL: ", read),
        "description": _prompt("Description: ", read),
    }


def cmd_event_add(args):
    """Interactively add an event."""
    fields = prompt_event()
    repo = _repository(args)
    try:
        event_id = repo.create_event(**fields)
    finally:
        repo.engine.dispose()
    print(f"\n✓ Event created successfully! ID: {event_id}")
    _next_steps(
        "Run 'dragevents export' to generate JSON files",
        "Preview locally with 'dragevents serve'",
    )


def cmd_event_list(args):
    repo = _repository(args)
    try:
        events = repo.list_events()
    finally:
        repo.engine.dispose()

    if not events:
        print("No events found.")
        return

    print("\n=== Events ===\n")
    for e in events:
        print(f"ID: {e.id}")
        print(f"Title: {e.title}")
        print(f"Track: {e.track_name}")
        if "start_date" in e.timestamp_fallbacks:
            print("Start: (unreadable date in database)")
        else:
            print(f"Start: {e.start_date:{DISPLAY_DATETIME_FORMAT}}")
        if e.end_date is not None:
            print(f"End: {e.end_date:{DISPLAY_DATETIME_FORMAT}}")
        elif "end_date" in e.timestamp_fallbacks:
            print("End: (unreadable date in database)")
        if e.driver_fee is not None:
            print(f"Driver Fee: ${e.driver_fee:.2f}")
        if e.spectator_fee is not None:
            print(f"Spectator Fee: ${e.spectator_fee:.2f}")
        if e.url:
            print(f"URL: {e.url}")
        if e.description:
            print(f"Description: {e.description}")
        print()
    print(f"Total: {len(events)} events")


def cmd_event_delete(args):
    repo = _repository(args)
    try:
        repo.delete_event(args.id)
    finally:
        repo.engine.dispose()
    print(f"✓ Event {args.id} deleted successfully!")
    _next_steps("Run 'dragevents export' to update JSON files")


def _run_import(args, importer, label: str):
    repo = _repository(args)
    try:
        count = importer(repo, args.csv)
    except CSVImportError as exc:
        print(f"  {exc.imported} {label} imported before the error.", file=sys.stderr)
        raise
    finally:
        repo.engine.dispose()
    print(f"✓ Successfully imported {count} {label} from {args.csv}")
    _next_steps(
        "Run 'dragevents export' to generate JSON files",
        "Preview locally with 'dragevents serve'",
    )


def cmd_event_import(args):
    _run_import(args, import_events, "events")


def cmd_class_import(args):
    _run_import(args, import_event_classes, "event classes")


def cmd_rule_import(args):
    _run_import(args, import_event_class_rules, "event class rules")


# ---------------------------------------------------------------------------
# export / serve
# ---------------------------------------------------------------------------

def cmd_export(args):
    """Export tracks.json and events.json for the static site."""
    repo = _repository(args)
    try:
        summary = export_all(repo, args.output)
    finally:
        repo.engine.dispose()

    for ev in summary.fallback_events:
        fields = ", ".join(ev.timestamp_fallbacks)
        print(f"  WARNING: event {ev.id} ({ev.title}) has unreadable {fields}")
    print(f"  {summary.tracks} tracks, {summary.events} events, "
          f"{summary.classes} classes, {summary.rules} rules")
    print(f"Exported JSON to {summary.data_dir}")


def cmd_serve(args):
    """Start the preview server."""
    import os
    import uvicorn

    print(f"\nStarting DFW Drag Events preview on port {args.port}...")
    if args.reload:
        # The reloader re-imports dragevents.main, so pass paths through the environment
        os.environ["DRAGEVENTS_DB_PATH"] = str(args.db)
        if args.site:
            os.environ["DRAGEVENTS_SITE_DIR"] = str(args.site)
        uvicorn.run("dragevents.main:app", host="127.0.0.1", port=args.port, reload=True)
    else:
        from dragevents.main import create_app
        uvicorn.run(create_app(db_path=args.db, site_dir=args.site), host="127.0.0.1", port=args.port)


def _id_arg(value: str) -> int:
    try:
        return parse_id(value, "id")
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dragevents",
        description="DFW Drag Events — event calendar data tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--db", type=Path, default=DB_PATH, help=f"Database file (default {DB_PATH})")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    # db
    db_parser = subparsers.add_parser("db", help="Database setup")
    db_sub = db_parser.add_subparsers(dest="action")
    db_sub.add_parser("init", help="Apply migrations").set_defaults(func=cmd_db_init)
    db_sub.add_parser("seed", help="Insert sample data").set_defaults(func=cmd_db_seed)

    # track
    track_parser = subparsers.add_parser("track", help="Manage tracks")
    track_sub = track_parser.add_subparsers(dest="action")
    track_add = track_sub.add_parser("add", help="Add a track")
    track_add.add_argument("name", help="Track name")
    track_add.add_argument("--city", default="", help="City")
    track_add.add_argument("--address", default="", help="Street address")
    track_add.add_argument("--url", default="", help="Website")
    track_add.set_defaults(func=cmd_track_add)
    track_sub.add_parser("list", help="List tracks").set_defaults(func=cmd_track_list)

    # event
    event_parser = subparsers.add_parser("event", help="Manage events")
    event_sub = event_parser.add_subparsers(dest="action")
    event_sub.add_parser("add", help="Interactively add an event").set_defaults(func=cmd_event_add)
    event_sub.add_parser("list", help="List all events").set_defaults(func=cmd_event_list)
    event_delete = event_sub.add_parser("delete", help="Delete an event by ID")
    event_delete.add_argument("id", type=_id_arg, help="Event ID")
    event_delete.set_defaults(func=cmd_event_delete)
    event_import = event_sub.add_parser("import", help="Import events from CSV")
    event_import.add_argument("csv", type=Path, help="CSV file")
    event_import.set_defaults(func=cmd_event_import)

    # class / rule
    class_parser = subparsers.add_parser("class", help="Event classes")
    class_sub = class_parser.add_subparsers(dest="action")
    class_import = class_sub.add_parser("import", help="Import event classes from CSV")
    class_import.add_argument("csv", type=Path, help="CSV file")
    class_import.set_defaults(func=cmd_class_import)

    rule_parser = subparsers.add_parser("rule", help="Event class rules")
    rule_sub = rule_parser.add_subparsers(dest="action")
    rule_import = rule_sub.add_parser("import", help="Import event class rules from CSV")
    rule_import.add_argument("csv", type=Path, help="CSV file")
    rule_import.set_defaults(func=cmd_rule_import)

    # export
    export_parser = subparsers.add_parser("export", help="Export JSON for the static site")
    export_parser.add_argument("--output", type=Path, default=EXPORT_DIR,
                               help=f"Output directory (default: {EXPORT_DIR})")
    export_parser.set_defaults(func=cmd_export)

    # serve
    serve_parser = subparsers.add_parser("serve", help="Preview the site and API")
    serve_parser.add_argument("--port", type=int, default=DEFAULT_PORT, help=f"Port (default {DEFAULT_PORT})")
    serve_parser.add_argument("--site", type=Path, default=None, help="Site directory to serve")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 2

    try:
        args.func(args)
    except (CSVImportError, MigrationError, SQLAlchemyError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
