"""
Export assembler — nests rules into classes and classes into events, then
writes the static site's JSON snapshot.
"""
from __future__ import annotations

import json
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path

from dragevents.config import EXPORT_DIR, EVENTS_FILE, TRACKS_FILE
from dragevents.data.repository import Repository
from dragevents.data.schemas import Event, EventClass, EventClassRule


@dataclass
class ExportSummary:
    data_dir: Path
    tracks: int = 0
    events: int = 0
    classes: int = 0
    rules: int = 0
    fallback_events: list[Event] = field(default_factory=list)


def nest_events(
    events: list[Event],
    classes: list[EventClass],
    rules: list[EventClassRule],
) -> list[Event]:
    """Attach rules to their class and classes to their event.

    Every class gets a ``rules`` list and every event a ``classes`` list,
    empty when nothing belongs to it. Input order is kept within each group.
    """
    rules_by_class: dict[int, list[EventClassRule]] = defaultdict(list)
    for rule in rules:
        rules_by_class[rule.event_class_id].append(rule)
    for cls in classes:
        cls.rules = list(rules_by_class.get(cls.id, []))

    classes_by_event: dict[int, list[EventClass]] = defaultdict(list)
    for cls in classes:
        classes_by_event[cls.event_id].append(cls)
    for ev in events:
        ev.classes = list(classes_by_event.get(ev.id, []))
    return events


def load_nested_events(repo: Repository) -> list[Event]:
    """Events from the repository with classes and rules nested."""
    return nest_events(repo.list_events(), repo.list_event_classes(), repo.list_event_class_rules())


def ensure_dir(path: Path | str) -> Path:
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_json(path: Path | str, data) -> None:
    """Write pretty-printed JSON with a trailing newline, creating parent dirs."""
    path = Path(path)
    ensure_dir(path.parent)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")


def export_all(repo: Repository, data_dir: Path | str = EXPORT_DIR) -> ExportSummary:
    """Write tracks.json and events.json for the static site."""
    data_dir = ensure_dir(data_dir)

    tracks = repo.list_tracks()
    events = repo.list_events()
    classes = repo.list_event_classes()
    rules = repo.list_event_class_rules()
    nest_events(events, classes, rules)

    write_json(data_dir / TRACKS_FILE, [t.to_dict() for t in tracks])
    write_json(data_dir / EVENTS_FILE, [e.to_dict() for e in events])

    return ExportSummary(
        data_dir=data_dir,
        tracks=len(tracks),
        events=len(events),
        classes=len(classes),
        rules=len(rules),
        fallback_events=[e for e in events if e.has_fallback_dates],
    )
