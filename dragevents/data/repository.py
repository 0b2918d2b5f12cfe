"""
Repository — typed, null-safe CRUD over tracks, events, classes and rules.

Designed so every read returns entities in an explicit order; nothing relies
on SQLite's storage order.
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from dragevents.data.schemas import Event, EventClass, EventClassRule, Track
from dragevents.data.timestamps import parse_timestamp

_TABLES = ("tracks", "events", "event_classes", "event_class_rules")


def _text(value) -> str:
    return "" if value is None else str(value)


def _optional_float(value) -> Optional[float]:
    return None if value is None else float(value)


class Repository:
    """CRUD operations over one SQLite engine."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_tracks(self) -> list[Track]:
        """All tracks, alphabetical by name."""
        with self.engine.connect() as conn:
            rows = conn.execute(text(
                "SELECT id, name, city, address, url FROM tracks ORDER BY name, id"
            )).mappings().all()
        return [
            Track(
                id=row["id"],
                name=_text(row["name"]),
                city=_text(row["city"]),
                address=_text(row["address"]),
                url=_text(row["url"]),
            )
            for row in rows
        ]

    def list_events(self) -> list[Event]:
        """All events joined with their track name, by start time ascending.

        Unparseable stored dates do not fail the listing: the start date falls
        back to the zero timestamp, the end date to None, and the field name is
        recorded in ``Event.timestamp_fallbacks``.
        """
        q = text(
            """
            SELECT e.id, e.title, e.track_id, t.name AS track_name,
                   e.event_datetime, e.end_date,
                   e.event_driver_fee, e.event_spectator_fee,
                   e.url, e.description
            FROM events e JOIN tracks t ON e.track_id = t.id
            ORDER BY e.event_datetime, e.id
            """
        )
        with self.engine.connect() as conn:
            rows = conn.execute(q).mappings().all()

        events = []
        for row in rows:
            fallbacks = []
            start = parse_timestamp(_text(row["event_datetime"]))
            if start.fallback:
                fallbacks.append("start_date")

            end_date = None
            if row["end_date"] is not None:
                end = parse_timestamp(_text(row["end_date"]))
                if end.fallback:
                    fallbacks.append("end_date")
                else:
                    end_date = end.value

            events.append(Event(
                id=row["id"],
                title=_text(row["title"]),
                track_id=row["track_id"],
                track_name=_text(row["track_name"]),
                start_date=start.value,
                end_date=end_date,
                driver_fee=_optional_float(row["event_driver_fee"]),
                spectator_fee=_optional_float(row["event_spectator_fee"]),
                url=_text(row["url"]),
                description=_text(row["description"]),
                timestamp_fallbacks=fallbacks,
            ))
        # Stored text can mix formats and offsets, so SQL order is only a first pass
        events.sort(key=lambda e: (e.start_date, e.id))
        return events

    def list_event_classes(self) -> list[EventClass]:
        """All classes, ordered by (event_id, id)."""
        with self.engine.connect() as conn:
            rows = conn.execute(text(
                "SELECT id, event_id, name, buyin_fee FROM event_classes ORDER BY event_id, id"
            )).mappings().all()
        return [
            EventClass(
                id=row["id"],
                event_id=row["event_id"],
                name=_text(row["name"]),
                buyin_fee=_optional_float(row["buyin_fee"]),
            )
            for row in rows
        ]

    def list_event_class_rules(self) -> list[EventClassRule]:
        """All rules, ordered by (event_class_id, id)."""
        with self.engine.connect() as conn:
            rows = conn.execute(text(
                "SELECT id, event_class_id, rule FROM event_class_rules ORDER BY event_class_id, id"
            )).mappings().all()
        return [
            EventClassRule(id=row["id"], event_class_id=row["event_class_id"], rule=_text(row["rule"]))
            for row in rows
        ]

    def count(self, table: str) -> int:
        if table not in _TABLES:
            raise ValueError(f"Unknown table: {table}")
        with self.engine.connect() as conn:
            return conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar_one()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_track(self, name: str, city: str, address: str, url: str) -> int:
        with self.engine.begin() as conn:
            result = conn.execute(
                text("INSERT INTO tracks(name, city, address, url) VALUES(:name, :city, :address, :url)"),
                {"name": name, "city": city, "address": address, "url": url},
            )
            return result.lastrowid

    def create_event(
        self,
        title: str,
        track_id: int,
        start_date: str,
        end_date: Optional[str],
        driver_fee: Optional[float] = None,
        spectator_fee: Optional[float] = None,
        url: str = "",
        description: str = "",
    ) -> int:
        """Insert an event and return its id.

        An empty ``end_date`` means "no end date" and is stored as NULL.
        Constraint violations (unknown track_id) propagate from the driver.
        """
        with self.engine.begin() as conn:
            result = conn.execute(
                text(
                    """
                    INSERT INTO events(title, track_id, event_datetime, end_date,
                                       event_driver_fee, event_spectator_fee, url, description)
                    VALUES(:title, :track_id, :start_date, :end_date,
                           :driver_fee, :spectator_fee, :url, :description)
                    """
                ),
                {
                    "title": title,
                    "track_id": track_id,
                    "start_date": start_date,
                    "end_date": end_date or None,
                    "driver_fee": driver_fee,
                    "spectator_fee": spectator_fee,
                    "url": url,
                    "description": description,
                },
            )
            return result.lastrowid

    def create_event_class(self, event_id: int, name: str, buyin_fee: Optional[float] = None) -> int:
        with self.engine.begin() as conn:
            result = conn.execute(
                text("INSERT INTO event_classes(event_id, name, buyin_fee) VALUES(:event_id, :name, :buyin_fee)"),
                {"event_id": event_id, "name": name, "buyin_fee": buyin_fee},
            )
            return result.lastrowid

    def create_event_class_rule(self, event_class_id: int, rule: str) -> int:
        with self.engine.begin() as conn:
            result = conn.execute(
                text("INSERT INTO event_class_rules(event_class_id, rule) VALUES(:event_class_id, :rule)"),
                {"event_class_id": event_class_id, "rule": rule},
            )
            return result.lastrowid

    def delete_event(self, event_id: int) -> None:
        """Delete an event with its classes and their rules.

        Runs rules -> classes -> event as three separate statements; a missing
        id is a no-op. Not atomic: a crash between statements can leave the
        event row without its classes.
        """
        statements = [
            "DELETE FROM event_class_rules WHERE event_class_id IN "
            "(SELECT id FROM event_classes WHERE event_id = :event_id)",
            "DELETE FROM event_classes WHERE event_id = :event_id",
            "DELETE FROM events WHERE id = :event_id",
        ]
        for stmt in statements:
            with self.engine.begin() as conn:
                conn.execute(text(stmt), {"event_id": event_id})
