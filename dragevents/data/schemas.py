"""
Entity schemas for the event calendar: tracks, events, classes, rules.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Optional


def format_timestamp(value: dt.datetime) -> str:
    """ISO-8601 string with a ``Z`` suffix for UTC values."""
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


@dataclass
class Track:
    """A physical venue hosting events."""
    id: int
    name: str
    city: str = ""
    address: str = ""
    url: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "city": self.city,
            "address": self.address,
            "url": self.url,
        }


@dataclass
class EventClassRule:
    id: int
    event_class_id: int
    rule: str

    def to_dict(self) -> dict:
        return {"id": self.id, "event_class_id": self.event_class_id, "rule": self.rule}


@dataclass
class EventClass:
    """A competition category within an event, with its own buy-in."""
    id: int
    event_id: int
    name: str
    buyin_fee: Optional[float] = None
    rules: list[EventClassRule] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = {"id": self.id, "event_id": self.event_id, "name": self.name}
        if self.buyin_fee is not None:
            data["buyin_fee"] = self.buyin_fee
        data["rules"] = [r.to_dict() for r in self.rules]
        return data


@dataclass
class Event:
    """A scheduled occurrence at a track.

    ``end_date`` and both fees are ``None`` when unset; zero is a real value.
    ``timestamp_fallbacks`` names the date fields whose stored text could not
    be parsed and were replaced by a default.
    """
    id: int
    title: str
    track_id: int
    start_date: dt.datetime
    track_name: str = ""
    end_date: Optional[dt.datetime] = None
    driver_fee: Optional[float] = None
    spectator_fee: Optional[float] = None
    url: str = ""
    description: str = ""
    classes: list[EventClass] = field(default_factory=list)
    timestamp_fallbacks: list[str] = field(default_factory=list)

    @property
    def has_fallback_dates(self) -> bool:
        return bool(self.timestamp_fallbacks)

    def to_dict(self) -> dict:
        """JSON shape consumed by the static site (optional fields omitted)."""
        data = {
            "id": self.id,
            "title": self.title,
            "track_id": self.track_id,
            "track_name": self.track_name,
            "start_date": format_timestamp(self.start_date),
        }
        if self.end_date is not None:
            data["end_date"] = format_timestamp(self.end_date)
        if self.driver_fee is not None:
            data["event_driver_fee"] = self.driver_fee
        if self.spectator_fee is not None:
            data["event_spectator_fee"] = self.spectator_fee
        data["url"] = self.url
        data["description"] = self.description
        data["classes"] = [c.to_dict() for c in self.classes]
        return data
