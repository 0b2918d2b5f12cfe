"""
Pydantic response schemas for the preview API.

Shapes mirror tracks.json / events.json; optional fields are dropped from
responses with ``response_model_exclude_none``.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    tracks: int
    events: int
    classes: int
    rules: int


class TrackResponse(BaseModel):
    id: int
    name: str
    city: str
    address: str
    url: str


class RuleResponse(BaseModel):
    id: int
    event_class_id: int
    rule: str


class EventClassResponse(BaseModel):
    id: int
    event_id: int
    name: str
    buyin_fee: Optional[float] = None
    rules: list[RuleResponse] = []


class EventResponse(BaseModel):
    id: int
    title: str
    track_id: int
    track_name: str
    start_date: str
    end_date: Optional[str] = None
    event_driver_fee: Optional[float] = None
    event_spectator_fee: Optional[float] = None
    url: str
    description: str
    classes: list[EventClassResponse] = []
