"""
Calendar endpoints: the same documents the export writes, read live.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from dragevents.data.repository import Repository
from dragevents.api.dependencies import get_repository
from dragevents.api.response_models import EventResponse, TrackResponse
from dragevents.export.assembler import load_nested_events

router = APIRouter(prefix="/api", tags=["calendar"])


@router.get("/tracks", response_model=list[TrackResponse])
def list_tracks(repo: Repository = Depends(get_repository)):
    return [t.to_dict() for t in repo.list_tracks()]


@router.get("/events", response_model=list[EventResponse], response_model_exclude_none=True)
def list_events(repo: Repository = Depends(get_repository)):
    return [e.to_dict() for e in load_nested_events(repo)]


@router.get("/events/{event_id}", response_model=EventResponse, response_model_exclude_none=True)
def get_event(event_id: int, repo: Repository = Depends(get_repository)):
    match = next((e for e in load_nested_events(repo) if e.id == event_id), None)
    if match is None:
        raise HTTPException(404, f"Event not found: {event_id}")
    return match.to_dict()
