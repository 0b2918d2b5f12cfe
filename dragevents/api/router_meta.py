"""
Meta endpoints: health.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from dragevents.data.repository import Repository
from dragevents.api.dependencies import get_repository
from dragevents.api.response_models import HealthResponse

router = APIRouter(prefix="/api", tags=["meta"])


@router.get("/health", response_model=HealthResponse)
def health(repo: Repository = Depends(get_repository)):
    return HealthResponse(
        status="ok",
        tracks=repo.count("tracks"),
        events=repo.count("events"),
        classes=repo.count("event_classes"),
        rules=repo.count("event_class_rules"),
    )
