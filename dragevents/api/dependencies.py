"""
FastAPI dependencies — Repository singleton.
"""
from __future__ import annotations

from fastapi import HTTPException

from dragevents.data.repository import Repository

# ---------------------------------------------------------------------------
# Global repository singleton (set during startup)
# ---------------------------------------------------------------------------
_repository: Repository | None = None


def set_repository(repo: Repository | None) -> None:
    global _repository
    _repository = repo


def get_repository() -> Repository:
    if _repository is None:
        raise HTTPException(503, "Server not initialized yet")
    return _repository
