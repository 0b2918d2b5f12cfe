"""
DFW Drag Events — FastAPI preview server: static site plus a read-only API.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from dragevents.config import DB_PATH, SITE_DIR
from dragevents.data.database import open_db
from dragevents.data.repository import Repository
from dragevents.api.dependencies import set_repository
from dragevents.api.router_meta import router as meta_router
from dragevents.api.router_calendar import router as calendar_router


def create_app(db_path: Path | str | None = None, site_dir: Path | str | None = None) -> FastAPI:
    db_path = Path(db_path) if db_path is not None else DB_PATH
    site_dir = Path(site_dir) if site_dir is not None else SITE_DIR

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the database at startup."""
        engine = open_db(db_path)
        repo = Repository(engine)
        set_repository(repo)
        print(f"  Database: {db_path.resolve()}")
        if site_dir.is_dir():
            print(f"  Site: {site_dir.resolve()}")
        else:
            print(f"  Site directory not found ({site_dir}), serving API only")
        yield
        set_repository(None)
        engine.dispose()

    app = FastAPI(
        title="DFW Drag Events",
        description="Local preview of the event calendar site and its data",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(meta_router)
    app.include_router(calendar_router)

    # Static site last so /api/* wins
    if site_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(site_dir), html=True), name="site")

    return app


app = create_app()
