"""
Schema store — SQLite engine creation and ordered migration scripts.
"""
from __future__ import annotations

import sqlite3
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from dragevents.config import DB_PATH, MIGRATE_DIR


class MigrationError(RuntimeError):
    """A schema script failed; scripts after it were not run."""

    def __init__(self, script: str, applied: list[str], cause: Exception):
        super().__init__(f"migrate {script}: {cause}")
        self.script = script
        self.applied = applied


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def open_db(path: Path | str = DB_PATH) -> Engine:
    """Return an engine for the database file, creating its directory if needed.

    Does not check that the schema has been migrated.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{path}", future=True)
    event.listen(engine, "connect", _enable_foreign_keys)
    return engine


def migration_files(directory: Path | str = MIGRATE_DIR) -> list[Path]:
    """``*.sql`` files in directory, in lexicographic filename order."""
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Migration directory not found: {directory}")
    files = [p for p in directory.iterdir() if p.is_file() and p.suffix == ".sql"]
    return sorted(files, key=lambda p: p.name)


def migrate(engine: Engine, directory: Path | str = MIGRATE_DIR) -> list[str]:
    """Run every migration script in order, stopping at the first failure.

    Scripts applied before a failure stay applied. Returns the applied names.
    """
    applied: list[str] = []
    raw = engine.raw_connection()
    try:
        for script in migration_files(directory):
            sql = script.read_text(encoding="utf-8")
            cursor = raw.cursor()
            try:
                cursor.executescript(sql)
            except sqlite3.Error as exc:
                raise MigrationError(script.name, applied, exc) from exc
            finally:
                cursor.close()
            raw.commit()
            applied.append(script.name)
            print(f"  Applied {script.name}")
    finally:
        raw.close()
    return applied
