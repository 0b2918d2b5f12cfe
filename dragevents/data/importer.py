"""
Streaming CSV import for events, event classes and class rules.

All three entity kinds share one routine: validate the header, then parse and
insert one record at a time, stopping at the first bad row. Rows inserted
before the bad row stay in the database.
"""
from __future__ import annotations

import csv
import math
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from dragevents.config import (
    EVENT_CSV_HEADER, EVENT_CLASS_CSV_HEADER, EVENT_CLASS_RULE_CSV_HEADER,
)
from dragevents.data.repository import Repository

_INT_RE = re.compile(r"^[+-]?\d+$")
# SQLite INTEGER is a signed 64-bit value
_INT_MIN, _INT_MAX = -(2 ** 63), 2 ** 63 - 1
_FLOAT_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


class CSVImportError(ValueError):
    """Import stopped early. ``imported`` rows were committed before it."""

    def __init__(self, message: str, imported: int = 0, line: Optional[int] = None):
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.imported = imported
        self.line = line


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------

def parse_id(value: str, field: str) -> int:
    if not _INT_RE.match(value):
        raise ValueError(f"invalid {field}: {value!r}")
    number = int(value)
    if not _INT_MIN <= number <= _INT_MAX:
        raise ValueError(f"invalid {field}: {value!r} out of range")
    return number


def parse_optional_float(value: str, field: str) -> Optional[float]:
    """Decimal with '.' as separator regardless of locale; '' means absent."""
    if value == "":
        return None
    if not _FLOAT_RE.match(value):
        raise ValueError(f"invalid {field}: {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"invalid {field}: {value!r}")
    return number


# ---------------------------------------------------------------------------
# Generic import loop
# ---------------------------------------------------------------------------

RowInserter = Callable[[Repository, list[str]], int]


@dataclass(frozen=True)
class CSVSchema:
    entity: str
    header: tuple[str, ...]
    insert_row: RowInserter

    @property
    def columns(self) -> int:
        return len(self.header)


def import_csv(repo: Repository, path: Path | str, schema: CSVSchema) -> int:
    """Import every data row of a CSV file. Returns the number inserted.

    Raises CSVImportError on a header mismatch (nothing imported) or on the
    first malformed / rejected row (earlier rows stay imported).
    """
    count = 0
    with open(path, newline="", encoding="utf-8-sig") as f:
        reader = csv.reader(f, strict=True)
        try:
            header = next(reader, None)
        except csv.Error as exc:
            raise CSVImportError(f"read CSV header: {exc}") from exc
        if header is None:
            raise CSVImportError("read CSV header: file is empty")

        header = tuple(h.strip() for h in header)
        if len(header) != schema.columns:
            raise CSVImportError(
                f"invalid CSV format: expected {schema.columns} columns, got {len(header)}"
            )
        if header != schema.header:
            raise CSVImportError(
                f"invalid CSV header: expected {','.join(schema.header)}, got {','.join(header)}"
            )

        while True:
            try:
                record = next(reader, None)
            except csv.Error as exc:
                raise CSVImportError(f"read CSV: {exc}", count, reader.line_num) from exc
            if record is None:
                break
            if not record:
                continue
            line = reader.line_num
            if len(record) != schema.columns:
                raise CSVImportError(
                    f"expected {schema.columns} columns, got {len(record)}", count, line
                )
            fields = [value.strip() for value in record]
            try:
                schema.insert_row(repo, fields)
            except ValueError as exc:
                raise CSVImportError(str(exc), count, line) from exc
            except SQLAlchemyError as exc:
                cause = getattr(exc, "orig", None) or exc
                raise CSVImportError(f"create {schema.entity}: {cause}", count, line) from exc
            count += 1
    return count


# ---------------------------------------------------------------------------
# Entity bindings
# ---------------------------------------------------------------------------

def _insert_event(repo: Repository, fields: list[str]) -> int:
    title, track_id, start_date, end_date, driver_fee, spectator_fee, url, description = fields
    return repo.create_event(
        title,
        parse_id(track_id, "track_id"),
        start_date,
        end_date,
        parse_optional_float(driver_fee, "driver_fee"),
        parse_optional_float(spectator_fee, "spectator_fee"),
        url,
        description,
    )


def _insert_event_class(repo: Repository, fields: list[str]) -> int:
    event_id, name, buyin_fee = fields
    return repo.create_event_class(
        parse_id(event_id, "event_id"),
        name,
        parse_optional_float(buyin_fee, "buyin_fee"),
    )


def _insert_event_class_rule(repo: Repository, fields: list[str]) -> int:
    event_class_id, rule = fields
    return repo.create_event_class_rule(parse_id(event_class_id, "event_class_id"), rule)


EVENT_SCHEMA = CSVSchema("event", EVENT_CSV_HEADER, _insert_event)
EVENT_CLASS_SCHEMA = CSVSchema("event class", EVENT_CLASS_CSV_HEADER, _insert_event_class)
EVENT_CLASS_RULE_SCHEMA = CSVSchema("event class rule", EVENT_CLASS_RULE_CSV_HEADER, _insert_event_class_rule)


def import_events(repo: Repository, path: Path | str) -> int:
    return import_csv(repo, path, EVENT_SCHEMA)


def import_event_classes(repo: Repository, path: Path | str) -> int:
    return import_csv(repo, path, EVENT_CLASS_SCHEMA)


def import_event_class_rules(repo: Repository, path: Path | str) -> int:
    return import_csv(repo, path, EVENT_CLASS_RULE_SCHEMA)
