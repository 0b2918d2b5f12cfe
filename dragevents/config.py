"""
DFW Drag Events — Configuration: paths, CSV headers, output formats.
"""
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths — relative to the working directory unless overridden by env vars
# ---------------------------------------------------------------------------
DB_PATH = Path(os.environ.get("DRAGEVENTS_DB_PATH", "db/db.sqlite"))
MIGRATE_DIR = Path(os.environ.get("DRAGEVENTS_MIGRATE_DIR", str(Path(__file__).parent / "migrations")))
SITE_DIR = Path(os.environ.get("DRAGEVENTS_SITE_DIR", "site"))
EXPORT_DIR = Path(os.environ.get("DRAGEVENTS_EXPORT_DIR", str(SITE_DIR / "data")))

TRACKS_FILE = "tracks.json"
EVENTS_FILE = "events.json"

# ---------------------------------------------------------------------------
# CSV import headers (order-sensitive, must match exactly)
# ---------------------------------------------------------------------------
EVENT_CSV_HEADER = (
    "title", "track_id", "start_date", "end_date",
    "driver_fee", "spectator_fee", "url", "description",
)
EVENT_CLASS_CSV_HEADER = ("event_id", "name", "buyin_fee")
EVENT_CLASS_RULE_CSV_HEADER = ("event_class_id", "rule")

# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------
# Display format for CLI listings and the interactive prompt
DISPLAY_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Candidate storage formats, tried in order (first match wins).
# %z accepts both "Z" and "+HH:MM".
TIMESTAMP_FORMATS = [
    "%Y-%m-%d %H:%M:%S.%f%z",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%d",
]

# ---------------------------------------------------------------------------
# Preview server
# ---------------------------------------------------------------------------
DEFAULT_PORT = int(os.environ.get("PORT", "8000"))
