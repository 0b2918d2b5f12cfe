"""Schema migration, typed repository, CSV import, seed data."""
from .database import open_db, migrate, MigrationError
from .repository import Repository
from .schemas import Track, Event, EventClass, EventClassRule
from .importer import import_events, import_event_classes, import_event_class_rules, CSVImportError
