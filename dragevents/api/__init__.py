"""Read-only preview API over the calendar database."""
