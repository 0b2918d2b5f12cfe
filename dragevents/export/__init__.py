"""JSON snapshot export for the static site."""
from .assembler import nest_events, load_nested_events, write_json, ensure_dir, export_all, ExportSummary
