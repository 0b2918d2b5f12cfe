"""DFW Drag Events — calendar data tools and static site export."""

__version__ = "1.0.0"
