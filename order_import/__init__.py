"""Excel order export -> bulk-import JSON converter."""

__version__ = "0.1.0"
