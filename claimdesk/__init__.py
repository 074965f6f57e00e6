"""Invoice and advance insurance claim lifecycle service."""

__version__ = "0.1.0"
