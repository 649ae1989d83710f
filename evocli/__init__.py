"""Command-line client for the Alice EVO cloud VPS API."""

__version__ = "0.1.0"
