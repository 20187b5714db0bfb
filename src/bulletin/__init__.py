"""Bulletin - announcement scheduling and revision history core."""

__version__ = "0.1.0"
