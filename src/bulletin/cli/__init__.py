"""Command-line interface for Bulletin."""

from bulletin.cli.app import app

__all__ = ["app"]
