"""Database layer."""

from bulletin.db.engine import Database, get_database, init_database
from bulletin.db.models import (
    Announcement,
    AnnouncementRevision,
    Base,
    Category,
)

__all__ = [
    # Engine
    "Database",
    "get_database",
    "init_database",
    # Models
    "Announcement",
    "AnnouncementRevision",
    "Base",
    "Category",
]
