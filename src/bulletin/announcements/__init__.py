"""Announcements: persistence and editorial operations.

Public API:
- AnnouncementStore: find/update/transition announcement records
- AnnouncementService: create, edit (with revision snapshot), publish toggle, drafts

Types:
- AnnouncementEntry: An announcement as seen by the core
- AnnouncementFilter: Predicates for find_many / count
- PublicationState: Draft / Scheduled / Published / PublishedWithTakedown
"""

from bulletin.announcements.service import AnnouncementService
from bulletin.announcements.store import AnnouncementStore
from bulletin.announcements.types import (
    AnnouncementEntry,
    AnnouncementFilter,
    DraftState,
    PublicationState,
)

__all__ = [
    "AnnouncementEntry",
    "AnnouncementFilter",
    "AnnouncementService",
    "AnnouncementStore",
    "DraftState",
    "PublicationState",
]
