"""Revision history for announcements.

Public API:
- RevisionStore: snapshot, restore, paginated history, compare

Types:
- RevisionEntry: One immutable snapshot
- ChangeType: EDIT or RESTORE
- RevisionHistory / RevisionComparison / FieldChanges: query results
"""

from bulletin.revisions.store import RevisionStore
from bulletin.revisions.types import (
    ChangeType,
    FieldChanges,
    RevisionComparison,
    RevisionEntry,
    RevisionHistory,
)

__all__ = [
    "ChangeType",
    "FieldChanges",
    "RevisionComparison",
    "RevisionEntry",
    "RevisionHistory",
    "RevisionStore",
]
