"""Public types for revision history."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ChangeType(Enum):
    """Why a revision snapshot was taken."""

    EDIT = "EDIT"
    RESTORE = "RESTORE"


@dataclass
class RevisionEntry:
    """An immutable snapshot of an announcement's editorial fields."""

    id: str
    announcement_id: str
    version: int
    title: str
    content: str
    author_id: str
    change_type: ChangeType = ChangeType.EDIT
    excerpt: str | None = None
    image_path: str | None = None
    change_summary: str | None = None
    created_at: datetime | None = None


@dataclass
class RevisionHistory:
    """One page of an announcement's history, newest version first."""

    revisions: list[RevisionEntry] = field(default_factory=list)
    total: int = 0
    limit: int = 20
    offset: int = 0

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.revisions) < self.total


@dataclass
class FieldChanges:
    """Per-field difference flags between two revisions."""

    title: bool = False
    content: bool = False
    excerpt: bool = False
    image_path: bool = False

    @property
    def any(self) -> bool:
        return self.title or self.content or self.excerpt or self.image_path


@dataclass
class RevisionComparison:
    revision_a: RevisionEntry
    revision_b: RevisionEntry
    changes: FieldChanges
