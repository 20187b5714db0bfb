"""Public types for announcements."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class PublicationState(Enum):
    """Where an announcement sits in the publish/takedown lifecycle.

    - draft: not published, nothing scheduled
    - scheduled: not published, scheduled_at set
    - published: published, no takedown pending
    - published_with_takedown: published, takedown_at set
    """

    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    PUBLISHED_WITH_TAKEDOWN = "published_with_takedown"


@dataclass
class AnnouncementEntry:
    """An announcement as seen by the core."""

    id: str
    title: str
    slug: str
    content: str
    excerpt: str | None = None
    image_path: str | None = None
    category_id: str | None = None
    is_published: bool = False
    scheduled_at: datetime | None = None
    takedown_at: datetime | None = None
    view_count: int = 0
    is_pinned: bool = False
    is_hero: bool = False
    draft_content: str | None = None
    draft_updated_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def publication_state(self) -> PublicationState:
        if self.is_published:
            if self.takedown_at is not None:
                return PublicationState.PUBLISHED_WITH_TAKEDOWN
            return PublicationState.PUBLISHED
        if self.scheduled_at is not None:
            return PublicationState.SCHEDULED
        return PublicationState.DRAFT


@dataclass
class AnnouncementFilter:
    """Predicates for AnnouncementStore.find_many / count.

    All set predicates are ANDed. scheduled_before / takedown_before also
    require the field to be non-null.
    """

    is_published: bool | None = None
    scheduled_before: datetime | None = None
    takedown_before: datetime | None = None
    category_slug: str | None = None
    query: str | None = None
    limit: int | None = None
    offset: int = 0


@dataclass
class DraftState:
    """Autosaved draft alongside the live content."""

    draft_content: str | None
    draft_updated_at: datetime | None
    content: str
    content_updated_at: datetime | None

    @property
    def has_draft(self) -> bool:
        return bool(self.draft_content)


# Fields an edit may change; anything else is rejected by the service
EDITABLE_FIELDS = frozenset(
    {
        "title",
        "content",
        "category_id",
        "image_path",
        "is_hero",
        "is_pinned",
        "is_published",
        "scheduled_at",
        "takedown_at",
    }
)

# Fields captured in a revision snapshot and overwritten by a restore
SNAPSHOT_FIELDS = ("title", "content", "excerpt", "image_path")
