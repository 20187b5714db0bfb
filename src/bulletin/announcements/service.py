"""Editorial operations on announcements.

Edits snapshot the current state into revision history before applying the
change. History is best-effort here: if the snapshot fails the edit still
goes through. Scheduler transitions never pass through this module.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import TYPE_CHECKING, Any

from bulletin.announcements.store import AnnouncementStore
from bulletin.announcements.text import generate_excerpt, slugify
from bulletin.announcements.types import (
    EDITABLE_FIELDS,
    AnnouncementEntry,
    DraftState,
)
from bulletin.db.models import utc_now
from bulletin.revisions.types import ChangeType

if TYPE_CHECKING:
    from bulletin.revisions.store import RevisionStore

logger = logging.getLogger(__name__)


def _opposing_schedule_field(is_published: bool) -> str:
    # Publishing by hand cancels a pending publish; unpublishing cancels a
    # pending takedown
    return "scheduled_at" if is_published else "takedown_at"


class AnnouncementService:
    """Create, edit and publish announcements."""

    def __init__(self, store: AnnouncementStore, revisions: RevisionStore) -> None:
        self._store = store
        self._revisions = revisions

    @property
    def store(self) -> AnnouncementStore:
        return self._store

    async def _unique_slug(self, title: str, *, exclude_id: str | None = None) -> str:
        slug = slugify(title) or "announcement"
        if await self._store.slug_exists(slug, exclude_id=exclude_id):
            slug = f"{slug}-{int(time.time() * 1000)}"
        return slug

    async def create_announcement(
        self,
        *,
        title: str,
        content: str,
        category_id: str | None = None,
        image_path: str | None = None,
        is_published: bool = False,
        scheduled_at: datetime | None = None,
        takedown_at: datetime | None = None,
        is_pinned: bool = False,
        is_hero: bool = False,
    ) -> AnnouncementEntry:
        title = title.strip()
        if not title:
            raise ValueError("title is required")
        if not content.strip():
            raise ValueError("content is required")

        return await self._store.create(
            title=title,
            slug=await self._unique_slug(title),
            content=content,
            excerpt=generate_excerpt(content),
            image_path=image_path,
            category_id=category_id,
            is_published=is_published,
            scheduled_at=scheduled_at,
            takedown_at=takedown_at,
            is_pinned=is_pinned,
            is_hero=is_hero,
        )

    async def edit(
        self,
        announcement_id: str,
        author_id: str,
        changes: dict[str, Any],
    ) -> AnnouncementEntry:
        """Apply an editor's changes, snapshotting the prior state first.

        Only keys present in changes are touched. A blank title or content
        is ignored, as create_announcement never stores one. A new title
        regenerates the slug; new content regenerates the excerpt. Flipping
        is_published follows the set_published rule unless changes also sets
        the opposing schedule field.

        Raises:
            NotFoundError: If the announcement does not exist.
            ValueError: If changes names a field editors cannot set.
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not editable: {', '.join(sorted(unknown))}")

        existing = await self._store.require(announcement_id)

        fields = dict(changes)
        # Blank title or content keeps the stored value
        for key in ("title", "content"):
            if key in fields and not (fields[key] or "").strip():
                del fields[key]
        if "title" in fields:
            fields["title"] = fields["title"].strip()
        title = fields.get("title")
        title_changed = title is not None and title != existing.title
        if title_changed:
            fields["slug"] = await self._unique_slug(title, exclude_id=announcement_id)
        if fields.get("content") is not None:
            fields["excerpt"] = generate_excerpt(fields["content"])
        publish = fields.get("is_published")
        if publish is not None and publish != existing.is_published:
            fields.setdefault(_opposing_schedule_field(publish), None)

        summary = "Title changed" if title_changed else None
        try:
            await self._revisions.create_revision(
                announcement_id,
                author_id,
                change_type=ChangeType.EDIT,
                change_summary=summary,
            )
        except Exception:
            logger.warning(
                "revision_snapshot_failed",
                extra={"announcement.id": announcement_id},
                exc_info=True,
            )

        updated = await self._store.update(announcement_id, fields)
        logger.info(
            "announcement_updated",
            extra={
                "announcement.id": announcement_id,
                "announcement.fields": sorted(fields),
                "author.id": author_id,
            },
        )
        return updated

    async def set_published(
        self, announcement_id: str, is_published: bool
    ) -> AnnouncementEntry:
        """Manually publish or unpublish, bypassing the schedule.

        A manual decision cancels the pending schedule field that would
        otherwise undo or repeat it: publishing clears scheduled_at,
        unpublishing clears takedown_at.
        """
        fields: dict[str, Any] = {
            "is_published": is_published,
            _opposing_schedule_field(is_published): None,
        }

        updated = await self._store.update(announcement_id, fields)
        logger.info(
            "announcement_publish_toggled",
            extra={"announcement.id": announcement_id, "is_published": is_published},
        )
        return updated

    async def schedule(
        self,
        announcement_id: str,
        *,
        scheduled_at: datetime | None = None,
        takedown_at: datetime | None = None,
    ) -> AnnouncementEntry:
        """Set (or clear, with None) the publish and takedown times."""
        return await self._store.update(
            announcement_id,
            {"scheduled_at": scheduled_at, "takedown_at": takedown_at},
        )

    async def record_view(self, announcement_id: str) -> None:
        await self._store.increment_view_count(announcement_id)

    async def save_draft(self, announcement_id: str, draft_content: str) -> datetime:
        """Autosave editor content without touching the live announcement."""
        if not draft_content:
            raise ValueError("draft content is required")
        saved_at = utc_now()
        await self._store.update(
            announcement_id,
            {"draft_content": draft_content, "draft_updated_at": saved_at},
        )
        return saved_at

    async def get_draft(self, announcement_id: str) -> DraftState:
        entry = await self._store.require(announcement_id)
        return DraftState(
            draft_content=entry.draft_content,
            draft_updated_at=entry.draft_updated_at,
            content=entry.content,
            content_updated_at=entry.updated_at,
        )
