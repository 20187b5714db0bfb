"""Announcement persistence.

Every public method opens its own session, so each call is one transaction
and each update is atomic for its row. The sweep's conditional transitions
(publish_if_due / take_down_if_due) re-check their selection predicate in
the UPDATE itself, which keeps concurrent sweeps from applying the same
transition twice.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import Select, delete, func, or_, select, update

from bulletin.announcements.types import AnnouncementEntry, AnnouncementFilter
from bulletin.db.engine import Database
from bulletin.db.models import Announcement, Category, utc_now
from bulletin.db.timestamps import ensure_utc
from bulletin.errors import NotFoundError

logger = logging.getLogger(__name__)

_DATETIME_FIELDS = frozenset(
    {"scheduled_at", "takedown_at", "draft_updated_at", "created_at", "updated_at"}
)

# Columns update() may touch; id and timestamps are managed here
_UPDATABLE_FIELDS = frozenset(
    {
        "title",
        "slug",
        "content",
        "excerpt",
        "image_path",
        "category_id",
        "is_published",
        "scheduled_at",
        "takedown_at",
        "view_count",
        "is_pinned",
        "is_hero",
        "draft_content",
        "draft_updated_at",
    }
)


def row_to_announcement(row: Announcement) -> AnnouncementEntry:
    """Convert an ORM row to an AnnouncementEntry."""
    return AnnouncementEntry(
        id=row.id,
        title=row.title,
        slug=row.slug,
        content=row.content,
        excerpt=row.excerpt,
        image_path=row.image_path,
        category_id=row.category_id,
        is_published=bool(row.is_published),
        scheduled_at=ensure_utc(row.scheduled_at),
        takedown_at=ensure_utc(row.takedown_at),
        view_count=row.view_count,
        is_pinned=bool(row.is_pinned),
        is_hero=bool(row.is_hero),
        draft_content=row.draft_content,
        draft_updated_at=ensure_utc(row.draft_updated_at),
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at),
    )


def _normalize_fields(fields: dict[str, Any]) -> dict[str, Any]:
    unknown = set(fields) - _UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown announcement fields: {', '.join(sorted(unknown))}")
    return {
        key: ensure_utc(value) if key in _DATETIME_FIELDS else value
        for key, value in fields.items()
    }


def _apply_filter(stmt: Select, flt: AnnouncementFilter) -> Select:
    if flt.is_published is not None:
        stmt = stmt.where(Announcement.is_published.is_(flt.is_published))
    if flt.scheduled_before is not None:
        stmt = stmt.where(
            Announcement.scheduled_at.is_not(None),
            Announcement.scheduled_at <= ensure_utc(flt.scheduled_before),
        )
    if flt.takedown_before is not None:
        stmt = stmt.where(
            Announcement.takedown_at.is_not(None),
            Announcement.takedown_at <= ensure_utc(flt.takedown_before),
        )
    if flt.category_slug:
        stmt = stmt.join(Category, Category.id == Announcement.category_id).where(
            Category.slug == flt.category_slug
        )
    if flt.query:
        pattern = f"%{flt.query.lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(Announcement.title).like(pattern),
                func.lower(Announcement.content).like(pattern),
            )
        )
    return stmt


class AnnouncementStore:
    """Read/write access to announcement records."""

    def __init__(self, db: Database) -> None:
        self._db = db

    @property
    def db(self) -> Database:
        return self._db

    async def create(
        self,
        *,
        title: str,
        slug: str,
        content: str,
        excerpt: str | None = None,
        image_path: str | None = None,
        category_id: str | None = None,
        is_published: bool = False,
        scheduled_at: datetime | None = None,
        takedown_at: datetime | None = None,
        is_pinned: bool = False,
        is_hero: bool = False,
    ) -> AnnouncementEntry:
        """Insert a new announcement (unpublished unless told otherwise)."""
        row = Announcement(
            id=uuid.uuid4().hex,
            title=title,
            slug=slug,
            content=content,
            excerpt=excerpt,
            image_path=image_path,
            category_id=category_id,
            is_published=is_published,
            scheduled_at=ensure_utc(scheduled_at),
            takedown_at=ensure_utc(takedown_at),
            view_count=0,
            is_pinned=is_pinned,
            is_hero=is_hero,
        )
        async with self._db.session() as session:
            session.add(row)
            await session.flush()
            entry = row_to_announcement(row)

        logger.info(
            "announcement_created",
            extra={"announcement.id": entry.id, "announcement.slug": entry.slug},
        )
        return entry

    async def get(self, announcement_id: str) -> AnnouncementEntry | None:
        async with self._db.session() as session:
            row = await session.get(Announcement, announcement_id)
            return row_to_announcement(row) if row else None

    async def require(self, announcement_id: str) -> AnnouncementEntry:
        """Get an announcement or raise NotFoundError."""
        entry = await self.get(announcement_id)
        if entry is None:
            raise NotFoundError("Announcement", announcement_id)
        return entry

    async def get_by_slug(self, slug: str) -> AnnouncementEntry | None:
        async with self._db.session() as session:
            result = await session.execute(
                select(Announcement).where(Announcement.slug == slug)
            )
            row = result.scalar_one_or_none()
            return row_to_announcement(row) if row else None

    async def slug_exists(self, slug: str, *, exclude_id: str | None = None) -> bool:
        stmt = select(Announcement.id).where(Announcement.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(Announcement.id != exclude_id)
        async with self._db.session() as session:
            result = await session.execute(stmt.limit(1))
            return result.first() is not None

    async def find_many(
        self, flt: AnnouncementFilter | None = None
    ) -> list[AnnouncementEntry]:
        """Find announcements matching a filter.

        Ordered pinned-first, then newest first.
        """
        flt = flt or AnnouncementFilter()
        stmt = _apply_filter(select(Announcement), flt).order_by(
            Announcement.is_pinned.desc(), Announcement.created_at.desc()
        )
        if flt.offset:
            stmt = stmt.offset(flt.offset)
        if flt.limit is not None:
            stmt = stmt.limit(flt.limit)

        async with self._db.session() as session:
            result = await session.execute(stmt)
            return [row_to_announcement(row) for row in result.scalars().all()]

    async def count(self, flt: AnnouncementFilter | None = None) -> int:
        flt = flt or AnnouncementFilter()
        stmt = _apply_filter(select(func.count(Announcement.id)), flt)
        async with self._db.session() as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def update(
        self, announcement_id: str, fields: dict[str, Any]
    ) -> AnnouncementEntry:
        """Apply a set of field changes to one announcement.

        Raises:
            NotFoundError: If the announcement does not exist.
            ValueError: If fields names a column that cannot be updated.
        """
        values = _normalize_fields(fields)
        async with self._db.session() as session:
            row = await session.get(Announcement, announcement_id)
            if row is None:
                raise NotFoundError("Announcement", announcement_id)
            for key, value in values.items():
                setattr(row, key, value)
            await session.flush()
            return row_to_announcement(row)

    async def publish_if_due(self, announcement_id: str, now: datetime) -> bool:
        """Publish one scheduled announcement whose time has come.

        Returns True only if this call made the transition.
        """
        now = ensure_utc(now)
        stmt = (
            update(Announcement)
            .where(
                Announcement.id == announcement_id,
                Announcement.is_published.is_(False),
                Announcement.scheduled_at.is_not(None),
                Announcement.scheduled_at <= now,
            )
            .values(is_published=True, scheduled_at=None, updated_at=utc_now())
        )
        async with self._db.session() as session:
            result = await session.execute(stmt)
            return result.rowcount == 1

    async def take_down_if_due(self, announcement_id: str, now: datetime) -> bool:
        """Unpublish one announcement whose takedown time has come.

        Returns True only if this call made the transition.
        """
        now = ensure_utc(now)
        stmt = (
            update(Announcement)
            .where(
                Announcement.id == announcement_id,
                Announcement.is_published.is_(True),
                Announcement.takedown_at.is_not(None),
                Announcement.takedown_at <= now,
            )
            .values(is_published=False, takedown_at=None, updated_at=utc_now())
        )
        async with self._db.session() as session:
            result = await session.execute(stmt)
            return result.rowcount == 1

    async def increment_view_count(self, announcement_id: str) -> None:
        stmt = (
            update(Announcement)
            .where(Announcement.id == announcement_id)
            .values(view_count=Announcement.view_count + 1)
        )
        async with self._db.session() as session:
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError("Announcement", announcement_id)

    async def delete(self, announcement_id: str) -> None:
        """Delete an announcement. Its revisions go with it."""
        async with self._db.session() as session:
            result = await session.execute(
                delete(Announcement).where(Announcement.id == announcement_id)
            )
            if result.rowcount == 0:
                raise NotFoundError("Announcement", announcement_id)

        logger.info("announcement_deleted", extra={"announcement.id": announcement_id})

    async def create_category(
        self, *, name: str, slug: str, color: str = "#3B82F6"
    ) -> str:
        """Insert a category and return its id."""
        category_id = uuid.uuid4().hex
        async with self._db.session() as session:
            session.add(Category(id=category_id, name=name, slug=slug, color=color))
        return category_id
