"""Revision history: append-only snapshots with point-in-time restore.

Snapshots are taken *before* a change, so version N always shows what the
announcement looked like before the Nth recorded change. A restore snapshots
the current state first (tagged RESTORE), which makes the restore itself
undoable.

Version assignment is read-max-then-insert inside one transaction. The
(announcement_id, version) unique constraint rejects a duplicate from a
concurrent writer; the whole transaction is then retried with backoff.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bulletin.announcements.store import row_to_announcement
from bulletin.announcements.types import SNAPSHOT_FIELDS, AnnouncementEntry
from bulletin.db.engine import Database
from bulletin.db.models import Announcement, AnnouncementRevision
from bulletin.db.timestamps import ensure_utc
from bulletin.errors import NotFoundError
from bulletin.retry import RetryConfig, with_retry
from bulletin.revisions.types import (
    ChangeType,
    FieldChanges,
    RevisionComparison,
    RevisionEntry,
    RevisionHistory,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


def row_to_revision(row: AnnouncementRevision) -> RevisionEntry:
    """Convert an ORM row to a RevisionEntry."""
    return RevisionEntry(
        id=row.id,
        announcement_id=row.announcement_id,
        version=row.version,
        title=row.title,
        content=row.content,
        excerpt=row.excerpt,
        image_path=row.image_path,
        change_type=ChangeType(row.change_type),
        change_summary=row.change_summary,
        author_id=row.author_id,
        created_at=ensure_utc(row.created_at),
    )


async def _next_version(session: AsyncSession, announcement_id: str) -> int:
    result = await session.execute(
        select(func.max(AnnouncementRevision.version)).where(
            AnnouncementRevision.announcement_id == announcement_id
        )
    )
    return (result.scalar_one_or_none() or 0) + 1


async def _snapshot(
    session: AsyncSession,
    announcement: Announcement,
    *,
    author_id: str,
    change_type: ChangeType,
    change_summary: str | None,
) -> AnnouncementRevision:
    """Insert a snapshot of the announcement's current editorial fields."""
    version = await _next_version(session, announcement.id)
    revision = AnnouncementRevision(
        id=uuid.uuid4().hex,
        announcement_id=announcement.id,
        version=version,
        change_type=change_type.value,
        change_summary=change_summary,
        author_id=author_id,
    )
    for name in SNAPSHOT_FIELDS:
        setattr(revision, name, getattr(announcement, name))
    session.add(revision)
    # Flush now so a version collision surfaces inside the retried block
    await session.flush()
    return revision


class RevisionStore:
    """Append-only per-announcement snapshot log."""

    def __init__(self, db: Database, *, max_attempts: int = 3) -> None:
        self._db = db
        self._retry = RetryConfig(max_attempts=max_attempts)

    async def next_version(self, announcement_id: str) -> int:
        """Version the next snapshot of this announcement would get.

        Informational only: create_revision computes the version inside its
        own transaction.
        """
        async with self._db.session() as session:
            return await _next_version(session, announcement_id)

    async def create_revision(
        self,
        announcement_id: str,
        author_id: str,
        change_type: ChangeType = ChangeType.EDIT,
        change_summary: str | None = None,
    ) -> RevisionEntry:
        """Snapshot an announcement's current title, content, excerpt and image.

        Raises:
            NotFoundError: If the announcement does not exist.
        """

        async def attempt() -> RevisionEntry:
            async with self._db.session() as session:
                announcement = await session.get(Announcement, announcement_id)
                if announcement is None:
                    raise NotFoundError("Announcement", announcement_id)
                revision = await _snapshot(
                    session,
                    announcement,
                    author_id=author_id,
                    change_type=change_type,
                    change_summary=change_summary,
                )
                return row_to_revision(revision)

        entry = await with_retry(attempt, self._retry)
        logger.info(
            "revision_created",
            extra={
                "announcement.id": announcement_id,
                "revision.version": entry.version,
                "revision.change_type": change_type.value,
                "revision.author_id": author_id,
            },
        )
        return entry

    async def restore_revision(
        self, revision_id: str, author_id: str
    ) -> AnnouncementEntry:
        """Restore an announcement's editorial fields from a revision.

        The pre-restore state is snapshotted first in the same transaction;
        if that snapshot cannot be written the restore does not happen.

        Raises:
            NotFoundError: If the revision (or its announcement) does not exist.
        """

        async def attempt() -> tuple[AnnouncementEntry, int]:
            async with self._db.session() as session:
                target = await session.get(AnnouncementRevision, revision_id)
                if target is None:
                    raise NotFoundError("Revision", revision_id)
                announcement = await session.get(
                    Announcement, target.announcement_id
                )
                if announcement is None:
                    raise NotFoundError("Announcement", target.announcement_id)

                snapshot = await _snapshot(
                    session,
                    announcement,
                    author_id=author_id,
                    change_type=ChangeType.RESTORE,
                    change_summary=f"Restored to version {target.version}",
                )

                for name in SNAPSHOT_FIELDS:
                    setattr(announcement, name, getattr(target, name))
                await session.flush()
                return row_to_announcement(announcement), snapshot.version

        restored, snapshot_version = await with_retry(attempt, self._retry)
        logger.info(
            "revision_restored",
            extra={
                "announcement.id": restored.id,
                "revision.id": revision_id,
                "revision.snapshot_version": snapshot_version,
                "revision.author_id": author_id,
            },
        )
        return restored

    async def get_revision(self, revision_id: str) -> RevisionEntry:
        """Raises NotFoundError for an unknown revision id."""
        async with self._db.session() as session:
            row = await session.get(AnnouncementRevision, revision_id)
            if row is None:
                raise NotFoundError("Revision", revision_id)
            return row_to_revision(row)

    async def get_history(
        self,
        announcement_id: str,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> RevisionHistory:
        """One page of revisions, highest version first, plus the total count."""
        if limit <= 0:
            raise ValueError("limit must be positive")
        if offset < 0:
            raise ValueError("offset must not be negative")

        async with self._db.session() as session:
            rows = await session.execute(
                select(AnnouncementRevision)
                .where(AnnouncementRevision.announcement_id == announcement_id)
                .order_by(AnnouncementRevision.version.desc())
                .limit(limit)
                .offset(offset)
            )
            total = await session.execute(
                select(func.count(AnnouncementRevision.id)).where(
                    AnnouncementRevision.announcement_id == announcement_id
                )
            )
            return RevisionHistory(
                revisions=[row_to_revision(r) for r in rows.scalars().all()],
                total=int(total.scalar_one()),
                limit=limit,
                offset=offset,
            )

    async def compare_revisions(
        self, revision_id_a: str, revision_id_b: str
    ) -> RevisionComparison:
        """Flag which snapshot fields differ between two revisions.

        Raises:
            NotFoundError: If either revision does not exist.
        """
        revision_a = await self.get_revision(revision_id_a)
        revision_b = await self.get_revision(revision_id_b)
        return RevisionComparison(
            revision_a=revision_a,
            revision_b=revision_b,
            changes=FieldChanges(
                **{
                    name: getattr(revision_a, name) != getattr(revision_b, name)
                    for name in SNAPSHOT_FIELDS
                }
            ),
        )
