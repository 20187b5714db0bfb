"""Publish/takedown sweep.

One sweep brings is_published in line with the schedule fields:

1. is_published = false AND scheduled_at <= now  ->  publish, clear scheduled_at
2. is_published = true AND takedown_at <= now    ->  unpublish, clear takedown_at

Clearing the timestamp is the idempotence guard: a second sweep no longer
selects the record. Each transition is a conditional row update, so a
record selected by two overlapping sweeps is transitioned (and counted)
once. The two predicates are disjoint on is_published, so a record is never
both published and taken down by the same sweep.
"""

import logging
from datetime import datetime

from bulletin.announcements.store import AnnouncementStore
from bulletin.announcements.types import AnnouncementFilter
from bulletin.db.timestamps import ensure_utc
from bulletin.errors import StorageUnavailableError
from bulletin.scheduling.types import SweepResult

logger = logging.getLogger(__name__)


class Scheduler:
    """Runs publish/takedown sweeps against the announcement store."""

    def __init__(self, store: AnnouncementStore) -> None:
        self._store = store

    async def run_sweep(self, now: datetime) -> SweepResult:
        """Apply every due publish and takedown.

        A failure updating one record is logged and skipped. Storage
        unavailability aborts the sweep; transitions already applied stay.

        Raises:
            StorageUnavailableError: If the database cannot be reached.
        """
        now = ensure_utc(now)
        result = SweepResult()

        # Select both sets before transitioning anything, so a record this
        # sweep publishes is not picked up again for takedown
        to_publish = await self._store.find_many(
            AnnouncementFilter(is_published=False, scheduled_before=now)
        )
        to_take_down = await self._store.find_many(
            AnnouncementFilter(is_published=True, takedown_before=now)
        )

        for announcement in to_publish:
            if await self._transition(
                announcement.id, announcement.title, now, result, publish=True
            ):
                result.published_count += 1

        for announcement in to_take_down:
            if await self._transition(
                announcement.id, announcement.title, now, result, publish=False
            ):
                result.taken_down_count += 1

        if result.changed or result.failed_ids:
            logger.info(
                "sweep_completed",
                extra={
                    "sweep.published": result.published_count,
                    "sweep.taken_down": result.taken_down_count,
                    "sweep.failed": len(result.failed_ids),
                    "sweep.now": now.isoformat(),
                },
            )
        return result

    async def _transition(
        self,
        announcement_id: str,
        title: str,
        now: datetime,
        result: SweepResult,
        *,
        publish: bool,
    ) -> bool:
        action = "published" if publish else "taken_down"
        try:
            if publish:
                changed = await self._store.publish_if_due(announcement_id, now)
            else:
                changed = await self._store.take_down_if_due(announcement_id, now)
        except StorageUnavailableError:
            raise
        except Exception:
            logger.exception(
                "sweep_record_failed",
                extra={"announcement.id": announcement_id, "sweep.action": action},
            )
            result.failed_ids.append(announcement_id)
            return False

        if changed:
            logger.info(
                f"announcement_{action}",
                extra={"announcement.id": announcement_id, "announcement.title": title},
            )
        else:
            # Another sweep (or an editor) got there first
            logger.debug(
                "sweep_record_already_handled",
                extra={"announcement.id": announcement_id, "sweep.action": action},
            )
        return changed
