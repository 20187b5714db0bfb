"""Tests for the publish/takedown sweep."""

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from bulletin.errors import StorageUnavailableError
from bulletin.scheduling import Scheduler, SweepResult


def ts(*args: int) -> datetime:
    return datetime(*args, tzinfo=UTC)


class TestRunSweep:
    """Tests for Scheduler.run_sweep()."""

    async def test_publishes_due_announcement(
        self, scheduler, announcement_store, make_announcement
    ):
        a = await make_announcement(scheduled_at=ts(2024, 1, 1))

        result = await scheduler.run_sweep(ts(2024, 1, 1, 0, 0, 1))

        assert result.published_count == 1
        assert result.taken_down_count == 0
        assert result.failed_ids == []
        updated = await announcement_store.require(a.id)
        assert updated.is_published is True
        assert updated.scheduled_at is None

    async def test_second_sweep_changes_nothing(
        self, scheduler, announcement_store, make_announcement
    ):
        a = await make_announcement(scheduled_at=ts(2024, 1, 1))
        await scheduler.run_sweep(ts(2024, 1, 1, 0, 0, 1))
        after_first = await announcement_store.require(a.id)

        result = await scheduler.run_sweep(ts(2024, 1, 1, 0, 5))

        assert result.published_count == 0
        assert result.taken_down_count == 0
        after_second = await announcement_store.require(a.id)
        assert after_second.is_published is True
        assert after_second.scheduled_at is None
        assert after_second.updated_at == after_first.updated_at

    async def test_takes_down_expired_announcement(
        self, scheduler, announcement_store, make_announcement
    ):
        a = await make_announcement(is_published=True, takedown_at=ts(2024, 2, 1))

        result = await scheduler.run_sweep(ts(2024, 2, 1, 0, 0, 1))

        assert result.taken_down_count == 1
        assert result.published_count == 0
        updated = await announcement_store.require(a.id)
        assert updated.is_published is False
        assert updated.takedown_at is None

    async def test_boundary_is_inclusive(
        self, scheduler, announcement_store, make_announcement, now
    ):
        a = await make_announcement(scheduled_at=now)

        result = await scheduler.run_sweep(now)

        assert result.published_count == 1
        assert (await announcement_store.require(a.id)).is_published is True

    async def test_future_schedule_untouched(
        self, scheduler, announcement_store, make_announcement, now
    ):
        scheduled = await make_announcement(scheduled_at=now + timedelta(seconds=1))
        live = await make_announcement(
            is_published=True, takedown_at=now + timedelta(days=1)
        )

        result = await scheduler.run_sweep(now)

        assert result == SweepResult()
        assert (await announcement_store.require(scheduled.id)).scheduled_at == (
            now + timedelta(seconds=1)
        )
        assert (await announcement_store.require(live.id)).is_published is True

    async def test_drafts_without_schedule_untouched(
        self, scheduler, announcement_store, make_announcement, now
    ):
        draft = await make_announcement()

        result = await scheduler.run_sweep(now)

        assert not result.changed
        assert (await announcement_store.require(draft.id)).is_published is False

    async def test_published_with_stale_schedule_is_ignored(
        self, scheduler, announcement_store, make_announcement, now
    ):
        # Already live: the publish predicate does not select it
        a = await make_announcement(
            is_published=True, scheduled_at=now - timedelta(hours=1)
        )

        result = await scheduler.run_sweep(now)

        assert result.published_count == 0
        assert (await announcement_store.require(a.id)).scheduled_at is not None

    async def test_publish_and_takedown_in_same_sweep_counts_separately(
        self, scheduler, make_announcement, now
    ):
        await make_announcement(scheduled_at=now - timedelta(minutes=5))
        await make_announcement(scheduled_at=now - timedelta(minutes=1))
        await make_announcement(
            is_published=True, takedown_at=now - timedelta(minutes=1)
        )

        result = await scheduler.run_sweep(now)

        assert result.published_count == 2
        assert result.taken_down_count == 1

    async def test_no_double_transition_in_one_sweep(
        self, scheduler, announcement_store, make_announcement, now
    ):
        # Both schedule fields are due; only the publish applies this sweep
        a = await make_announcement(
            scheduled_at=now - timedelta(hours=2),
            takedown_at=now - timedelta(hours=1),
        )

        first = await scheduler.run_sweep(now)

        assert first.published_count == 1
        assert first.taken_down_count == 0
        after_first = await announcement_store.require(a.id)
        assert after_first.is_published is True
        assert after_first.takedown_at is not None

        second = await scheduler.run_sweep(now)

        assert second.published_count == 0
        assert second.taken_down_count == 1
        after_second = await announcement_store.require(a.id)
        assert after_second.is_published is False
        assert after_second.scheduled_at is None
        assert after_second.takedown_at is None

    async def test_naive_now_is_treated_as_utc(
        self, scheduler, announcement_store, make_announcement
    ):
        a = await make_announcement(scheduled_at=ts(2024, 1, 1))

        result = await scheduler.run_sweep(datetime(2024, 1, 1, 0, 0, 1))

        assert result.published_count == 1
        assert (await announcement_store.require(a.id)).is_published is True


class TestConcurrentSweeps:
    """Overlapping sweeps must not apply or count a transition twice."""

    async def test_overlapping_sweeps_count_once(
        self, announcement_store, make_announcement, now
    ):
        for _ in range(3):
            await make_announcement(scheduled_at=now - timedelta(minutes=1))

        a, b = await asyncio.gather(
            Scheduler(announcement_store).run_sweep(now),
            Scheduler(announcement_store).run_sweep(now),
        )

        assert a.published_count + b.published_count == 3
        assert a.failed_ids == b.failed_ids == []

    async def test_transition_already_applied_is_not_counted(
        self, announcement_store, make_announcement, now
    ):
        a = await make_announcement(scheduled_at=now - timedelta(minutes=1))
        stale_selection = [await announcement_store.require(a.id)]

        # Another sweep wins the race between selection and update
        assert await announcement_store.publish_if_due(a.id, now) is True

        store = AsyncMock(wraps=announcement_store)
        store.find_many = AsyncMock(side_effect=[stale_selection, []])
        result = await Scheduler(store).run_sweep(now)

        assert result.published_count == 0
        assert result.failed_ids == []


class TestSweepFailures:
    """Tests for per-record failure handling."""

    async def test_record_failure_is_isolated(
        self, announcement_store, make_announcement, now
    ):
        broken = await make_announcement(scheduled_at=now - timedelta(minutes=2))
        healthy = await make_announcement(scheduled_at=now - timedelta(minutes=1))

        real_publish = announcement_store.publish_if_due

        async def flaky_publish(announcement_id, when):
            if announcement_id == broken.id:
                raise RuntimeError("row is corrupt")
            return await real_publish(announcement_id, when)

        store = AsyncMock(wraps=announcement_store)
        store.publish_if_due = AsyncMock(side_effect=flaky_publish)

        result = await Scheduler(store).run_sweep(now)

        assert result.published_count == 1
        assert result.failed_ids == [broken.id]
        assert (await announcement_store.require(healthy.id)).is_published is True
        assert (await announcement_store.require(broken.id)).is_published is False

    async def test_storage_unavailable_aborts_sweep(
        self, announcement_store, make_announcement, now
    ):
        await make_announcement(scheduled_at=now - timedelta(minutes=2))
        await make_announcement(scheduled_at=now - timedelta(minutes=1))

        real_publish = announcement_store.publish_if_due
        calls = 0

        async def failing_after_first(announcement_id, when):
            nonlocal calls
            calls += 1
            if calls > 1:
                raise StorageUnavailableError("database is gone")
            return await real_publish(announcement_id, when)

        store = AsyncMock(wraps=announcement_store)
        store.publish_if_due = AsyncMock(side_effect=failing_after_first)

        with pytest.raises(StorageUnavailableError):
            await Scheduler(store).run_sweep(now)

        # The transition applied before the failure is not rolled back
        announcements = await announcement_store.find_many()
        assert sum(a.is_published for a in announcements) == 1

    async def test_selection_failure_propagates(self, now):
        store = AsyncMock()
        store.find_many.side_effect = StorageUnavailableError("unreachable")

        with pytest.raises(StorageUnavailableError):
            await Scheduler(store).run_sweep(now)

        store.publish_if_due.assert_not_called()
