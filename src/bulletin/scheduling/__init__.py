"""Scheduling subsystem: publish/takedown sweeps.

Public API:
- Scheduler: One idempotent publish/takedown sweep over all announcements
- ThrottledScheduler: At most one sweep per interval
- SweepWatcher: Polling loop running the throttled sweep on a timer

Types:
- SweepResult: Counts of applied transitions plus failed record ids
- LastRunStore / InMemoryLastRunStore: Throttle state
"""

from bulletin.scheduling.sweep import Scheduler
from bulletin.scheduling.throttle import InMemoryLastRunStore, ThrottledScheduler
from bulletin.scheduling.types import LastRunStore, SweepResult
from bulletin.scheduling.watcher import SweepHandler, SweepWatcher

__all__ = [
    "InMemoryLastRunStore",
    "LastRunStore",
    "Scheduler",
    "SweepHandler",
    "SweepResult",
    "SweepWatcher",
    "ThrottledScheduler",
]
