"""Sweep types.

Public types:
- SweepResult: Outcome of one publish/takedown sweep
- LastRunStore: Where the throttle keeps the time of the last sweep
"""

from dataclasses import dataclass, field
from typing import Protocol


@dataclass
class SweepResult:
    """Outcome of one sweep.

    Counts only transitions this sweep actually applied. Records whose
    update failed are listed in failed_ids and excluded from the counts.
    """

    published_count: int = 0
    taken_down_count: int = 0
    failed_ids: list[str] = field(default_factory=list)
    # True when the throttle short-circuited and storage was never touched
    skipped: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.published_count or self.taken_down_count)

    @classmethod
    def skipped_result(cls) -> "SweepResult":
        return cls(skipped=True)


class LastRunStore(Protocol):
    """Holds the monotonic time of the last completed sweep.

    Losing this state only costs one extra sweep, which is harmless since
    sweeps are idempotent.
    """

    async def get(self) -> float | None: ...

    async def set(self, value: float) -> None: ...

    async def reset(self) -> None: ...
