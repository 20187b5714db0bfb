"""Retry utilities with exponential backoff for conflicting writes."""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 3
    base_delay: float = 0.05
    max_delay: float = 1.0
    exponential_base: float = 2.0
    jitter: float = 0.1  # Adds random jitter so racing writers drift apart


def is_conflict_error(error: Exception) -> bool:
    """Check if an error is a uniqueness conflict worth retrying."""
    return isinstance(error, IntegrityError)


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """Calculate delay before next retry with exponential backoff and jitter.

    Args:
        attempt: Current attempt number (1-indexed).
        config: Retry configuration.

    Returns:
        Delay in seconds.
    """
    delay = config.base_delay * (config.exponential_base ** (attempt - 1))
    delay = min(delay, config.max_delay)

    jitter_range = delay * config.jitter
    delay += random.uniform(-jitter_range, jitter_range)  # noqa: S311

    return max(0, delay)


async def with_retry(
    func: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    is_retryable: Callable[[Exception], bool] = is_conflict_error,
) -> T:
    """Execute async function, retrying retryable errors with backoff.

    Args:
        func: Async function to execute (takes no arguments). Each call must
            run in a fresh transaction.
        config: Retry configuration.
        is_retryable: Predicate deciding whether an error is worth retrying.

    Returns:
        Result from successful function execution.

    Raises:
        Exception: The last exception if all retries fail, or the first
            non-retryable one.
    """
    if config is None:
        config = RetryConfig()

    for attempt in range(1, config.max_attempts + 1):
        try:
            return await func()
        except Exception as e:
            if not is_retryable(e):
                raise

            if attempt >= config.max_attempts:
                logger.warning(
                    "retry_exhausted",
                    extra={"retry.attempts": attempt, "error.message": str(e)},
                )
                raise

            delay = calculate_delay(attempt, config)
            logger.info(
                "retrying_after_conflict",
                extra={
                    "retry.attempt": attempt,
                    "retry.max_attempts": config.max_attempts,
                    "retry.delay": round(delay, 3),
                },
            )
            await asyncio.sleep(delay)

    raise RuntimeError("Unexpected retry loop exit")
