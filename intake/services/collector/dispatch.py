"""Concurrent fan-out with per-call timeout and retry.

Every task runs under the same RetryPolicy; all tasks settle (success or
failure) before `dispatch_all` returns, and no task's failure cancels
another.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Generic, TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from intake.config.pipeline import RetryPolicy
from intake.core.exceptions import SourceFetchError
from intake.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Failures worth another attempt; anything else fails immediately.
TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    TimeoutError,
    httpx.TransportError,
    SourceFetchError,
)


@dataclass
class DispatchOutcome(Generic[T]):
    """Settled result of one dispatched task.

    Attributes:
        name: Task name
        value: Task result when it succeeded
        error: Human-readable failure when it did not
        exception: The final exception when it did not
        attempts: Attempts made
        duration: Wall time across all attempts (seconds)
    """

    name: str
    value: T | None = None
    error: str | None = None
    exception: BaseException | None = None
    attempts: int = 0
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        """Whether the task succeeded."""
        return self.error is None


def _describe(exc: BaseException, policy: RetryPolicy) -> str:
    if isinstance(exc, TimeoutError):
        return f"timed out after {policy.timeout_seconds:g}s"
    return str(exc) or exc.__class__.__name__


async def call_with_retry(
    fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
) -> T:
    """Call `fn` under the policy's timeout and retry budget.

    Args:
        fn: Zero-argument coroutine factory, called once per attempt
        policy: Retry policy

    Returns:
        The first successful result

    Raises:
        Exception: The last attempt's error once the budget is exhausted
    """
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(
            multiplier=policy.backoff_multiplier,
            min=policy.backoff_min,
            max=policy.backoff_max,
        ),
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        reraise=True,
    ):
        with attempt:
            return await asyncio.wait_for(fn(), timeout=policy.timeout_seconds)
    raise AssertionError("unreachable: AsyncRetrying re-raises the last error")


async def dispatch_all(
    tasks: Mapping[str, Callable[[], Awaitable[T]]],
    policy: RetryPolicy,
    max_concurrency: int = 8,
) -> list[DispatchOutcome[T]]:
    """Run named tasks concurrently and wait for all of them to settle.

    Args:
        tasks: Task name -> coroutine factory
        policy: Retry policy applied to each task
        max_concurrency: Maximum tasks in flight at once

    Returns:
        One outcome per task, in the mapping's order
    """
    semaphore = asyncio.Semaphore(max_concurrency)

    async def run_one(name: str, fn: Callable[[], Awaitable[T]]) -> DispatchOutcome[T]:
        attempts = 0

        async def counted() -> T:
            nonlocal attempts
            attempts += 1
            return await fn()

        async with semaphore:
            started = time.monotonic()
            try:
                value = await call_with_retry(counted, policy)
            except Exception as e:
                logger.warning(
                    "Dispatched task failed",
                    task=name,
                    attempts=attempts,
                    error=_describe(e, policy),
                    error_type=type(e).__name__,
                )
                return DispatchOutcome(
                    name=name,
                    error=_describe(e, policy),
                    exception=e,
                    attempts=attempts,
                    duration=time.monotonic() - started,
                )
            return DispatchOutcome(
                name=name,
                value=value,
                attempts=attempts,
                duration=time.monotonic() - started,
            )

    return list(await asyncio.gather(*(run_one(name, fn) for name, fn in tasks.items())))


__all__ = [
    "DispatchOutcome",
    "TRANSIENT_ERRORS",
    "call_with_retry",
    "dispatch_all",
]
