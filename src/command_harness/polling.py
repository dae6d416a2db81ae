"""Bounded polling for effects that become visible eventually."""

from __future__ import annotations

import asyncio
import inspect
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

from .constants import POLL_INTERVAL_SECONDS, RESULT_WAIT_SECONDS

T = TypeVar("T")

QueryFn = Callable[[], Union[Awaitable[T], T]]
AttemptCallback = Callable[[int, Any, float], Optional[Awaitable[None]]]


class PollState(str, Enum):
    """States of a poll loop."""

    POLLING = "polling"
    SATISFIED = "satisfied"
    TIMED_OUT = "timed_out"


def next_state(elapsed: float, satisfied: bool, interval: float, deadline: float) -> PollState:
    """Decide what follows an attempt finished ``elapsed`` seconds into the loop.

    Another attempt is only scheduled if it would start within the deadline.

    Args:
        elapsed: Seconds since the first attempt started
        satisfied: Whether the predicate held for the attempt's result
        interval: Seconds to wait before the next attempt
        deadline: Total seconds the loop may run

    Returns:
        PollState for the loop after this attempt
    """
    if satisfied:
        return PollState.SATISFIED
    if elapsed + interval > deadline:
        return PollState.TIMED_OUT
    return PollState.POLLING


@dataclass
class PollOutcome(Generic[T]):
    """Final state of a poll loop.

    Attributes:
        state (PollState): SATISFIED or TIMED_OUT.
        result (Optional[T]): Result of the last query attempt.
        attempts (int): Number of times the query was invoked.
        elapsed (float): Seconds between the first attempt and the last decision.
    """

    state: PollState
    result: Optional[T]
    attempts: int
    elapsed: float

    @property
    def satisfied(self) -> bool:
        return self.state == PollState.SATISFIED

    @property
    def timed_out(self) -> bool:
        return self.state == PollState.TIMED_OUT


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def poll_until(
    query: QueryFn[T],
    predicate: Callable[[T], bool],
    interval: float = POLL_INTERVAL_SECONDS,
    deadline: float = RESULT_WAIT_SECONDS,
    *,
    on_attempt: Optional[AttemptCallback] = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> PollOutcome[T]:
    """Invoke ``query`` until ``predicate`` holds for its result or time runs out.

    A timeout is reported through the returned outcome rather than raised, so
    the caller can make a final check and fail with its own context. Errors
    raised by ``query`` or ``predicate`` propagate unchanged.

    Args:
        query: Callable (sync or async, no arguments) returning the current result
        predicate: Returns True once the result shows the awaited effect
        interval: Seconds to wait between attempts
        deadline: Total seconds the loop may run
        on_attempt: Optional callback (attempt_number, result, elapsed) after each attempt
        clock: Monotonic time source in seconds
        sleep: Coroutine used to wait between attempts

    Returns:
        PollOutcome with the last result and the final state

    Raises:
        ValueError: If interval is not positive or deadline is negative
    """
    if interval <= 0:
        raise ValueError(f"Poll interval must be positive, got {interval}.")
    if deadline < 0:
        raise ValueError(f"Poll deadline cannot be negative, got {deadline}.")

    start = clock()
    attempts = 0
    while True:
        result = await _maybe_await(query())
        attempts += 1
        elapsed = clock() - start

        if on_attempt is not None:
            await _maybe_await(on_attempt(attempts, result, elapsed))

        state = next_state(elapsed, bool(predicate(result)), interval, deadline)
        if state != PollState.POLLING:
            return PollOutcome(state=state, result=result, attempts=attempts, elapsed=elapsed)

        await sleep(interval)


def has_records(result: Any) -> bool:
    """Predicate satisfied by any non-empty query result, tolerating None."""
    return bool(result)
