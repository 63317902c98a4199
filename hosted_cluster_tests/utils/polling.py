"""Bounded polling for conditions that become true asynchronously."""

import dataclasses
import logging
import time
import typing as tp

from hosted_cluster_tests.utils import errors

LOGGER = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, order=True)
class PollSettings:
    interval: float
    timeout: float

    def __post_init__(self) -> None:
        if self.interval < 0 or self.timeout < 0:
            msg = f"Invalid poll settings: interval={self.interval}, timeout={self.timeout}"
            raise ValueError(msg)


def poll(
    condition: tp.Callable[[], bool],
    *,
    interval: float,
    timeout: float,
    desc: str = "condition",
    clock: tp.Callable[[], float] = time.monotonic,
    sleep: tp.Callable[[float], None] = time.sleep,
) -> int:
    """Wait until `condition` returns True.

    Every attempt is preceded by a sleep of `interval` seconds. The condition is attempted
    at least once, and no new attempt is started once the `timeout` has elapsed, so the wait
    doesn't take more than `timeout` plus one `interval` (plus the time spent in the
    condition itself).

    Exceptions raised by the condition are not handled here. A condition that considers
    an error transient is expected to log it and return False.

    Args:
        condition: A callable returning True once the awaited state is reached.
        interval: Seconds to sleep before each attempt.
        timeout: Seconds after which no further attempt is made.
        desc: A description of the awaited condition, used in log and error messages.
        clock: A monotonic clock (for tests).
        sleep: A sleep function (for tests).

    Returns:
        int: A number of attempts it took.
    """
    deadline = clock() + timeout
    attempt = 0

    while True:
        sleep(interval)
        attempt += 1
        if condition():
            LOGGER.debug(f"Condition '{desc}' met after {attempt} attempt(s)")
            return attempt
        if clock() >= deadline:
            break

    msg = f"timed out after {timeout}s ({attempt} attempt(s)) waiting for {desc}"
    raise errors.PollTimeoutError(msg)


def poll_with(
    condition: tp.Callable[[], bool], *, settings: PollSettings, desc: str = "condition"
) -> int:
    """Wait until `condition` returns True, using the interval and timeout from `settings`."""
    return poll(condition, interval=settings.interval, timeout=settings.timeout, desc=desc)
