"""
Poll-until-condition-or-timeout utility with an injectable clock.

Every wait in the suite goes through poll_until so tests can drive time with
a fake clock instead of sleeping.
"""

import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from selenium.common.exceptions import WebDriverException

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Clock:
    """Wall clock and blocking sleep."""

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


SYSTEM_CLOCK = Clock()


def poll_until(
    condition: Callable[[], Optional[T]],
    timeout: float,
    interval: float = 0.5,
    clock: Optional[Clock] = None,
    ignored_exceptions: Tuple[Type[BaseException], ...] = (WebDriverException,),
    description: Optional[str] = None
) -> Optional[T]:
    """
    Call condition until it returns a truthy value or the timeout elapses.

    The condition is always evaluated at least once, and once more after the
    deadline is reached. Exceptions listed in ignored_exceptions count as
    "not yet"; anything else propagates.

    Args:
        condition: Zero-argument callable
        timeout: Total budget in seconds
        interval: Pause between evaluations in seconds
        clock: Clock used for time and sleeping
        ignored_exceptions: Exceptions treated as a falsy result
        description: Optional label for debug logging

    Returns:
        The first truthy result, or None on timeout
    """
    clock = clock or SYSTEM_CLOCK
    deadline = clock.monotonic() + max(timeout, 0)
    polls = 0

    while True:
        polls += 1
        try:
            result = condition()
            if result:
                return result
        except ignored_exceptions as error:
            logger.debug(f'Poll {polls} for {description or "condition"} raised {error.__class__.__name__}')

        remaining = deadline - clock.monotonic()
        if remaining <= 0:
            logger.debug(f'Timed out polling for {description or "condition"} after {polls} polls')
            return None
        clock.sleep(min(interval, remaining))
