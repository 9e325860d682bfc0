"""
Bounded retry with a fixed delay between attempts.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from mobile_e2e.core.polling import SYSTEM_CLOCK, Clock
from mobile_e2e.infrastructure.appium_error_handler import is_retryable

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class RetryPolicy:
    """
    Run an action up to max_attempts times, sleeping delay seconds between
    attempts.

    Args:
        max_attempts: Maximum number of invocations (at least 1)
        delay: Fixed pause between attempts in seconds
        clock: Clock used for sleeping
    """
    max_attempts: int = 3
    delay: float = 1.0
    clock: Clock = field(default=SYSTEM_CLOCK)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f'max_attempts must be at least 1, got {self.max_attempts}')

    def execute(self, action: Callable[[], T], context: Optional[str] = None) -> T:
        """
        Invoke action until it returns without raising.

        Returns:
            Result of the first successful invocation

        Raises:
            The last exception raised by action once attempts are exhausted,
            or immediately for errors a retry cannot fix
        """
        context_str = f"{context}: " if context else ""

        for attempt in range(1, self.max_attempts + 1):
            try:
                return action()
            except Exception as error:
                if not is_retryable(error):
                    raise

                if attempt == self.max_attempts:
                    logger.warning(
                        f"[Retry] {context_str}Giving up after {attempt} attempts: {error}"
                    )
                    raise

                logger.warning(
                    f"[Retry] {context_str}Attempt {attempt} failed ({error.__class__.__name__}), "
                    f"retrying in {self.delay}s..."
                )
                self.clock.sleep(self.delay)

        # max_attempts >= 1 guarantees a return or raise above
        raise RuntimeError("Retry loop exited without a result")

    def execute_until_true(self, action: Callable[[], bool], context: Optional[str] = None) -> bool:
        """
        Invoke a boolean action until it returns True.

        False results and retryable exceptions both count as failed attempts.

        Returns:
            True on success, False once attempts are exhausted
        """
        context_str = f"{context}: " if context else ""

        for attempt in range(1, self.max_attempts + 1):
            try:
                if action():
                    return True
                logger.warning(f"[Retry] {context_str}Attempt {attempt} returned False")
            except Exception as error:
                if not is_retryable(error):
                    raise
                logger.warning(f"[Retry] {context_str}Attempt {attempt} raised {error}")

            if attempt < self.max_attempts:
                self.clock.sleep(self.delay)

        return False
