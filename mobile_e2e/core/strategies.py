"""
Ordered strategy evaluation shared by locator resolution and app lifecycle
recovery.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, Iterable, List, Optional, Tuple, TypeVar

from mobile_e2e.infrastructure.appium_error_handler import StrategiesExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class Strategy(Generic[T]):
    """A named way of producing a result."""
    name: str
    action: Callable[[], T]


@dataclass
class StrategyResult(Generic[T]):
    """Outcome of first_success."""
    value: T
    name: str
    failures: List[Tuple[str, Optional[BaseException]]] = field(default_factory=list)


def _default_accept(value) -> bool:
    return value is not None and value is not False


def first_success(
    strategies: Iterable[Strategy[T]],
    accept: Optional[Callable[[T], bool]] = None,
    context: Optional[str] = None
) -> StrategyResult[T]:
    """
    Evaluate strategies in order and stop at the first acceptable result.

    A strategy fails when it raises or when accept rejects its value; either
    way the next strategy is tried. Strategies after the first success are
    never evaluated.

    Raises:
        StrategiesExhaustedError: With every (name, error) pair when all fail
    """
    accept = accept or _default_accept
    failures: List[Tuple[str, Optional[BaseException]]] = []
    label = f'{context}: ' if context else ''

    for strategy in strategies:
        try:
            value = strategy.action()
        except Exception as error:
            logger.debug(f'{label}strategy {strategy.name} raised {error.__class__.__name__}: {error}')
            failures.append((strategy.name, error))
            continue

        if accept(value):
            if failures:
                logger.info(f'{label}succeeded with {strategy.name} after {len(failures)} failed strategies')
            return StrategyResult(value=value, name=strategy.name, failures=failures)

        logger.debug(f'{label}strategy {strategy.name} returned {value!r}')
        failures.append((strategy.name, None))

    raise StrategiesExhaustedError(failures)
