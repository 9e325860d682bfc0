"""
Immutable locators: a lookup strategy, a selector and ordered alternates.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterator, Tuple

from appium.webdriver.common.appiumby import AppiumBy


class LocatorStrategy(str, Enum):
    """Lookup strategies the suite uses, valued as Appium `by` strings."""
    ACCESSIBILITY_ID = AppiumBy.ACCESSIBILITY_ID
    XPATH = AppiumBy.XPATH
    CLASS_CHAIN = AppiumBy.IOS_CLASS_CHAIN
    PREDICATE_STRING = AppiumBy.IOS_PREDICATE


@dataclass(frozen=True)
class Locator:
    """
    A strategy + selector pair with alternates to try, in order, when the
    primary lookup fails.
    """
    strategy: LocatorStrategy
    selector: str
    alternates: Tuple['Locator', ...] = ()

    def __post_init__(self):
        if not self.selector:
            raise ValueError('Locator selector must not be empty')
        # Normalize lists passed by callers so the locator stays hashable
        object.__setattr__(self, 'alternates', tuple(self.alternates))

    @property
    def by(self) -> str:
        return self.strategy.value

    def as_tuple(self) -> Tuple[str, str]:
        """(by, value) pair accepted by find_element/find_elements."""
        return self.by, self.selector

    def describe(self) -> str:
        return f'{self.strategy.name.lower()}={self.selector}'

    def __str__(self) -> str:
        return self.describe()

    def chain(self) -> Iterator['Locator']:
        """The primary locator followed by its alternates, without nesting."""
        yield replace(self, alternates=())
        for alternate in self.alternates:
            yield replace(alternate, alternates=())

    def derived_ios_alternates(self) -> Tuple['Locator', ...]:
        """Class-chain and predicate fallbacks for an accessibility id."""
        if self.strategy is not LocatorStrategy.ACCESSIBILITY_ID:
            return ()
        return (
            class_chain(f'**/XCUIElementTypeAny[`name == "{self.selector}"`]'),
            predicate(f"name == '{self.selector}'"),
        )


def accessibility_id(selector: str, *alternates: Locator) -> Locator:
    return Locator(LocatorStrategy.ACCESSIBILITY_ID, selector, alternates)


def xpath(selector: str, *alternates: Locator) -> Locator:
    return Locator(LocatorStrategy.XPATH, selector, alternates)


def class_chain(selector: str, *alternates: Locator) -> Locator:
    return Locator(LocatorStrategy.CLASS_CHAIN, selector, alternates)


def predicate(selector: str, *alternates: Locator) -> Locator:
    return Locator(LocatorStrategy.PREDICATE_STRING, selector, alternates)
