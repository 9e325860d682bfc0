"""
Resolves logical locators to live elements.

Resolution cascades from the primary locator to its alternates (iOS only),
each alternate with a fresh timeout window. A raw XPath text scan is offered
as the last resort for callers that know which text they are after.
"""

import logging
from functools import partial
from typing import Any, List, Optional

from appium.webdriver.common.appiumby import AppiumBy
from selenium.common.exceptions import NoSuchElementException, WebDriverException
from selenium.webdriver.remote.webelement import WebElement

from mobile_e2e.config.numeric_constants import (
    ELEMENT_POLL_INTERVAL,
    ELEMENT_TIMEOUT_DEFAULT,
    FIND_ELEMENTS_TIMEOUT_DEFAULT,
)
from mobile_e2e.core.context import RunContext
from mobile_e2e.core.locators import Locator
from mobile_e2e.core.polling import poll_until
from mobile_e2e.core.strategies import Strategy, first_success
from mobile_e2e.infrastructure.appium_error_handler import (
    ElementNotFoundError,
    StrategiesExhaustedError,
)

logger = logging.getLogger(__name__)


class LocatorResolver:
    """Finds elements for Locators against one driver session."""

    def __init__(self, driver: Any, context: RunContext, poll_interval: float = ELEMENT_POLL_INTERVAL):
        self.driver = driver
        self.context = context
        self.poll_interval = poll_interval

    def candidates(self, locator: Locator) -> List[Locator]:
        """
        Locators to try, in order. Alternates only apply on iOS; an iOS
        accessibility id without explicit alternates gets derived ones.
        """
        chain = list(locator.chain())
        if not self.context.is_ios:
            return chain[:1]
        if not locator.alternates:
            chain.extend(locator.derived_ios_alternates())
        return chain

    def _find_displayed(self, candidate: Locator) -> Optional[WebElement]:
        element = self.driver.find_element(*candidate.as_tuple())
        return element if element.is_displayed() else None

    def _wait_for(self, candidate: Locator, timeout: float) -> WebElement:
        element = poll_until(
            partial(self._find_displayed, candidate),
            timeout,
            interval=self.poll_interval,
            clock=self.context.clock,
            description=candidate.describe()
        )
        if element is None:
            raise NoSuchElementException(f'{candidate} not displayed within {timeout}s')
        return element

    def resolve(
        self,
        locator: Locator,
        timeout: float = ELEMENT_TIMEOUT_DEFAULT,
        alternate_timeout: Optional[float] = None
    ) -> WebElement:
        """
        Resolve a locator to a displayed element.

        Args:
            locator: Primary locator with optional alternates
            timeout: Polling budget for the primary locator
            alternate_timeout: Fresh budget for each alternate (defaults to timeout)

        Returns:
            The first displayed element found

        Raises:
            ElementNotFoundError: After every strategy was tried once
        """
        alternate_timeout = timeout if alternate_timeout is None else alternate_timeout
        strategies = [
            Strategy(candidate.describe(), partial(self._wait_for, candidate, timeout if index == 0 else alternate_timeout))
            for index, candidate in enumerate(self.candidates(locator))
        ]

        try:
            result = first_success(strategies, context=f'resolve {locator}')
        except StrategiesExhaustedError as exhausted:
            attempts = [name for name, _ in exhausted.failures]
            logger.warning(f'Element not found: {locator} (tried {len(attempts)} strategies)')
            raise ElementNotFoundError(
                f'{locator} not found after trying {len(attempts)} strategies',
                attempts=attempts
            ) from exhausted.last_error

        if result.failures:
            logger.info(f'Resolved {locator} with alternate {result.name}')
        return result.value

    def resolve_all(self, locator: Locator, timeout: float = FIND_ELEMENTS_TIMEOUT_DEFAULT) -> List[WebElement]:
        """All elements matching the first strategy that matches anything; [] otherwise."""
        def _find_all(candidate: Locator) -> List[WebElement]:
            elements = poll_until(
                lambda: self.driver.find_elements(*candidate.as_tuple()),
                timeout,
                interval=self.poll_interval,
                clock=self.context.clock,
                description=f'all {candidate.describe()}'
            )
            return list(elements or [])

        strategies = [
            Strategy(candidate.describe(), partial(_find_all, candidate))
            for candidate in self.candidates(locator)
        ]
        try:
            return first_success(strategies, accept=bool, context=f'resolve all {locator}').value
        except StrategiesExhaustedError:
            logger.debug(f'No elements matched {locator}')
            return []

    def is_present(self, locator: Locator, timeout: float = ELEMENT_TIMEOUT_DEFAULT) -> bool:
        try:
            self.resolve(locator, timeout)
            return True
        except ElementNotFoundError:
            return False

    def scan_for_text(self, xpath_selector: str, needle: str) -> Optional[str]:
        """
        Raw XPath scan: return the first text containing needle among all
        elements matching xpath_selector.
        """
        try:
            elements = self.driver.find_elements(AppiumBy.XPATH, xpath_selector)
        except WebDriverException as error:
            logger.debug(f'XPath scan {xpath_selector} failed: {error}')
            return None

        for element in elements:
            try:
                text = element.text
            except WebDriverException:
                continue
            if text and needle in text:
                logger.info(f'Found text by XPath scan: {text}')
                return text
        return None
