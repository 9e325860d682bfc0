"""
Base page object: element lookup, taps, text entry, waits and gestures on top
of the locator resolver and retry policy.
"""

import logging
from typing import Any, List, Optional, Tuple, Union

from selenium.common.exceptions import WebDriverException
from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.common.actions import interaction
from selenium.webdriver.common.actions.action_builder import ActionBuilder
from selenium.webdriver.common.actions.pointer_input import PointerInput
from selenium.webdriver.remote.webelement import WebElement

from mobile_e2e.config.numeric_constants import (
    ACTION_MAX_ATTEMPTS,
    ACTION_RETRY_DELAY,
    ALTERNATE_PROBE_TIMEOUT,
    DISPLAYED_CHECK_TIMEOUT_DEFAULT,
    ELEMENT_TIMEOUT_DEFAULT,
    FIND_ELEMENTS_TIMEOUT_DEFAULT,
    IOS_TIMEOUT_PADDING,
    WAIT_FOR_ELEMENT_TIMEOUT_DEFAULT,
)
from mobile_e2e.core.context import RunContext
from mobile_e2e.core.locator_resolver import LocatorResolver
from mobile_e2e.core.locators import Locator
from mobile_e2e.core.retry import RetryPolicy
from mobile_e2e.infrastructure.appium_error_handler import ActionFailedError, ElementNotFoundError
from mobile_e2e.pages.locator_table import locator_for

logger = logging.getLogger(__name__)

ElementRef = Union[str, Locator]


class BasePage:
    """Shared page behaviour. Elements are referenced by table name or Locator."""

    def __init__(self, driver: Any, context: RunContext):
        self.driver = driver
        self.context = context
        self.resolver = LocatorResolver(driver, context)
        self.action_retry = RetryPolicy(ACTION_MAX_ATTEMPTS, ACTION_RETRY_DELAY, context.clock)

    @property
    def is_android(self) -> bool:
        return self.context.is_android

    @property
    def is_ios(self) -> bool:
        return self.context.is_ios

    def locator(self, element: ElementRef) -> Locator:
        if isinstance(element, Locator):
            return element
        return locator_for(element, self.context.platform)

    # --- lookup ---

    def find_element(self, element: ElementRef, timeout: float = ELEMENT_TIMEOUT_DEFAULT) -> WebElement:
        return self.resolver.resolve(self.locator(element), timeout)

    def find_elements(self, element: ElementRef, timeout: float = FIND_ELEMENTS_TIMEOUT_DEFAULT) -> List[WebElement]:
        return self.resolver.resolve_all(self.locator(element), timeout)

    def get_text(self, element: ElementRef, timeout: float = ELEMENT_TIMEOUT_DEFAULT) -> str:
        return self.find_element(element, timeout).text

    def wait_for_element(self, element: ElementRef, timeout: float = WAIT_FOR_ELEMENT_TIMEOUT_DEFAULT) -> WebElement:
        """
        Wait for an element to be displayed. iOS gets a longer budget.

        Raises:
            ElementNotFoundError: After a wait_error screenshot
        """
        locator = self.locator(element)
        platform_timeout = timeout + IOS_TIMEOUT_PADDING if self.is_ios else timeout
        try:
            return self.resolver.resolve(locator, platform_timeout)
        except ElementNotFoundError as error:
            self.take_failure_screenshot('wait_error')
            raise ElementNotFoundError(
                f'Element not found after waiting {platform_timeout} seconds: {locator}',
                attempts=error.attempts
            ) from error

    def is_element_displayed(self, element: ElementRef, timeout: float = DISPLAYED_CHECK_TIMEOUT_DEFAULT) -> bool:
        locator = self.locator(element)
        try:
            self.resolver.resolve(locator, timeout, alternate_timeout=min(timeout, ALTERNATE_PROBE_TIMEOUT))
            return True
        except ElementNotFoundError:
            return False

    # --- actions ---

    def tap(self, element: ElementRef, timeout: float = ELEMENT_TIMEOUT_DEFAULT) -> None:
        """
        Tap an element: standard click, then a W3C touch tap at its center.

        Raises:
            ActionFailedError: When every attempt failed
        """
        locator = self.locator(element)

        def _tap():
            target = self.find_element(locator, timeout)
            try:
                target.click()
            except WebDriverException as click_error:
                logger.debug(f'Standard click failed ({click_error.__class__.__name__}), trying W3C tap')
                x, y = self._element_center(target)
                self.perform_w3c_tap(x, y)

        try:
            self.action_retry.execute(_tap, f'Tap {locator}')
        except Exception as error:
            logger.error(f'Error tapping element {locator}: {error}')
            self.take_failure_screenshot('tap_error')
            raise ActionFailedError('tap', str(locator), error) from error

    def input_text(self, element: ElementRef, text: str, timeout: float = ELEMENT_TIMEOUT_DEFAULT) -> None:
        """
        Replace an input's contents with text.

        Raises:
            ActionFailedError: When every attempt failed
        """
        locator = self.locator(element)

        def _input():
            target = self.find_element(locator, timeout)
            target.clear()
            target.send_keys(text)

        try:
            self.action_retry.execute(_input, f'Input into {locator}')
        except Exception as error:
            logger.error(f'Error inputting text into {locator}: {error}')
            self.take_failure_screenshot('input_error')
            raise ActionFailedError('input', str(locator), error) from error

    # --- gestures ---

    def perform_w3c_tap(self, x: float, y: float) -> None:
        """
        Perform W3C Actions API tap at coordinates.

        Args:
            x: X coordinate
            y: Y coordinate
        """
        actions = ActionChains(self.driver)
        actions.w3c_actions = ActionBuilder(self.driver, mouse=PointerInput(interaction.POINTER_TOUCH, "touch"))
        actions.w3c_actions.pointer_action.move_to_location(x, y)
        actions.w3c_actions.pointer_action.pointer_down()
        actions.w3c_actions.pointer_action.pause(0.1)
        actions.w3c_actions.pointer_action.pointer_up()
        actions.perform()

    def swipe(self, start_x: int, start_y: int, end_x: int, end_y: int, duration_ms: int = 500) -> None:
        """Swipe with W3C touch actions, falling back to the platform drag command."""
        try:
            actions = ActionChains(self.driver)
            actions.w3c_actions = ActionBuilder(self.driver, mouse=PointerInput(interaction.POINTER_TOUCH, "touch"))
            actions.w3c_actions.pointer_action.move_to_location(start_x, start_y)
            actions.w3c_actions.pointer_action.pointer_down()
            actions.w3c_actions.pointer_action.pause(duration_ms / 1000.0)
            actions.w3c_actions.pointer_action.move_to_location(end_x, end_y)
            actions.w3c_actions.pointer_action.release()
            actions.perform()
        except WebDriverException as error:
            logger.debug(f'W3C swipe failed ({error}), using mobile command')
            if self.is_ios:
                self.driver.execute_script('mobile: dragFromToForDuration', {
                    'fromX': start_x, 'fromY': start_y, 'toX': end_x, 'toY': end_y,
                    'duration': duration_ms / 1000.0,
                })
            else:
                self.driver.execute_script('mobile: dragGesture', {
                    'startX': start_x, 'startY': start_y, 'endX': end_x, 'endY': end_y,
                })

    @staticmethod
    def _element_center(element: WebElement) -> Tuple[float, float]:
        location = element.location
        size = element.size
        return (
            location['x'] + size['width'] / 2,
            location['y'] + size['height'] / 2
        )

    # --- artifacts ---

    def take_screenshot(self, filename: Optional[str] = None) -> Optional[str]:
        """Screenshot under reports/screenshots; timestamped name by default."""
        artifacts = self.context.artifacts
        if artifacts is None:
            logger.debug('No artifact writer configured, skipping screenshot')
            return None
        if filename is None:
            return artifacts.save_screenshot(self.driver, 'screenshot')
        return artifacts.save_named_screenshot(self.driver, filename)

    def take_failure_screenshot(self, kind: str) -> Optional[str]:
        artifacts = self.context.artifacts
        if artifacts is None:
            return None
        return artifacts.save_screenshot(self.driver, kind)
