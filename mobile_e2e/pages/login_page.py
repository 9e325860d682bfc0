import logging

from mobile_e2e.config.numeric_constants import (
    ERROR_MESSAGE_MAX_ATTEMPTS,
    ERROR_MESSAGE_RETRY_DELAY,
    ERROR_MESSAGE_TIMEOUT_ANDROID,
    ERROR_MESSAGE_TIMEOUT_IOS,
    LOGIN_FIELD_PROBE_TIMEOUT,
    LOGIN_PAGE_TIMEOUT_DEFAULT,
    LOGIN_PAGE_WAIT_BEFORE_INPUT,
    PAGE_POLL_INTERVAL,
)
from mobile_e2e.core.polling import poll_until
from mobile_e2e.core.retry import RetryPolicy
from mobile_e2e.infrastructure.appium_error_handler import ElementNotFoundError
from mobile_e2e.pages.base_page import BasePage
from mobile_e2e.pages.locator_table import ERROR_MESSAGE_TEXT, STATIC_TEXT_XPATH

logger = logging.getLogger(__name__)


class LoginPage(BasePage):
    """Login screen, the canonical start screen of every test case."""

    def login(self, username: str, password: str) -> None:
        logger.info(f"Attempting login with username: {username}")

        if not self.wait_for_login_page(LOGIN_PAGE_WAIT_BEFORE_INPUT):
            logger.warning("Login page not confirmed, trying to fill the form anyway")

        self.input_text('username_field', username)
        self.input_text('password_field', password)

        self.take_screenshot("before_login_tap.png")

        self.tap('login_button')
        logger.info("Login button tapped")

    def get_error_message(self) -> str:
        """
        Text of the login error banner, or "" if it never shows up.

        The total budget is split across attempts. On iOS each failed attempt
        also scans every static text for the expected message.
        """
        total_timeout = ERROR_MESSAGE_TIMEOUT_IOS if self.is_ios else ERROR_MESSAGE_TIMEOUT_ANDROID
        per_attempt = total_timeout / ERROR_MESSAGE_MAX_ATTEMPTS
        attempt = 0

        def _read_error() -> str:
            nonlocal attempt
            attempt += 1
            self.take_screenshot(f"waiting_for_error_{attempt - 1}.png")
            try:
                text = self.wait_for_element('error_message', per_attempt).text
            except ElementNotFoundError as error:
                logger.warning(f"Attempt {attempt} failed to get error message: {error}")
                if self.is_ios:
                    scanned = self.resolver.scan_for_text(STATIC_TEXT_XPATH['ios'], ERROR_MESSAGE_TEXT)
                    if scanned:
                        logger.info(f"Found error message using text scan: {scanned}")
                        return scanned
                raise
            logger.info(f"Error message displayed: {text}")
            return text

        retry = RetryPolicy(ERROR_MESSAGE_MAX_ATTEMPTS, ERROR_MESSAGE_RETRY_DELAY, self.context.clock)
        try:
            return retry.execute(_read_error, 'Read login error message')
        except Exception as error:
            logger.error(f"Failed to get error message after {attempt} attempts: {error}")
            self.take_screenshot("error_message_final_failure.png")
            return ""

    def is_login_page_displayed(self, timeout: float = LOGIN_PAGE_TIMEOUT_DEFAULT) -> bool:
        return self.wait_for_login_page(timeout)

    def wait_for_login_page(self, timeout: float = LOGIN_PAGE_TIMEOUT_DEFAULT) -> bool:
        """Poll for the username field; False and a screenshot on timeout."""
        started = self.context.clock.monotonic()
        displayed = poll_until(
            lambda: self.is_element_displayed('username_field', LOGIN_FIELD_PROBE_TIMEOUT),
            timeout,
            interval=PAGE_POLL_INTERVAL,
            clock=self.context.clock,
            description='login page'
        )
        if displayed:
            return True

        elapsed = self.context.clock.monotonic() - started
        logger.warning(f"Timed out waiting for login page after {elapsed:.1f} seconds")
        self.take_screenshot("login_page_timeout.png")
        return False
