"""
Appium driver creation for the Android and iOS builds of the app under test.

Wraps Appium-Python-Client session creation with a server pre-check, platform
options, implicit wait setup and a lightweight liveness probe.
"""

import logging
import time
from typing import Any, Optional

import requests
from appium import webdriver
from appium.options.android import UiAutomator2Options
from appium.options.ios import XCUITestOptions

from mobile_e2e.config.config import Config, Platform, normalize_platform
from mobile_e2e.config.numeric_constants import APPIUM_STATUS_TIMEOUT, IMPLICIT_WAIT_DEFAULT
from mobile_e2e.infrastructure.appium_error_handler import SessionUnavailableError
from mobile_e2e.infrastructure.capability_builder import (
    AppiumCapabilities,
    build_capabilities,
    log_capabilities,
)

logger = logging.getLogger(__name__)

APPIUM_STATUS_PATH = '/status'


def check_appium_server(appium_url: str, timeout: float = APPIUM_STATUS_TIMEOUT) -> bool:
    """
    Check that the Appium server answers /status and reports ready.

    Args:
        appium_url: Appium server base URL
        timeout: HTTP timeout in seconds

    Returns:
        True if the server is reachable and ready
    """
    url = appium_url.rstrip('/')
    try:
        response = requests.get(f"{url}{APPIUM_STATUS_PATH}", timeout=timeout)
    except requests.RequestException as e:
        logger.error(f"Appium server not reachable at {url}: {e}")
        return False

    if response.status_code != 200:
        logger.error(f"Appium server at {url} returned HTTP {response.status_code}")
        return False

    try:
        status_data = response.json()
    except ValueError:
        logger.warning(f"Appium server at {url} returned a non-JSON status body")
        return False

    ready = (
        status_data.get('ready', False) or
        (status_data.get('value') or {}).get('ready', False)
    )
    if not ready:
        logger.warning(f"Appium server at {url} is reachable but not ready")
    return bool(ready)


class DriverFactory:
    """Creates, probes and quits Appium driver sessions."""

    def __init__(self, config: Config):
        self.config = config

    def options_for(self, platform: Platform, capabilities: AppiumCapabilities):
        if platform == 'android':
            return UiAutomator2Options().load_capabilities(capabilities)
        return XCUITestOptions().load_capabilities(capabilities)

    def create_driver(self, platform: str) -> webdriver.Remote:
        """
        Create a driver session for a platform.

        Args:
            platform: 'android' or 'ios'

        Returns:
            Live Appium driver

        Raises:
            ValueError: If the platform is not supported
            SessionUnavailableError: If the server is down or session creation fails
        """
        normalized = normalize_platform(platform)
        capabilities = build_capabilities(normalized, self.config)
        log_capabilities(capabilities, f'{normalized} capabilities')

        server_url = self.config.server_url(normalized)
        if self.config.get_bool('APPIUM_SERVER_CHECK', True) and not check_appium_server(server_url):
            raise SessionUnavailableError(f'Appium server is not ready at {server_url}')

        start_time = time.time()
        try:
            driver = webdriver.Remote(
                command_executor=server_url,
                options=self.options_for(normalized, capabilities)
            )
        except Exception as error:
            duration = (time.time() - start_time) * 1000
            logger.error(f'Failed to create Appium session: {error}, duration={duration:.0f}ms')
            raise SessionUnavailableError(f'Failed to create Appium session: {error}') from error

        implicit_wait = self.config.get_float('IMPLICIT_WAIT_SECONDS', IMPLICIT_WAIT_DEFAULT)
        driver.implicitly_wait(implicit_wait)

        duration = (time.time() - start_time) * 1000
        logger.info(
            f'Appium session created: sessionId={driver.session_id}, '
            f'platform={normalized}, duration={duration:.0f}ms'
        )
        return driver

    @staticmethod
    def device_ready(driver: Any) -> bool:
        """Liveness probe: the session can serve a page source."""
        try:
            driver.page_source
            return True
        except Exception as error:
            logger.error(f'Device connection check failed: {error}')
            return False

    @staticmethod
    def quit_driver(driver: Optional[Any]) -> bool:
        """Quit a driver session, logging instead of raising."""
        if driver is None:
            return True
        try:
            session_id = getattr(driver, 'session_id', None)
            driver.quit()
            logger.info(f'Session closed: {session_id}')
            return True
        except Exception as error:
            logger.error(f'Error quitting driver: {error}')
            return False
