"""
Session orchestration for a group of test cases.

One driver session per group. Before each case the app is brought back to the
login screen, escalating from a UI path (log out through the menu) to an app
restart and finally to one session recreation. After each case the app is
terminated through increasingly blunt fallbacks.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from mobile_e2e.config.config import Config, Platform
from mobile_e2e.config.numeric_constants import (
    ACTIVATE_WAIT,
    LOGOUT_SETTLE_DELAY,
    MAX_SESSION_RECREATIONS,
    PREPARE_AFTER_RESTART_TIMEOUT,
    PREPARE_LOGIN_POLL_TIMEOUT,
    PREPARE_PRODUCTS_PROBE_TIMEOUT,
    RESTART_MAX_ATTEMPTS,
    RESTART_RETRY_DELAY,
)
from mobile_e2e.core.app_lifecycle import AppIdentity, AppLifecycleManager
from mobile_e2e.core.context import RunContext
from mobile_e2e.core.polling import Clock
from mobile_e2e.core.retry import RetryPolicy
from mobile_e2e.infrastructure.appium_error_handler import (
    AppiumError,
    AppLifecycleFailedError,
    SessionUnavailableError,
    format_error_message,
    is_session_terminated,
)
from mobile_e2e.infrastructure.driver_factory import DriverFactory
from mobile_e2e.pages.login_page import LoginPage
from mobile_e2e.pages.products_page import ProductsPage

logger = logging.getLogger(__name__)

LOGIN_PAGE = 'login'
PRODUCTS_PAGE = 'products'


@dataclass
class SessionState:
    """Driver session and page objects for one test group."""
    platform: Platform
    context: RunContext
    identity: AppIdentity
    driver: Optional[Any] = None
    lifecycle: Optional[AppLifecycleManager] = None
    login_page: Optional[LoginPage] = None
    products_page: Optional[ProductsPage] = None
    # Last screen the orchestrator saw: LOGIN_PAGE, PRODUCTS_PAGE or None when unknown
    current_page: Optional[str] = None
    recreations: int = 0
    fatal: bool = False
    closed: bool = False


class SessionOrchestrator:
    """Owns the driver session lifecycle around a group of test cases."""

    def __init__(
        self,
        config: Config,
        driver_factory: Optional[Callable[[str], Any]] = None,
        device_ready: Optional[Callable[[Any], bool]] = None,
        clock: Optional[Clock] = None
    ):
        self.config = config
        self.clock = clock
        self._create_driver = driver_factory or DriverFactory(config).create_driver
        self._device_ready = device_ready or DriverFactory.device_ready

    # --- session ---

    def begin(self, platform: Optional[str] = None) -> SessionState:
        """
        Create the session for a test group.

        Raises:
            ValueError: If the platform or app identifier is misconfigured
            SessionUnavailableError: If the driver cannot be created or probed
        """
        context = RunContext.from_config(self.config, platform, self.clock)
        logger.info(f"Starting tests on platform: {context.platform}")

        identity = AppIdentity.from_config(context.platform, self.config)
        state = SessionState(platform=context.platform, context=context, identity=identity)
        self._attach_driver(state, self._start_driver(context))
        logger.info("Driver created successfully")
        return state

    def _start_driver(self, context: RunContext) -> Any:
        try:
            driver = self._create_driver(context.platform)
        except SessionUnavailableError:
            raise
        except Exception as error:
            logger.error(f"Failed to set up driver: {error}")
            raise SessionUnavailableError(f"Failed to set up driver: {error}") from error

        if not self._device_ready(driver):
            logger.error("Device is not ready!")
            if context.artifacts is not None:
                context.artifacts.capture_failure(driver, 'session_unavailable')
            DriverFactory.quit_driver(driver)
            raise SessionUnavailableError("Device is not ready")

        logger.info("Device is ready")
        return driver

    def _attach_driver(self, state: SessionState, driver: Any) -> None:
        state.driver = driver
        state.lifecycle = AppLifecycleManager(driver, state.context)
        state.login_page = LoginPage(driver, state.context)
        state.products_page = ProductsPage(driver, state.context)
        state.current_page = None

    def replace_driver(self, state: SessionState) -> None:
        """Quit the current driver, then attach a freshly created one."""
        DriverFactory.quit_driver(state.driver)
        state.driver = None
        self._attach_driver(state, self._start_driver(state.context))
        state.recreations += 1

    def end(self, state: SessionState) -> None:
        """Close apps and quit the driver once. Never raises."""
        if state.closed:
            return
        state.closed = True

        if state.driver is None:
            return

        logger.info("Quitting driver after test context")
        try:
            state.lifecycle.close_all(state.identity)
        except Exception as error:
            logger.error(f"Error closing all apps: {error}")

        DriverFactory.quit_driver(state.driver)
        state.driver = None
        state.current_page = None

    # --- per case ---

    def prepare_for_case(self, state: SessionState) -> None:
        """
        Bring the app to the login screen.

        Raises:
            SessionUnavailableError: If the login screen cannot be reached even
                after recreating the session; the group is aborted from then on
        """
        if state.closed:
            raise SessionUnavailableError("Session already ended")
        if state.fatal:
            raise SessionUnavailableError("Session failed earlier in this test group")

        logger.info(f"Preparing app for test: {state.identity}")

        if self._session_terminated(state):
            logger.warning("Driver session is gone, skipping straight to recreation")
        elif self._return_to_login(state):
            return
        else:
            try:
                self.restart_app(state)
                if self._await_login(state, PREPARE_AFTER_RESTART_TIMEOUT):
                    return
                logger.warning("Login page not visible after app restart")
            except AppLifecycleFailedError as error:
                logger.warning(format_error_message(error))

        if state.recreations >= MAX_SESSION_RECREATIONS:
            self._fail(state, "Login page unreachable and session recreation budget is spent")

        logger.warning("App restart did not reach the login page, recreating driver")
        try:
            self.replace_driver(state)
        except SessionUnavailableError as error:
            self._fail(state, f"Driver recreation failed: {error.message}", error)

        if self._await_login(state, PREPARE_AFTER_RESTART_TIMEOUT):
            return
        try:
            self.restart_app(state)
        except AppLifecycleFailedError as error:
            self._fail(state, "App restart failed on the recreated session", error)
        if not self._await_login(state, PREPARE_AFTER_RESTART_TIMEOUT):
            self._fail(state, "Login page unreachable after session recreation")

    def restart_app(self, state: SessionState) -> None:
        """
        Restart the app with a bounded number of attempts.

        Raises:
            AppLifecycleFailedError: If no attempt brought the app back
        """
        policy = RetryPolicy(RESTART_MAX_ATTEMPTS, RESTART_RETRY_DELAY, state.context.clock)
        restarted = policy.execute_until_true(
            lambda: state.lifecycle.restart(state.identity),
            f'Restart {state.identity}'
        )
        if not restarted:
            raise AppLifecycleFailedError(
                f'App restart did not converge after {RESTART_MAX_ATTEMPTS} attempts: {state.identity}',
                app_ids=state.identity.candidates()
            )

    def _return_to_login(self, state: SessionState) -> bool:
        """Non-destructive path: foreground the app and log out if needed."""
        clock = state.context.clock
        try:
            if not state.lifecycle.is_foreground(state.identity):
                logger.info("App not in foreground, activating it")
                state.lifecycle.activate(state.identity)
                clock.sleep(ACTIVATE_WAIT)

            if state.products_page.is_products_page_displayed(PREPARE_PRODUCTS_PROBE_TIMEOUT):
                logger.info("Found products page, attempting to log out")
                state.current_page = PRODUCTS_PAGE
                state.products_page.logout()
                state.current_page = None
                clock.sleep(LOGOUT_SETTLE_DELAY)
        except AppiumError as ui_error:
            logger.warning(f"UI interaction error: {ui_error}")

        if self._await_login(state, PREPARE_LOGIN_POLL_TIMEOUT):
            logger.info("App is on login page, no restart needed")
            return True
        logger.info("Login page not visible, performing app restart")
        return False

    def _session_terminated(self, state: SessionState) -> bool:
        try:
            state.driver.page_source
        except Exception as error:
            if is_session_terminated(error):
                return True
            logger.debug(f"Session check raised a non-fatal error: {error}")
        return False

    def _await_login(self, state: SessionState, timeout: float) -> bool:
        if state.login_page.is_login_page_displayed(timeout):
            state.current_page = LOGIN_PAGE
            return True
        return False

    def _fail(self, state: SessionState, message: str, cause: Optional[BaseException] = None) -> None:
        state.fatal = True
        logger.error(f"Session unusable: {message}")
        self.capture_artifacts(state, 'session_failure')
        raise SessionUnavailableError(message) from cause

    def teardown_case(self, state: SessionState) -> bool:
        """
        Terminate the app after a case: direct terminate, then the scripted
        terminate command, then a sweep over every candidate ID. Never raises.

        Returns:
            True if the app ended up closed
        """
        state.current_page = None
        if state.driver is None or state.closed:
            return False

        lifecycle = state.lifecycle
        identity = state.identity
        logger.info(f"Closing app after test: {identity}")

        fallbacks = (
            ('direct terminate', lambda: lifecycle.terminate(identity)),
            ('scripted terminate', lambda: lifecycle.scripted_terminate(identity)),
            ('closure sweep', lambda: lifecycle.close_all(identity)),
        )
        for name, step in fallbacks:
            try:
                if step() and not lifecycle.is_running(identity):
                    logger.info(f"App closed by {name}")
                    return True
            except Exception as error:
                logger.warning(f"{name} failed: {error}")
            logger.warning(f"App still running after {name}")

        logger.error("All app termination methods failed")
        return False

    # --- diagnostics ---

    def capture_artifacts(self, state: SessionState, kind: str = 'failure') -> Dict[str, Optional[str]]:
        """Screenshot and page source of the current session, best effort."""
        artifacts = state.context.artifacts
        if artifacts is None or state.driver is None:
            return {'screenshot': None, 'page_source': None}
        return artifacts.capture_failure(state.driver, kind)
