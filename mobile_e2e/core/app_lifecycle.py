"""
App lifecycle management: installed/running state queries and
terminate/activate/restart sequences over platform-specific candidate IDs.

On iOS the configured app may be a filesystem .app path, which cannot be used
with the app management commands. It is mapped to a list of bundle-ID
candidates that are tried in order.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum, IntEnum
from functools import partial
from typing import Any, Callable, List, Optional, Tuple

from appium.webdriver.applicationstate import ApplicationState

from mobile_e2e.config.config import Config, Platform, normalize_platform
from mobile_e2e.config.numeric_constants import APP_LAUNCH_WAIT, RESTART_SETTLE_DELAY
from mobile_e2e.core.context import RunContext
from mobile_e2e.core.strategies import Strategy, first_success
from mobile_e2e.infrastructure.appium_error_handler import StrategiesExhaustedError

logger = logging.getLogger(__name__)


class AppState(IntEnum):
    """Typed view of the app states returned by query_app_state."""
    NOT_INSTALLED = ApplicationState.NOT_INSTALLED
    NOT_RUNNING = ApplicationState.NOT_RUNNING
    RUNNING_IN_BACKGROUND_SUSPENDED = ApplicationState.RUNNING_IN_BACKGROUND_SUSPENDED
    RUNNING_IN_BACKGROUND = ApplicationState.RUNNING_IN_BACKGROUND
    RUNNING_IN_FOREGROUND = ApplicationState.RUNNING_IN_FOREGROUND


@dataclass(frozen=True)
class AppIdentity:
    """The app under test as the driver knows it on one platform."""
    platform: Platform
    app_id: str
    fallback_ids: Tuple[str, ...] = ()
    bundle_id_prefix: str = 'com.saucelabs'
    # Set when app_id came from IOS_APP_PATH rather than a bundle ID
    from_app_path: bool = False

    @property
    def is_app_path(self) -> bool:
        if self.platform != 'ios':
            return False
        return '/' in self.app_id or (self.from_app_path and self.app_id.endswith('.app'))

    @property
    def app_name(self) -> str:
        name = os.path.basename(self.app_id.rstrip('/'))
        return name[:-len('.app')] if name.endswith('.app') else name

    def candidates(self) -> List[str]:
        """Identifiers to try, in order, without duplicates."""
        if self.is_app_path:
            ordered = [f'{self.bundle_id_prefix}.{self.app_name.lower()}', *self.fallback_ids, self.app_name]
        else:
            ordered = [self.app_id, *self.fallback_ids]

        seen = set()
        result = []
        for app_id in ordered:
            if app_id and app_id not in seen:
                seen.add(app_id)
                result.append(app_id)
        return result

    def __str__(self) -> str:
        return self.app_id

    @classmethod
    def from_config(cls, platform: str, config: Config) -> 'AppIdentity':
        """
        Build the identity from configuration.

        Raises:
            ValueError: If no app identifier is configured for the platform
        """
        normalized = normalize_platform(platform)
        app_id = config.app_id(normalized)
        if not app_id:
            key = 'ANDROID_APP_PACKAGE' if normalized == 'android' else 'IOS_BUNDLE_ID or IOS_APP_PATH'
            raise ValueError(f'No app identifier configured for {normalized}: set {key}')

        fallbacks: List[str] = []
        if normalized == 'ios':
            bundle_id = config.get_str('IOS_BUNDLE_ID')
            if bundle_id and bundle_id != app_id:
                fallbacks.append(bundle_id)
            fallbacks.extend(config.get_list('IOS_BUNDLE_ID_FALLBACKS'))
        else:
            fallbacks.extend(config.get_list('ANDROID_APP_PACKAGE_FALLBACKS'))

        return cls(
            platform=normalized,
            app_id=app_id,
            fallback_ids=tuple(fallbacks),
            bundle_id_prefix=config.get_str('IOS_BUNDLE_ID_PREFIX', 'com.saucelabs'),
            from_app_path=normalized == 'ios' and not config.get_str('IOS_BUNDLE_ID'),
        )


class LifecyclePhase(Enum):
    NOT_RUNNING = 'not_running'
    ACTIVATING = 'activating'
    RUNNING = 'running'
    TERMINATING = 'terminating'
    FAILED = 'failed'


class AppLifecycleManager:
    """Drives app state through the Appium app management commands."""

    def __init__(
        self,
        driver: Any,
        context: RunContext,
        settle_delay: float = RESTART_SETTLE_DELAY,
        launch_wait: float = APP_LAUNCH_WAIT
    ):
        self.driver = driver
        self.context = context
        self.settle_delay = settle_delay
        self.launch_wait = launch_wait
        self.phase = LifecyclePhase.NOT_RUNNING

    def _transition(self, phase: LifecyclePhase) -> None:
        if phase is not self.phase:
            logger.debug(f'App lifecycle: {self.phase.value} -> {phase.value}')
        self.phase = phase

    # --- state queries ---

    def is_installed(self, app_id: str) -> bool:
        try:
            return bool(self.driver.is_app_installed(app_id))
        except Exception as error:
            logger.error(f'Error checking if app is installed ({app_id}): {error}')
            return False

    def query_state(self, app_id: str) -> Optional[AppState]:
        """App state, or None when the driver cannot tell."""
        try:
            return AppState(self.driver.query_app_state(app_id))
        except Exception as error:
            logger.error(f'Error getting app state ({app_id}): {error}')
            return None

    def state(self, app_id: str) -> AppState:
        """App state, assuming not installed when the driver cannot tell."""
        state = self.query_state(app_id)
        return AppState.NOT_INSTALLED if state is None else state

    def is_foreground(self, identity: AppIdentity) -> bool:
        return any(
            self.query_state(app_id) == AppState.RUNNING_IN_FOREGROUND
            for app_id in identity.candidates()
        )

    def is_running(self, identity: AppIdentity) -> bool:
        return any(
            self.state(app_id) > AppState.NOT_RUNNING
            for app_id in identity.candidates()
        )

    # --- per-candidate actions ---

    def _terminate_candidate(self, app_id: str) -> bool:
        if not self.is_installed(app_id):
            logger.warning(f'App is not installed: {app_id}')
            return False

        state = self.query_state(app_id)
        if state is not None and state <= AppState.NOT_RUNNING:
            logger.info(f'App is not running, no need to terminate: {app_id}')
            return True

        result = self.driver.terminate_app(app_id)
        logger.info(f'App terminated: {app_id}, result: {result}')
        return True

    def _activate_candidate(self, app_id: str) -> bool:
        if not self.is_installed(app_id):
            logger.error(f'Cannot activate app - not installed: {app_id}')
            return False

        self.driver.activate_app(app_id)
        logger.info(f'App activated: {app_id}')
        return True

    def _restart_candidate(self, app_id: str) -> bool:
        try:
            self._transition(LifecyclePhase.TERMINATING)
            if not self._terminate_candidate(app_id):
                return False
            self._transition(LifecyclePhase.NOT_RUNNING)
            self.context.clock.sleep(self.settle_delay)

            self._transition(LifecyclePhase.ACTIVATING)
            if not self._activate_candidate(app_id):
                return False
            self.context.clock.sleep(self.launch_wait)
        except Exception:
            self._transition(LifecyclePhase.FAILED)
            raise

        state = self.query_state(app_id)
        if state is not None and state != AppState.RUNNING_IN_FOREGROUND:
            logger.warning(f'App {app_id} not in foreground after restart (state: {state.name})')
            return False

        self._transition(LifecyclePhase.RUNNING)
        return True

    def _first_candidate(self, identity: AppIdentity, action: str, fn: Callable[[str], bool]) -> Optional[str]:
        """Run fn per candidate until one succeeds; returns the successful ID."""
        strategies = [Strategy(app_id, partial(fn, app_id)) for app_id in identity.candidates()]
        try:
            result = first_success(strategies, context=f'{action} {identity}')
        except StrategiesExhaustedError as exhausted:
            for app_id, error in exhausted.failures:
                if error is not None:
                    logger.warning(f'Failed to {action} app with ID {app_id}: {error}')
            logger.warning(f'Could not {action} app with any known IDs: {identity.candidates()}')
            return None
        return result.name

    # --- public operations ---

    def terminate(self, identity: AppIdentity) -> bool:
        self._transition(LifecyclePhase.TERMINATING)
        app_id = self._first_candidate(identity, 'terminate', self._terminate_candidate)
        self._transition(LifecyclePhase.NOT_RUNNING if app_id else LifecyclePhase.FAILED)
        return app_id is not None

    def activate(self, identity: AppIdentity) -> bool:
        self._transition(LifecyclePhase.ACTIVATING)
        app_id = self._first_candidate(identity, 'activate', self._activate_candidate)
        self._transition(LifecyclePhase.RUNNING if app_id else LifecyclePhase.FAILED)
        return app_id is not None

    def restart(self, identity: AppIdentity) -> bool:
        """
        Terminate, settle, activate and check the app reached the foreground.

        Returns:
            True once a candidate ID completed the sequence
        """
        app_id = self._first_candidate(identity, 'restart', self._restart_candidate)
        if app_id is None:
            self._transition(LifecyclePhase.FAILED)
            logger.error(f'Failed to restart app: {identity}')
            return False
        logger.info(f'Successfully restarted app with ID: {app_id}')
        return True

    def scripted_terminate(self, identity: AppIdentity) -> bool:
        """Terminate through the mobile: terminateApp script command."""
        key = 'bundleId' if identity.platform == 'ios' else 'appId'

        def _script(app_id: str) -> bool:
            self.driver.execute_script('mobile: terminateApp', {key: app_id})
            logger.info(f'Used executeScript to terminate app: {app_id}')
            return True

        return self._first_candidate(identity, 'script-terminate', _script) is not None

    def close_all(self, identity: AppIdentity) -> bool:
        """
        Sweep every candidate ID and terminate whatever is still running.

        Returns:
            True if no candidate is left running
        """
        clean = True
        for app_id in identity.candidates():
            if not self.is_installed(app_id):
                continue
            if self.state(app_id) <= AppState.NOT_RUNNING:
                continue
            try:
                self.driver.terminate_app(app_id)
                logger.info(f'Closed app during sweep: {app_id}')
            except Exception as error:
                logger.error(f'Error closing app {app_id}: {error}')
                clean = False
        if clean:
            self._transition(LifecyclePhase.NOT_RUNNING)
        return clean
