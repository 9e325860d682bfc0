"""
Error handling utilities for Appium operations.

Provides the suite's exception taxonomy and helpers that classify WebDriver
errors for the retry and recovery layers.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class AppiumError(Exception):
    """Base exception for Appium-related errors."""

    def __init__(self, message: str, code: str = 'APPIUM_ERROR', details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.name = self.__class__.__name__


class ElementNotFoundError(AppiumError):
    """Raised when a locator and all of its alternates are exhausted."""

    def __init__(self, message: str = 'Element not found', attempts: Optional[List[str]] = None):
        super().__init__(message, 'ELEMENT_NOT_FOUND', {'attempts': list(attempts or [])})
        self.attempts = list(attempts or [])


class ActionFailedError(AppiumError):
    """Raised when a tap or text entry still fails after retries."""

    def __init__(self, action: str, target: str, cause: Optional[BaseException] = None):
        message = f'{action} failed on {target}'
        if cause is not None:
            message = f'{message}: {cause}'
        super().__init__(message, 'ACTION_FAILED', {'action': action, 'target': target})
        self.action = action
        self.target = target
        self.cause = cause


class AppLifecycleFailedError(AppiumError):
    """Raised when terminate/activate/restart did not converge for any candidate."""

    def __init__(self, message: str = 'App lifecycle action failed', app_ids: Optional[List[str]] = None):
        super().__init__(message, 'APP_LIFECYCLE_FAILED', {'app_ids': list(app_ids or [])})


class SessionUnavailableError(AppiumError):
    """Raised when the driver session cannot be created, probed or recovered."""

    def __init__(self, message: str = 'No usable Appium session'):
        super().__init__(message, 'SESSION_UNAVAILABLE')


class StrategiesExhaustedError(AppiumError):
    """Raised by first_success when no strategy produced an acceptable result."""

    def __init__(self, failures: List[Tuple[str, Optional[BaseException]]]):
        names = ', '.join(name for name, _ in failures) or 'none'
        super().__init__(f'All strategies failed: {names}', 'STRATEGIES_EXHAUSTED')
        self.failures = list(failures)

    @property
    def last_error(self) -> Optional[BaseException]:
        for _, error in reversed(self.failures):
            if error is not None:
                return error
        return None


# Errors a retry can never fix
NON_RETRYABLE_WEBDRIVER_ERRORS = frozenset({
    'InvalidSelectorException',
    'InvalidSessionIdException',
})


def is_webdriver_error(error: BaseException) -> bool:
    """Check if error is a WebDriver/Selenium error."""
    error_name = error.__class__.__name__
    webdriver_errors = {
        'TimeoutException',
        'NoSuchElementException',
        'StaleElementReferenceException',
        'ElementNotInteractableException',
        'ElementClickInterceptedException',
        'InvalidSelectorException',
        'JavascriptException',
        'MoveTargetOutOfBoundsException',
        'InvalidSessionIdException',
        'SessionNotCreatedException',
        'UnknownCommandException',
        'UnknownMethodException',
        'WebDriverException',
    }
    return error_name in webdriver_errors


def is_retryable(error: BaseException) -> bool:
    """Whether a retry loop may try again after this error."""
    if isinstance(error, SessionUnavailableError):
        return False
    if is_webdriver_error(error) and error.__class__.__name__ in NON_RETRYABLE_WEBDRIVER_ERRORS:
        return False
    return True


def is_session_terminated(error: BaseException) -> bool:
    """Check if an error indicates a session termination."""
    error_name = error.__class__.__name__
    error_message = str(error).lower()

    return (
        error_name in ('InvalidSessionIdException', 'SessionNotCreatedException') or
        'session is either terminated' in error_message or
        'disconnected' in error_message
    )


def format_error_message(error: BaseException) -> str:
    """
    Format error messages for log lines and assertion output.

    Args:
        error: Exception to format

    Returns:
        Formatted error message
    """
    if isinstance(error, ElementNotFoundError):
        return f"Element not found: {error.message}"

    if isinstance(error, SessionUnavailableError):
        return f"Session error: {error.message}. Check the Appium server and device."

    if isinstance(error, AppLifecycleFailedError):
        return f"App lifecycle error: {error.message}"

    if isinstance(error, AppiumError):
        return error.message

    return f"Error: {error.__class__.__name__}: {error}"
