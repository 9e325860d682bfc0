"""
Shared pytest fixtures for the test suite. It includes:
- A fake Appium driver with scriptable elements and app states.
- A fake clock so waits and retries run without sleeping.
- Config and run context fixtures isolated to a temporary reports directory.
- Default HTML report location for pytest-html.
"""

import os
from typing import Any, Dict, List, Optional, Tuple

import pytest
from selenium.common.exceptions import NoSuchElementException

from mobile_e2e.config.config import Config
from mobile_e2e.config.path_constants import PathConstants
from mobile_e2e.core.context import RunContext
from mobile_e2e.core.polling import Clock

NOT_INSTALLED = 0
NOT_RUNNING = 1
BACKGROUND = 3
FOREGROUND = 4


@pytest.hookimpl(tryfirst=True)
def pytest_configure(config):
    config.addinivalue_line("markers", "e2e: end-to-end test against a live Appium server")
    if config.pluginmanager.hasplugin("html") and not getattr(config.option, "htmlpath", None):
        suite_config = Config()
        config.option.htmlpath = PathConstants.html_report_path(suite_config.reports_dir)


class FakeClock(Clock):
    """Clock whose sleep advances time instantly."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: List[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += max(seconds, 0)


class FakeElement:
    def __init__(self, text: str = "", displayed: bool = True, click_error: Optional[Exception] = None):
        self.text = text
        self.displayed = displayed
        self.click_error = click_error
        self.location = {'x': 10, 'y': 20}
        self.size = {'width': 100, 'height': 40}
        self.clicks = 0
        self.cleared = 0
        self.keys: List[str] = []

    def is_displayed(self) -> bool:
        return self.displayed

    def click(self) -> None:
        self.clicks += 1
        if self.click_error is not None:
            raise self.click_error

    def clear(self) -> None:
        self.cleared += 1

    def send_keys(self, text: str) -> None:
        self.keys.append(text)


class FakeDriver:
    """
    In-memory stand-in for an Appium driver session.

    Elements are keyed by (by, value). App states use the Appium numeric
    states; terminate/activate update them unless told to be ineffective.
    """

    def __init__(self, session_id: str = "session-1"):
        self.session_id = session_id
        self.elements: Dict[Tuple[str, str], List[FakeElement]] = {}
        self.find_calls: List[Tuple[str, str]] = []
        self.installed: set = set()
        self.states: Dict[str, int] = {}
        self.terminated: List[str] = []
        self.activated: List[str] = []
        self.scripts: List[Tuple[str, Dict[str, Any]]] = []
        self.screenshots: List[str] = []
        self.terminate_effective = True
        self.script_effective = True
        self.terminate_error: Optional[Exception] = None
        self.activate_state = FOREGROUND
        self.page_source_error: Optional[Exception] = None
        self.source = "<hierarchy/>"
        self.quit_count = 0
        self.implicit_wait: Optional[float] = None

    # --- setup helpers ---

    def add_element(self, by: str, value: str, text: str = "", displayed: bool = True,
                    click_error: Optional[Exception] = None) -> FakeElement:
        element = FakeElement(text, displayed, click_error)
        self.elements.setdefault((by, value), []).append(element)
        return element

    def install(self, app_id: str, state: int = NOT_RUNNING) -> None:
        self.installed.add(app_id)
        self.states[app_id] = state

    # --- element lookup ---

    def find_element(self, by: str, value: str) -> FakeElement:
        self.find_calls.append((by, value))
        matches = self.elements.get((by, value))
        if not matches:
            raise NoSuchElementException(f"{by}={value}")
        return matches[0]

    def find_elements(self, by: str, value: str) -> List[FakeElement]:
        self.find_calls.append((by, value))
        return list(self.elements.get((by, value), []))

    # --- app management ---

    def is_app_installed(self, app_id: str) -> bool:
        return app_id in self.installed

    def query_app_state(self, app_id: str) -> int:
        if app_id not in self.installed:
            return NOT_INSTALLED
        return self.states.get(app_id, NOT_RUNNING)

    def terminate_app(self, app_id: str) -> bool:
        self.terminated.append(app_id)
        if self.terminate_error is not None:
            raise self.terminate_error
        if self.terminate_effective:
            self.states[app_id] = NOT_RUNNING
        return True

    def activate_app(self, app_id: str) -> None:
        self.activated.append(app_id)
        self.states[app_id] = self.activate_state

    def execute_script(self, script: str, args: Optional[Dict[str, Any]] = None) -> Any:
        args = args or {}
        self.scripts.append((script, args))
        if script == 'mobile: terminateApp' and self.script_effective:
            app_id = args.get('bundleId') or args.get('appId')
            self.states[app_id] = NOT_RUNNING
        return True

    # --- session ---

    @property
    def page_source(self) -> str:
        if self.page_source_error is not None:
            raise self.page_source_error
        return self.source

    def save_screenshot(self, path: str) -> bool:
        with open(path, 'wb') as handle:
            handle.write(b'png')
        self.screenshots.append(os.path.basename(path))
        return True

    def implicitly_wait(self, seconds: float) -> None:
        self.implicit_wait = seconds

    def quit(self) -> None:
        self.quit_count += 1


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def base_env(tmp_path) -> Dict[str, str]:
    return {
        'PLATFORM': 'android',
        'ANDROID_PLATFORM_VERSION': '13',
        'ANDROID_DEVICE_NAME': 'emulator-5554',
        'ANDROID_APP_PACKAGE': 'com.swaglabsmobileapp',
        'ANDROID_APP_ACTIVITY': 'com.swaglabsmobileapp.MainActivity',
        'IOS_PLATFORM_VERSION': '17.0',
        'IOS_DEVICE_NAME': 'iPhone 15',
        'IOS_APP_PATH': '/apps/SwagLabsMobileApp.app',
        'REPORTS_DIR': str(tmp_path / 'reports'),
        'LOG_DIR': str(tmp_path / 'logs'),
        'APPIUM_SERVER_CHECK': 'false',
    }


@pytest.fixture
def make_config(base_env):
    """Factory for an isolated Config; keyword overrides replace env values."""
    def _make(**overrides) -> Config:
        env = dict(base_env)
        env.update({key: value for key, value in overrides.items() if value is not None})
        for key in [key for key, value in overrides.items() if value is None]:
            env.pop(key, None)
        return Config(env=env)
    return _make


@pytest.fixture
def config(make_config) -> Config:
    return make_config()


@pytest.fixture
def android_context(config, fake_clock) -> RunContext:
    return RunContext.from_config(config, 'android', fake_clock)


@pytest.fixture
def ios_context(config, fake_clock) -> RunContext:
    return RunContext.from_config(config, 'ios', fake_clock)


@pytest.fixture
def driver_pool():
    """Hands out fresh FakeDrivers, one per session created."""
    created: List[FakeDriver] = []

    def _new(platform: str = 'android') -> FakeDriver:
        driver = FakeDriver(session_id=f"session-{len(created) + 1}")
        created.append(driver)
        return driver

    _new.created = created
    return _new
