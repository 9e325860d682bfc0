"""
Fixtures for the end-to-end login suite.

One driver session per test module. Every test starts on the login screen and
the app is terminated afterwards. Failed tests leave a screenshot and a page
source dump under reports/screenshots.
"""

import logging

import pytest

from mobile_e2e.config import Config, TestData
from mobile_e2e.core.session_orchestrator import SessionOrchestrator
from mobile_e2e.utils.logging_manager import configure_logging

logger = logging.getLogger(__name__)

# Store the active session for failure diagnostics
_active_sessions: dict = {}


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Capture screenshot and page source on test failure."""
    outcome = yield
    report = outcome.get_result()
    if report.when == "call" and report.failed:
        active = _active_sessions.get(item.module.__name__)
        if active is None:
            return
        orchestrator, state = active
        paths = orchestrator.capture_artifacts(state, 'failure')
        logger.error(f"Test failed: {item.name}, artifacts: {paths}")


@pytest.fixture(scope="session")
def suite_config() -> Config:
    config = Config()
    configure_logging(config)
    return config


@pytest.fixture(scope="session")
def test_data(suite_config) -> TestData:
    return TestData(suite_config)


@pytest.fixture(scope="module")
def session(request, suite_config):
    """Driver session shared by the tests of one module."""
    orchestrator = SessionOrchestrator(suite_config)
    state = orchestrator.begin(suite_config.platform)
    _active_sessions[request.module.__name__] = (orchestrator, state)
    yield orchestrator, state
    _active_sessions.pop(request.module.__name__, None)
    orchestrator.end(state)


@pytest.fixture(autouse=True)
def app_on_login_screen(request, session):
    orchestrator, state = session
    logger.info(f"Starting test: {request.node.name}")
    orchestrator.prepare_for_case(state)
    yield state
    orchestrator.teardown_case(state)
    logger.info(f"Finished test: {request.node.name}")


@pytest.fixture
def login_page(app_on_login_screen):
    return app_on_login_screen.login_page


@pytest.fixture
def products_page(app_on_login_screen):
    return app_on_login_screen.products_page
