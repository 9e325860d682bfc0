import logging
import os

import pytest

from mobile_e2e.utils import logging_manager
from mobile_e2e.utils.logging_manager import (
    NOISY_LIBRARY_LOGGERS,
    ElapsedTimeFormatter,
    LoggerManager,
    configure_logging,
)


@pytest.fixture
def manager():
    manager = LoggerManager()
    yield manager
    manager.reset()


class TestElapsedTimeFormatter:

    def test_formats_elapsed_time(self):
        formatter = ElapsedTimeFormatter("%(asctime)s", start_time=100.0)
        record = logging.LogRecord('x', logging.INFO, __file__, 1, 'msg', None, None)
        record.created = 100.0 + 3723.25

        assert formatter.formatTime(record) == '01:02:03.250'


class TestLoggerManager:

    def test_invalid_level(self, manager):
        with pytest.raises(ValueError):
            manager.setup_logging('LOUD')

    def test_console_and_file_handlers(self, manager, tmp_path):
        log_file = tmp_path / 'logs' / 'test_execution.log'

        manager.setup_logging('INFO', str(log_file))
        logging.getLogger('mobile_e2e.test').info('hello from the suite')
        for handler in manager.handlers:
            handler.flush()

        assert len(manager.handlers) == 2
        assert 'hello from the suite' in log_file.read_text(encoding='utf-8')
        for name in NOISY_LIBRARY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_setup_replaces_previous_handlers(self, manager):
        manager.setup_logging('INFO')
        first = list(manager.handlers)

        manager.setup_logging('DEBUG')

        root = logging.getLogger()
        assert not any(handler in root.handlers for handler in first)
        assert len(manager.handlers) == 1

    def test_configure_logging_uses_config(self, make_config, tmp_path):
        config = make_config(LOG_LEVEL='warning')

        logger = configure_logging(config)

        assert logger.level == logging.WARNING
        assert os.path.isdir(tmp_path / 'logs')
        logging_manager._manager.reset()
