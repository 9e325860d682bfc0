import logging
import os
import sys
import time
from typing import List, Optional

from mobile_e2e.config.config import Config
from mobile_e2e.config.path_constants import PathConstants

# --- Run start time (for ElapsedTimeFormatter) ---
RUN_START_TIME = time.time()

LOG_FORMAT = "[%(levelname)s] (%(asctime)s) %(filename)s:%(lineno)d - %(message)s"

NOISY_LIBRARY_LOGGERS = (
    "appium.webdriver.webdriver",
    "urllib3.connectionpool",
    "selenium.webdriver.remote.remote_connection",
)


class ElapsedTimeFormatter(logging.Formatter):
    """Formats record time as elapsed time since the run started."""

    def __init__(self, fmt: Optional[str] = None, start_time: Optional[float] = None):
        super().__init__(fmt)
        self.start_time = RUN_START_TIME if start_time is None else start_time

    def formatTime(self, record, datefmt=None):
        elapsed_seconds = max(record.created - self.start_time, 0)
        h = int(elapsed_seconds // 3600)
        m = int((elapsed_seconds % 3600) // 60)
        s = int(elapsed_seconds % 60)
        ms = int((elapsed_seconds - (h * 3600 + m * 60 + s)) * 1000)
        return f"{h:02d}:{m:02d}:{s:02d}.{ms:03d}"


class LoggerManager:
    def __init__(self):
        self.handlers: List[logging.Handler] = []

    def setup_logging(self, log_level_str: str, log_file: Optional[str] = None) -> logging.Logger:
        numeric_level = getattr(logging, log_level_str.upper(), None)
        if not isinstance(numeric_level, int):
            raise ValueError(f"Invalid log level string: {log_level_str}")

        logger = logging.getLogger()
        logger.setLevel(numeric_level)
        self.reset()

        log_formatter = ElapsedTimeFormatter(LOG_FORMAT)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(log_formatter)
        logger.addHandler(console_handler)
        self.handlers.append(console_handler)

        if log_file:
            try:
                log_file_dir = os.path.dirname(os.path.abspath(log_file))
                os.makedirs(log_file_dir, exist_ok=True)

                file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
                file_handler.setFormatter(log_formatter)
                logger.addHandler(file_handler)
                self.handlers.append(file_handler)
            except OSError as e:
                print(f"Error setting up file logger for {log_file}: {e}", file=sys.stderr)

        if numeric_level > logging.DEBUG:
            for lib_name in NOISY_LIBRARY_LOGGERS:
                logging.getLogger(lib_name).setLevel(logging.WARNING)

        return logger

    def reset(self) -> None:
        """Detach and close the handlers this manager installed."""
        logger = logging.getLogger()
        for handler in self.handlers:
            logger.removeHandler(handler)
            if isinstance(handler, logging.FileHandler):
                handler.close()
        self.handlers.clear()


_manager = LoggerManager()


def configure_logging(config: Config) -> logging.Logger:
    """Console plus <LOG_DIR>/test_execution.log, at LOG_LEVEL."""
    log_file = PathConstants.log_file_path(config.log_dir)
    return _manager.setup_logging(config.log_level, log_file)
