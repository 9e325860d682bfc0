"""
Path and directory structure constants.

All directory names can be overridden via environment variables with sensible
defaults. Relative values are resolved against the working directory.
"""

import os


class PathConstants:
    """Centralized path configuration with environment variable support."""

    # Directory names
    REPORTS_DIR = os.getenv("REPORTS_DIR", "reports")
    SCREENSHOTS_SUBDIR = "screenshots"
    HTML_SUBDIR = "html"
    LOG_DIR = os.getenv("LOG_DIR", "logs")

    # File names
    LOG_FILE_NAME = os.getenv("LOG_FILE_NAME", "test_execution.log")
    HTML_REPORT_NAME = "report.html"

    # Artifact naming: <kind>_<YYYYMMDD_HHMMSS>.<ext>
    ARTIFACT_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
    SCREENSHOT_EXTENSION = ".png"
    PAGE_SOURCE_EXTENSION = ".xml"

    @classmethod
    def screenshots_dir(cls, reports_dir: str) -> str:
        """Directory that holds screenshots and page-source dumps."""
        return os.path.join(reports_dir, cls.SCREENSHOTS_SUBDIR)

    @classmethod
    def html_report_path(cls, reports_dir: str) -> str:
        """Path of the HTML test report."""
        return os.path.join(reports_dir, cls.HTML_SUBDIR, cls.HTML_REPORT_NAME)

    @classmethod
    def log_file_path(cls, log_dir: str) -> str:
        """Path of the test execution log file."""
        return os.path.join(log_dir, cls.LOG_FILE_NAME)
