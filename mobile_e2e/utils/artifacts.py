"""
Screenshot and page-source capture for post-mortem diagnosis.

Files are written under <reports_dir>/screenshots and named
<kind>_<YYYYMMDD_HHMMSS>.png or .xml.
"""

import logging
import os
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from mobile_e2e.config.path_constants import PathConstants

logger = logging.getLogger(__name__)


class ArtifactWriter:
    """Writes diagnostic files for one test run."""

    def __init__(self, reports_dir: str, now: Optional[Callable[[], datetime]] = None):
        self.reports_dir = reports_dir
        self.screenshots_dir = PathConstants.screenshots_dir(reports_dir)
        self._now = now or datetime.now

    def timestamp(self) -> str:
        return self._now().strftime(PathConstants.ARTIFACT_TIMESTAMP_FORMAT)

    def path_for(self, kind: str, extension: str) -> str:
        return os.path.join(self.screenshots_dir, f"{kind}_{self.timestamp()}{extension}")

    def _ensure_dir(self) -> None:
        os.makedirs(self.screenshots_dir, exist_ok=True)

    def save_screenshot(self, driver: Any, kind: str) -> Optional[str]:
        """Save a timestamped screenshot; returns the path or None on failure."""
        path = self.path_for(kind, PathConstants.SCREENSHOT_EXTENSION)
        return self.save_named_screenshot(driver, os.path.basename(path))

    def save_named_screenshot(self, driver: Any, filename: str) -> Optional[str]:
        """Save a screenshot under an explicit file name."""
        if driver is None:
            logger.warning(f"No driver, skipping screenshot {filename}")
            return None
        self._ensure_dir()
        path = os.path.join(self.screenshots_dir, filename)
        try:
            driver.save_screenshot(path)
        except Exception as e:
            logger.error(f"Failed to capture screenshot {filename}: {e}")
            return None
        logger.info(f"Screenshot saved to: {path}")
        return path

    def save_page_source(self, driver: Any, kind: str) -> Optional[str]:
        """Dump the current page source; returns the path or None on failure."""
        if driver is None:
            return None
        self._ensure_dir()
        path = self.path_for(kind, PathConstants.PAGE_SOURCE_EXTENSION)
        try:
            source = driver.page_source
            with open(path, 'w', encoding='utf-8') as handle:
                handle.write(source or '')
        except Exception as e:
            logger.error(f"Failed to capture page source: {e}")
            return None
        logger.info(f"Page source saved to: {path}")
        return path

    def capture_failure(self, driver: Any, kind: str = 'failure') -> Dict[str, Optional[str]]:
        """Screenshot plus best-effort page source, both under the same kind."""
        return {
            'screenshot': self.save_screenshot(driver, kind),
            'page_source': self.save_page_source(driver, kind),
        }
