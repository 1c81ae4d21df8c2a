"""
Screenshot Capture Module

Saves full-page and element screenshots taken during the banner checks under
``<screenshot dir>/<suite>/<opco>-<name>.png``.
"""

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page

from config.settings import SETTINGS

logger = logging.getLogger('ingestion.screenshot_capture')


def timestamped_name(name: str) -> str:
    """``name_2024-01-01T10-00-00-000000.png`` with characters unsafe in paths replaced."""
    timestamp = re.sub(r"[:.]", "-", datetime.utcnow().isoformat())
    return f"{name}_{timestamp}.png"


class ScreenshotCapture:
    """Writes screenshots of pages and elements for later review."""

    def __init__(self, output_dir: Optional[Union[str, Path]] = None):
        """
        Initialize screenshot capture.

        Args:
            output_dir: Root directory for screenshots (defaults to settings)
        """
        self.output_dir = Path(output_dir or SETTINGS["screenshots"]["directory"])

    def path_for(self, suite: str, opco_key: str, name: str) -> Path:
        return self.output_dir / suite / f"{opco_key}-{name}.png"

    def capture_page(
        self,
        page: Page,
        suite: str,
        opco_key: str,
        name: str = "full-page",
        full_page: bool = True,
    ) -> Optional[Path]:
        """
        Capture the page and return the file path, or None if capture failed.
        """
        path = self.path_for(suite, opco_key, name)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            page.screenshot(path=str(path), full_page=full_page)
        except PlaywrightError as e:
            logger.warning("Could not capture %s screenshot for %s: %s", name, opco_key, e)
            return None
        logger.info("Screenshot saved: %s", path)
        return path

    def capture_element(
        self,
        locator: Locator,
        suite: str,
        opco_key: str,
        name: str,
    ) -> Optional[Path]:
        path = self.path_for(suite, opco_key, name)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            locator.screenshot(path=str(path))
        except PlaywrightError as e:
            logger.warning("Could not capture %s screenshot for %s: %s", name, opco_key, e)
            return None
        logger.info("Screenshot saved: %s", path)
        return path


_capture_instance: Optional[ScreenshotCapture] = None


def get_screenshot_capture() -> ScreenshotCapture:
    """Get or create the shared ScreenshotCapture instance."""
    global _capture_instance
    if _capture_instance is None:
        _capture_instance = ScreenshotCapture()
    return _capture_instance
