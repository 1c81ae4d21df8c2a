"""Base page object shared by the OPCO page objects.

Wraps a Playwright ``Page`` with selector-based helpers. Subclasses declare
their selectors and build semantic actions on top of these.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page

from config.settings import SETTINGS
from ingestion.screenshot_capture import timestamped_name

logger = logging.getLogger(__name__)


class BasePage:
    """Common functionality for all page objects."""

    def __init__(self, page: Page):
        self.page = page

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def find(self, selector: str) -> Locator:
        return self.page.locator(selector).first

    def find_all(self, selector: str) -> List[Locator]:
        return self.page.locator(selector).all()

    def find_by_test_id(self, test_id: str) -> Locator:
        return self.page.locator(f'[data-testid="{test_id}"]')

    def find_by_text(self, text: str) -> Locator:
        return self.page.get_by_text(text, exact=True).first

    def exists(self, selector: str) -> bool:
        return self.count(selector) > 0

    def count(self, selector: str) -> int:
        return self.page.locator(selector).count()

    def is_visible(self, selector: str) -> bool:
        return self.find(selector).is_visible()

    def is_visible_within(self, locator: Locator, timeout: int = 1000) -> bool:
        """Poll up to ``timeout`` ms for the locator to become visible.

        Absence is an answer here, not an error.
        """
        try:
            locator.wait_for(state="visible", timeout=timeout)
            return True
        except PlaywrightError:
            return False

    def is_hidden_within(self, locator: Locator, timeout: int = 1000) -> bool:
        try:
            locator.wait_for(state="hidden", timeout=timeout)
            return True
        except PlaywrightError:
            return False

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------
    def get_text(self, selector: str) -> str:
        return self.find(selector).inner_text()

    def get_all_texts(self, selector: str) -> List[str]:
        return self.page.locator(selector).all_inner_texts()

    def get_attribute(self, selector: str, attr: str) -> Optional[str]:
        return self.find(selector).get_attribute(attr)

    def has_class(self, selector: str, class_name: str) -> bool:
        classes = self.get_attribute(selector, "class") or ""
        return class_name in classes.split()

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------
    def click(self, selector: str, **kwargs) -> None:
        self.find(selector).click(**kwargs)

    def type(self, selector: str, text: str) -> None:
        self.find(selector).fill(text)

    def scroll_to(self, selector: str) -> None:
        if self.exists(selector):
            self.find(selector).scroll_into_view_if_needed()

    # ------------------------------------------------------------------
    # Waiting
    # ------------------------------------------------------------------
    def wait_for_element(self, selector: str, timeout: int = 5000) -> Locator:
        locator = self.find(selector)
        locator.wait_for(state="visible", timeout=timeout)
        return locator

    def wait_for_element_to_disappear(self, selector: str, timeout: int = 5000) -> None:
        self.find(selector).wait_for(state="hidden", timeout=timeout)

    def wait_for_text(self, selector: str, text: str, timeout: int = 5000) -> None:
        self.page.locator(selector).filter(has_text=text).first.wait_for(state="visible", timeout=timeout)

    # ------------------------------------------------------------------
    # Artifacts
    # ------------------------------------------------------------------
    def take_screenshot(self, name: str) -> str:
        """Full-page screenshot with a timestamped file name; returns the path."""
        path = Path(SETTINGS["screenshots"]["directory"]) / timestamped_name(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.page.screenshot(path=str(path), full_page=True)
        logger.info("Screenshot saved: %s", path)
        return str(path)

    def is_loaded(self) -> bool:
        raise NotImplementedError
