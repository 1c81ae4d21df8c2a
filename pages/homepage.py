"""Homepage page object for the OPCO storefronts.

Maps the actions the banner checks need ("click search bar", "select
shopping method", "collect small tiles") onto DOM queries. The storefronts
differ per OPCO, so most helpers try fallback selectors and treat a missing
element as "feature absent" instead of failing.
"""
from __future__ import annotations

import logging
import random
import re
from typing import List

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page

from pages.base_page import BasePage

logger = logging.getLogger(__name__)

SKINNY_BANNER_HREF = "https://ads-adusatest.adhese.com/raylene"

SHOPPING_METHODS = {
    "in-store": "In-Store",
    "pickup": "Pickup",
    "delivery": "Delivery",
}

MODAL_OVERLAY_SELECTOR = '.modal_overlay, .modal-overlay, [class*="modal"][class*="overlay"], .modal_header'

WELCOME_SELECTORS = [
    "text=/Welcome to Food Lion/i",
    "text=/Welcome!/i",
    "text=/Meet the new.*Website/i",
    "text=/A fresh way to shop/i",
    '[class*="welcome"]',
    '[class*="Welcome"]',
    '[aria-label*="Welcome"]',
]

# Hannaford's welcome modal only has the "x" in its header, so it goes first
WELCOME_CLOSE_SELECTORS = [
    'text=/Welcome!/i >> xpath=../.. >> button:has-text("×")',
    '[class*="modal"] button:has-text("×"):visible',
    'button[aria-label*="Close"]:visible',
    'button[aria-label="Close"]',
    "button.close:visible",
    'button:has-text("×"):visible',
    '[data-testid="close-button"]:visible',
    '[data-testid="close-modal"]:visible',
    ".modal__close:visible",
    'button[class*="close"]:visible',
    '[role="button"][aria-label*="Close"]',
    'svg[class*="close"] >> xpath=..',
]

VERIFICATION_SELECTORS = [
    "text=/Verifying your browser/i",
    "text=/Checking your browser/i",
    "text=/Just a moment/i",
    "text=/Security check/i",
    '[class*="verification"]',
    '[class*="challenge"]',
]

BLOCKING_MODAL_SELECTORS = [
    ".modal_overlay",
    ".modal-overlay",
    '[class*="modal"][class*="overlay"]',
    ".modal_header",
    '[role="dialog"]',
    '[class*="Modal"]',
]

LARGE_TILE_ITEM_SELECTORS = [
    '[class*="large-tile-carousel_carousel_item"]',
    ".pdl-carousel_item",
    "li",
    'div[class*="carousel"]',
]

MAX_SCROLL_ATTEMPTS = 10
SCROLL_INCREMENT = 500


class HomepagePage(BasePage):
    """Homepage interactions shared by every banner check."""

    def __init__(self, page: Page):
        super().__init__(page)

        self.search_input = page.locator("#typeahead-search-input")
        self.skinny_banner = page.locator(f'[href="{SKINNY_BANNER_HREF}"]')

        # Generic ADUSA selectors that hold across all OPCOs
        self.adusa_banner = page.locator('[class*="ad-"], [class*="banner"], [data-ad], img[src*="ad"]').first
        self.get_coupon_button = page.locator("text=/coupon/i").first
        self.sponsored_label = page.locator("text=/sponsored/i").first

        self.shopping_method_modal = page.locator(
            "text=/How are you shopping|Select shopping method|Choose your shopping/i"
        )
        self.in_store_option = page.get_by_role("button", name=re.compile(r"in.?store|shop in store", re.I))
        self.pickup_option = page.get_by_role("button", name=re.compile(r"pickup|pick.?up", re.I))
        self.delivery_option = page.get_by_role("button", name=re.compile(r"delivery|deliver", re.I))

        self.not_your_store_popup = page.locator('h3.text--base-strong:has-text("Not your store?")')

        self.carousel = page.locator('[data-testid="homepage-carousel"]')
        self.promotion_banner = page.locator('[data-testid="promotion-banner"]')
        self.deal_section = page.locator('[data-testid="deals-section"]')
        self.category_grid = page.locator('[data-testid="category-grid"]')

        # Gambit placements
        self.small_tiles_list = page.locator('ul[class*="simple-tile-list"]').first
        self.large_tile_carousel = page.locator('[class*="large-tile-carousel"]').first
        self.hero_banner_carousel = page.locator("#display-ad-hero-1")
        self.top_homepage_banner = page.locator("#display-ad-1")

    def is_loaded(self) -> bool:
        return self.search_input.count() > 0

    # ------------------------------------------------------------------
    # Waiting and navigation
    # ------------------------------------------------------------------
    def wait_for_page_ready(self, timeout: int = 30000) -> None:
        self.page.wait_for_load_state("load", timeout=timeout)
        self.page.wait_for_load_state("domcontentloaded", timeout=timeout)
        # let dynamic content start loading
        self.page.wait_for_timeout(500)

    def wait_for_locator(self, locator: Locator, timeout: int = 10000, state: str = "visible") -> Locator:
        locator.wait_for(state=state, timeout=timeout)
        return locator

    def goto(self, url: str) -> None:
        # 'load' rather than 'networkidle': ad-heavy pages never go idle
        self.page.goto(url, wait_until="load", timeout=60000)
        self.page.wait_for_timeout(100 + random.random() * 100)

        blocked = self.is_visible_within(self.page.locator("text=/Access is temporarily restricted/i"), 1000)
        if blocked:
            logger.warning("Blocking page served for %s, retrying once", url)
            self.page.wait_for_timeout(2000)
            self.page.reload(wait_until="domcontentloaded")

    def wait_for_page_load(self) -> None:
        self.page.wait_for_load_state("load")

    # ------------------------------------------------------------------
    # Initial setup: popups and modals
    # ------------------------------------------------------------------
    def _shopping_method_button(self, method: str) -> Locator:
        return {
            "in-store": self.in_store_option,
            "pickup": self.pickup_option,
            "delivery": self.delivery_option,
        }[method]

    def _click_alternative_shopping_button(self, method: str, button_name: str) -> bool:
        alternatives = [
            self.page.locator(f'button:has-text("{button_name}")'),
            self.page.locator('button:has-text("In Store")'),
            self.page.locator(f'[data-testid*="{method}"]'),
            self.page.locator(f'button:text-is("{button_name}")'),
        ]
        for alternative in alternatives:
            if self.is_visible_within(alternative, 500):
                logger.info("Found %s button using alternative selector", button_name)
                alternative.first.click(timeout=2000)
                return True
        return False

    def select_shopping_method(self, method: str = "in-store", max_retries: int = 2) -> None:
        """Pick a shopping method if the modal is shown. Never raises on page state."""
        if method not in SHOPPING_METHODS:
            raise ValueError(f"Unknown shopping method '{method}'. Valid values: {', '.join(SHOPPING_METHODS)}")
        button_name = SHOPPING_METHODS[method]

        try:
            self.page.wait_for_load_state("domcontentloaded", timeout=5000)
        except PlaywrightError:
            pass
        self.page.wait_for_timeout(500)

        if not self.is_visible_within(self.shopping_method_modal, 2000):
            logger.info("Shopping method modal not found, skipping selection")
            return

        for attempt in range(1, max_retries + 1):
            try:
                button = self._shopping_method_button(method)
                if self.is_visible_within(button, 3000):
                    logger.info("%s button is visible, clicking", button_name)
                    button.first.click(timeout=2000)
                elif not self._click_alternative_shopping_button(method, button_name):
                    logger.info("%s button not found with any selector", button_name)

                self.is_hidden_within(self.shopping_method_modal, 5000)
                self.is_hidden_within(self.page.locator(MODAL_OVERLAY_SELECTOR), 5000)
                self.page.wait_for_timeout(1000)
                logger.info("Shopping method selection completed")
                return
            except PlaywrightError as e:
                logger.info("Shopping method attempt %s failed: %s", attempt, e)
                if attempt == max_retries:
                    logger.warning("Could not select shopping method after %s attempts, continuing", max_retries)
                    return
                self.page.wait_for_timeout(500)

    def close_not_your_store_popup(self) -> None:
        self.page.wait_for_timeout(300)
        close_button = self.page.locator(
            'button[aria-label="Close"], button.close, .modal__close, [data-testid="close-modal"]'
        ).first
        if self.is_visible_within(close_button, 1000):
            close_button.click()
        else:
            self.page.keyboard.press("Escape")
        self.page.wait_for_timeout(300)

        self.is_hidden_within(self.page.locator(".modal_overlay, .modal-overlay"), 2000)
        self.page.wait_for_timeout(300)

    def close_welcome_popup(self) -> None:
        """Close the welcome modal some OPCOs (Food Lion, Hannaford) show on first visit."""
        self.page.wait_for_timeout(500)

        found = any(
            self.is_visible_within(self.page.locator(selector), 1000)
            for selector in WELCOME_SELECTORS
        )
        if not found:
            logger.info("No welcome popup found")
            return

        logger.info("Welcome popup detected")
        for selector in WELCOME_CLOSE_SELECTORS:
            close_button = self.page.locator(selector).first
            if not self.is_visible_within(close_button, 1000):
                continue
            try:
                close_button.click(timeout=2000)
            except PlaywrightError:
                continue
            logger.info("Welcome popup closed with selector: %s", selector)
            self.page.wait_for_timeout(500)
            return

        logger.info("Trying Escape key to close welcome popup")
        self.page.keyboard.press("Escape")
        self.page.wait_for_timeout(500)

    def wait_for_device_verification(self) -> None:
        """Wait out a "Verifying your browser" interstitial if one is shown."""
        for selector in VERIFICATION_SELECTORS:
            locator = self.page.locator(selector)
            if not self.is_visible_within(locator, 1000):
                continue
            logger.info("Device verification detected, waiting for completion")
            self.page.wait_for_timeout(1000)
            if self.is_hidden_within(locator, 6000):
                logger.info("Device verification completed")
                self.page.wait_for_timeout(500)
            else:
                logger.warning("Verification timeout, continuing anyway")
            return
        logger.info("No device verification detected")

    def ensure_no_modals_open(self) -> None:
        self.page.wait_for_timeout(500)
        for selector in BLOCKING_MODAL_SELECTORS:
            modal = self.page.locator(selector).first
            if not self.is_visible_within(modal, 1000):
                continue
            logger.info("Found blocking modal: %s", selector)
            close_buttons = modal.locator('button[aria-label*="Close"], button.close, [data-testid="close"]')
            if close_buttons.count() > 0:
                try:
                    close_buttons.first.click(timeout=2000)
                except PlaywrightError as e:
                    logger.debug("Close button click failed: %s", e)
            else:
                self.page.keyboard.press("Escape")
            self.page.wait_for_timeout(500)

    def complete_initial_setup(self, shopping_method: str = "in-store") -> None:
        """Verification, welcome popup, shopping method, store popup, leftover modals."""
        logger.info("Starting initial setup")
        self.wait_for_device_verification()
        self.close_welcome_popup()
        self.select_shopping_method(shopping_method)
        self.close_not_your_store_popup()
        self.ensure_no_modals_open()
        logger.info("Initial setup complete")

    # ------------------------------------------------------------------
    # Gambit tiles
    # ------------------------------------------------------------------
    def get_small_tiles(self) -> List[Locator]:
        self.page.evaluate("() => window.scrollBy(0, 300)")
        self.page.wait_for_timeout(1500)
        self.is_visible_within(self.small_tiles_list, 10000)
        return self.small_tiles_list.locator("li").all()

    def get_small_tile_by_position(self, position: int) -> Locator:
        """Small tile at a 1-indexed position."""
        return self.page.locator(f'(//ul[contains(@class,"simple-tile-list")]//li)[{position}]')

    def get_large_tiles(self) -> List[Locator]:
        """Scroll down until the large tile carousel shows up and return its items."""
        found = False
        for attempt in range(1, MAX_SCROLL_ATTEMPTS + 1):
            self.page.evaluate("(increment) => window.scrollBy(0, increment)", SCROLL_INCREMENT)
            self.page.wait_for_timeout(500)
            if self.is_visible_within(self.large_tile_carousel, 2000):
                logger.info("Large tiles carousel found after %s scroll(s)", attempt)
                found = True
                break
            logger.debug("Large tiles not found, scrolling (attempt %s)", attempt)

        if not found:
            logger.warning("Large tiles carousel not found after %s scroll attempts", MAX_SCROLL_ATTEMPTS)
            return []

        self.page.wait_for_timeout(1000)
        items: List[Locator] = []
        for selector in LARGE_TILE_ITEM_SELECTORS:
            items = self.large_tile_carousel.locator(selector).all()
            if items:
                break
            logger.debug("No large tiles with selector %s", selector)

        logger.info("Total large tiles found: %s", len(items))
        return items

    def tile_text(self, tile: Locator) -> str:
        try:
            return tile.text_content() or ""
        except PlaywrightError:
            return ""

    def is_tile_sponsored(self, tile: Locator) -> bool:
        return "Sponsored" in self.tile_text(tile)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    def click_search_bar(self) -> None:
        try:
            self.search_input.click(timeout=10000)
        except PlaywrightError:
            # usually a leftover modal intercepting the click
            logger.info("Normal click on search bar failed, forcing click")
            self.search_input.click(force=True, timeout=5000)

    def type_in_search(self, text: str) -> None:
        self.search_input.fill(text)

    def is_search_bar_visible(self) -> bool:
        return self.search_input.is_visible()

    # ------------------------------------------------------------------
    # Skinny banner
    # ------------------------------------------------------------------
    def is_skinny_banner_visible(self) -> bool:
        return self.is_visible_within(self.skinny_banner.first, 5000)

    def get_skinny_banner_count(self) -> int:
        return self.skinny_banner.count()

    def get_skinny_banner_href(self):
        return self.skinny_banner.first.get_attribute("href")

    def click_skinny_banner(self) -> None:
        self.skinny_banner.first.click()

    def wait_for_skinny_banner(self, timeout: int = 10000) -> None:
        self.skinny_banner.first.wait_for(state="visible", timeout=timeout)

    # ------------------------------------------------------------------
    # ADUSA banner
    # ------------------------------------------------------------------
    def is_adusa_banner_visible(self) -> bool:
        return self.is_visible_within(self.adusa_banner, 5000)

    def get_adusa_banner_count(self) -> int:
        return self.adusa_banner.count()

    def get_adusa_banner_text(self):
        return self.adusa_banner.text_content()

    def is_get_coupon_button_visible(self) -> bool:
        return self.is_visible_within(self.get_coupon_button, 5000)

    def is_sponsored_label_visible(self) -> bool:
        return self.is_visible_within(self.sponsored_label, 5000)
