"""Browser-driven Gambit/ADUSA banner checks.

Each check takes a fresh ``Page`` and the ``OpcoConfig`` under test, drives
the homepage through its initial setup, gathers evidence (network payloads,
visibility, tile labels) and returns a ``TestResult``. Pass/fail decisions
on captured data live in ``checks.validators``.

Playwright errors raised while navigating propagate to the caller; the suite
runner turns them into failed results.
"""
from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page

from checks import validators
from config.settings import SETTINGS
from data.models import OpcoConfig, TestResult
from ingestion.banner_traffic import BannerTrafficRecorder
from ingestion.screenshot_capture import ScreenshotCapture, get_screenshot_capture
from pages.homepage import HomepagePage

logger = logging.getLogger(__name__)

SEARCH_KEYWORD = "cola"
PRODUCT_SEARCH_URL_PATTERN = "**/product-search/**"
SMALL_TILES_INSPECTED = 8

CheckFn = Callable[..., TestResult]


def _timeout() -> int:
    return SETTINGS["timeouts"]["api"]


def _elapsed_ms(started: float) -> int:
    return int((time.time() - started) * 1000)


def _result(name: str, opco: OpcoConfig, started: float, passed: bool, message: str,
            details: Any = None, skipped: bool = False) -> TestResult:
    level = logging.INFO if passed else logging.WARNING
    logger.log(level, "%s on %s: %s", name, opco.name, message)
    return TestResult(
        test_name=name,
        passed=passed,
        duration_ms=_elapsed_ms(started),
        message=message,
        details=details,
        skipped=skipped,
        opco=opco.key,
    )


def _open_homepage(page: Page, opco: OpcoConfig, settle_ms: int = 2000) -> HomepagePage:
    homepage = HomepagePage(page)
    homepage.goto(opco.url)
    page.wait_for_timeout(1000 + random.random() * 1000)
    homepage.complete_initial_setup("in-store")
    page.wait_for_timeout(settle_ms)
    return homepage


def dropdown_slot_api(page: Page, opco: OpcoConfig,
                      screenshots: Optional[ScreenshotCapture] = None) -> TestResult:
    """Focusing the search bar must fetch the OPCO's dropdown slot from the banner API."""
    name = "Dropdown Slot API"
    started = time.time()
    recorder = BannerTrafficRecorder(page).listen_banner_responses(require_ok=True)

    homepage = _open_homepage(page, opco, settle_ms=0)
    if not homepage.is_visible_within(homepage.search_input, _timeout()):
        return _result(name, opco, started, False, "Search bar not visible")
    homepage.click_search_bar()
    page.wait_for_timeout(4000)

    passed, message = validators.validate_dropdown_slot(recorder.banner_payloads, opco.expected_slot_name)
    details = {"slot_names": recorder.slot_names(), "responses": len(recorder.banner_payloads)}
    return _result(name, opco, started, passed, message, details)


def search_bar_banner(page: Page, opco: OpcoConfig,
                      screenshots: Optional[ScreenshotCapture] = None) -> TestResult:
    name = "Search Bar Banner"
    started = time.time()
    screenshots = screenshots or get_screenshot_capture()

    homepage = _open_homepage(page, opco, settle_ms=0)
    if not homepage.is_visible_within(homepage.search_input, _timeout()):
        return _result(name, opco, started, False, "Search bar not visible")
    homepage.click_search_bar()
    page.wait_for_timeout(2000)

    count = homepage.get_adusa_banner_count()
    screenshots.capture_page(page, "search-bar-banner", opco.key)
    if count == 0:
        return _result(name, opco, started, False, "No ADUSA banner rendered under the search bar")
    return _result(name, opco, started, True, f"{count} ADUSA banner element(s) found", {"count": count})


def search_result_banner(page: Page, opco: OpcoConfig,
                         screenshots: Optional[ScreenshotCapture] = None) -> TestResult:
    """Searching must request at least one of the OPCO's search result slots."""
    name = "Search Result Banner"
    started = time.time()
    screenshots = screenshots or get_screenshot_capture()
    recorder = BannerTrafficRecorder(page).intercept_json()

    homepage = _open_homepage(page, opco, settle_ms=1000)
    homepage.click_search_bar()
    page.wait_for_timeout(500)

    search_input = page.locator('input[type="search"], input[placeholder*="Search"]').first
    search_input.fill(SEARCH_KEYWORD)
    page.wait_for_timeout(1000)
    search_input.press("Enter")
    page.wait_for_url(PRODUCT_SEARCH_URL_PATTERN, timeout=_timeout())
    page.wait_for_timeout(2000)

    screenshots.capture_page(page, "search-result-banner", opco.key, "search-results")
    if not recorder.json_payloads:
        return _result(name, opco, started, False, "No /json responses intercepted")

    found = recorder.slot_names()
    passed, message = validators.validate_search_slots(found, opco.key)
    return _result(name, opco, started, passed, message, {"slot_names": found})


def top_homepage_banner(page: Page, opco: OpcoConfig,
                        screenshots: Optional[ScreenshotCapture] = None) -> TestResult:
    name = "Top Homepage Banner"
    started = time.time()
    screenshots = screenshots or get_screenshot_capture()

    homepage = _open_homepage(page, opco)
    banner = homepage.top_homepage_banner.first
    banner.scroll_into_view_if_needed()
    page.wait_for_timeout(1000)

    if not homepage.is_visible_within(banner, _timeout()):
        screenshots.capture_page(page, "top-homepage-banner", opco.key)
        return _result(name, opco, started, False, "#display-ad-1 not visible")

    screenshots.capture_element(banner, "top-homepage-banner", opco.key, "banner")
    screenshots.capture_page(page, "top-homepage-banner", opco.key)
    return _result(name, opco, started, True, "Top homepage banner displayed")


def hero_banner(page: Page, opco: OpcoConfig,
                screenshots: Optional[ScreenshotCapture] = None) -> TestResult:
    """The hero ad must be visible, and still visible after moving to slide 2."""
    name = "Hero Banner"
    started = time.time()
    screenshots = screenshots or get_screenshot_capture()

    homepage = _open_homepage(page, opco)
    homepage.wait_for_page_ready()
    hero = homepage.hero_banner_carousel.first
    hero.scroll_into_view_if_needed()
    page.wait_for_timeout(2000)

    if not homepage.is_visible_within(hero, _timeout()):
        return _result(name, opco, started, False, "#display-ad-hero-1 not visible")

    page.locator("li.pdl-carousel_nav-item").nth(1).click()
    page.wait_for_timeout(2500)

    if not homepage.is_visible_within(hero, _timeout()):
        screenshots.capture_page(page, "hero-banner", opco.key)
        return _result(name, opco, started, False, "Hero banner not visible after moving to slide 2")

    screenshots.capture_element(hero, "hero-banner", opco.key, "hero-banner")
    screenshots.capture_page(page, "hero-banner", opco.key)
    return _result(name, opco, started, True, "Hero banner displayed on slide 2")


def _is_tile_visible(tile) -> bool:
    try:
        return tile.is_visible()
    except PlaywrightError:
        return False


def small_tiles(page: Page, opco: OpcoConfig,
                screenshots: Optional[ScreenshotCapture] = None) -> TestResult:
    """Sponsored small tiles must occupy exactly positions 2 and 5."""
    name = "Small Tiles"
    started = time.time()
    screenshots = screenshots or get_screenshot_capture()
    recorder = BannerTrafficRecorder(page).listen_slot_requests().intercept_ads()

    homepage = _open_homepage(page, opco)
    homepage.wait_for_page_ready()
    tiles = homepage.get_small_tiles()

    if len(tiles) < validators.MIN_SMALL_TILES:
        message = f"Only {len(tiles)} small tile(s), at least {validators.MIN_SMALL_TILES} needed"
        return _result(name, opco, started, True, message, {"tiles": len(tiles)}, skipped=True)

    sponsored: List[int] = []
    for position, tile in enumerate(tiles[:SMALL_TILES_INSPECTED], start=1):
        if not _is_tile_visible(tile):
            continue
        if homepage.is_tile_sponsored(tile):
            sponsored.append(position)

    expected_slots = validators.small_tile_slot_names(opco.key)
    seen = set(recorder.requested_slot_names() + recorder.slot_names())
    for slot in expected_slots:
        logger.info("Small tile slot %s %s", slot, "requested" if slot in seen else "not seen")

    for position in validators.EXPECTED_SPONSORED_SMALL_TILE_POSITIONS:
        screenshots.capture_element(
            homepage.get_small_tile_by_position(position), "small-tiles", opco.key, f"position-{position}"
        )
    screenshots.capture_page(page, "small-tiles", opco.key)

    passed, message = validators.validate_small_tile_positions(sponsored)
    details = {"tiles": len(tiles), "sponsored_positions": sponsored}
    return _result(name, opco, started, passed, message, details)


def large_tiles(page: Page, opco: OpcoConfig,
                screenshots: Optional[ScreenshotCapture] = None) -> TestResult:
    """A large-tile slot must show up in ad traffic when the carousel renders."""
    name = "Large Tiles"
    started = time.time()
    screenshots = screenshots or get_screenshot_capture()
    recorder = BannerTrafficRecorder(page).listen_slot_requests().intercept_ads()

    homepage = _open_homepage(page, opco)
    homepage.wait_for_page_ready()
    tiles = homepage.get_large_tiles()

    if not tiles:
        return _result(name, opco, started, True, "No large tiles found", {"tiles": 0}, skipped=True)

    sponsored_positions: List[int] = []
    sponsored_texts: List[str] = []
    for position, tile in enumerate(tiles, start=1):
        if not _is_tile_visible(tile):
            logger.debug("Large tile %s not visible (lazy-loaded?)", position)
            continue
        text = homepage.tile_text(tile)
        if homepage.is_tile_sponsored(tile):
            sponsored_positions.append(position)
            sponsored_texts.append(text)
            screenshots.capture_element(tile, "large-tiles", opco.key, f"position-{position}")

    request_detected = recorder.saw_slot_containing(validators.LARGE_TILE_MARKER)
    if not request_detected:
        logger.info("Captured slots on %s: %s", opco.name, recorder.requested_slot_names())
    screenshots.capture_page(page, "large-tiles", opco.key)

    passed, message = validators.validate_large_tiles(len(tiles), request_detected, sponsored_texts)
    details = {
        "tiles": len(tiles),
        "sponsored_positions": sponsored_positions,
        "expected_slot": validators.large_tile_slot_name(opco.key),
    }
    return _result(name, opco, started, passed, message, details)


CHECKS: Dict[str, CheckFn] = {
    "dropdown_slot_api": dropdown_slot_api,
    "search_bar_banner": search_bar_banner,
    "search_result_banner": search_result_banner,
    "top_homepage_banner": top_homepage_banner,
    "hero_banner": hero_banner,
    "small_tiles": small_tiles,
    "large_tiles": large_tiles,
}
