"""Playwright browser sessions for the banner checks.

Every check gets its own context so cases never share cookies, routes or
listeners. The delta/beta environments sit behind bot detection, so sessions
are launched with automation hints removed and carry the QA user agent.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Tuple

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright

from config.settings import SETTINGS

logger = logging.getLogger(__name__)

LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-features=IsolateOrigins,site-per-process",
    "--disable-site-isolation-trials",
]

VIEWPORT = {"width": 1920, "height": 1080}

# New York
GEOLOCATION = {"longitude": -74.0060, "latitude": 40.7128}

STEALTH_INIT_SCRIPT = """
    Object.defineProperty(navigator, 'webdriver', {
        get: () => false
    });

    Object.defineProperty(navigator, 'plugins', {
        get: () => [1, 2, 3, 4, 5]
    });

    Object.defineProperty(navigator, 'languages', {
        get: () => ['en-US', 'en']
    });

    window.chrome = {
        runtime: {}
    };

    const originalQuery = window.navigator.permissions.query;
    window.navigator.permissions.query = (parameters) => (
        parameters.name === 'notifications' ?
        Promise.resolve({ state: 'prompt' }) :
        originalQuery(parameters)
    );
"""


def context_options(user_agent: Optional[str] = None) -> Dict[str, Any]:
    """Options for ``browser.new_context`` mimicking a desktop Chrome in New York."""
    return {
        "viewport": dict(VIEWPORT),
        "user_agent": user_agent or SETTINGS["qa_user_agent"],
        "locale": "en-US",
        "timezone_id": "America/New_York",
        "permissions": ["geolocation"],
        "geolocation": dict(GEOLOCATION),
        "extra_http_headers": {"Accept-Language": "en-US,en;q=0.9"},
        "bypass_csp": True,
        "ignore_https_errors": True,
    }


def launch_browser(playwright: Playwright, headless: Optional[bool] = None) -> Browser:
    if headless is None:
        headless = SETTINGS["headless"]
    logger.info("Launching chromium (headless=%s)", headless)
    return playwright.chromium.launch(
        headless=headless,
        args=LAUNCH_ARGS,
        ignore_default_args=["--enable-automation"],
    )


def setup_gambit_session(page: Page, context: BrowserContext, user_agent: Optional[str] = None) -> None:
    """Apply the anti-bot init script and the QA user-agent header."""
    context.add_init_script(STEALTH_INIT_SCRIPT)
    page.set_extra_http_headers({"User-Agent": user_agent or SETTINGS["qa_user_agent"]})


def new_gambit_page(browser: Browser, user_agent: Optional[str] = None) -> Tuple[Page, BrowserContext]:
    context = browser.new_context(**context_options(user_agent))
    context.set_default_timeout(SETTINGS["timeouts"]["long"])
    page = context.new_page()
    setup_gambit_session(page, context, user_agent)
    return page, context


@contextmanager
def gambit_session(
    headless: Optional[bool] = None,
    user_agent: Optional[str] = None,
) -> Iterator[Tuple[Page, BrowserContext]]:
    """Yield a ready ``(page, context)`` and tear down browser and driver afterwards."""
    with sync_playwright() as playwright:
        browser = launch_browser(playwright, headless=headless)
        try:
            page, context = new_gambit_page(browser, user_agent)
            try:
                yield page, context
            finally:
                context.close()
        finally:
            browser.close()
