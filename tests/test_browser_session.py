from unittest.mock import MagicMock, patch

from config.settings import SETTINGS
from ingestion.browser_session import (
    LAUNCH_ARGS,
    STEALTH_INIT_SCRIPT,
    context_options,
    gambit_session,
    launch_browser,
    new_gambit_page,
    setup_gambit_session,
)


def test_context_options_defaults():
    options = context_options()
    assert options["viewport"] == {"width": 1920, "height": 1080}
    assert options["user_agent"] == SETTINGS["qa_user_agent"]
    assert options["locale"] == "en-US"
    assert options["timezone_id"] == "America/New_York"
    assert options["permissions"] == ["geolocation"]
    assert options["bypass_csp"] is True
    assert options["ignore_https_errors"] is True


def test_context_options_custom_user_agent():
    assert context_options("custom-agent")["user_agent"] == "custom-agent"


def test_launch_browser_hides_automation():
    playwright = MagicMock()
    launch_browser(playwright, headless=True)
    playwright.chromium.launch.assert_called_once_with(
        headless=True,
        args=LAUNCH_ARGS,
        ignore_default_args=["--enable-automation"],
    )
    assert "--disable-blink-features=AutomationControlled" in LAUNCH_ARGS


def test_launch_browser_uses_settings_headless():
    playwright = MagicMock()
    with patch.dict(SETTINGS, {"headless": False}):
        launch_browser(playwright)
    assert playwright.chromium.launch.call_args.kwargs["headless"] is False


def test_setup_gambit_session():
    page, context = MagicMock(), MagicMock()
    setup_gambit_session(page, context)
    context.add_init_script.assert_called_once_with(STEALTH_INIT_SCRIPT)
    page.set_extra_http_headers.assert_called_once_with({"User-Agent": SETTINGS["qa_user_agent"]})
    assert "webdriver" in STEALTH_INIT_SCRIPT


def test_new_gambit_page():
    browser = MagicMock()
    page, context = new_gambit_page(browser, "qa-agent")
    browser.new_context.assert_called_once()
    assert browser.new_context.call_args.kwargs["user_agent"] == "qa-agent"
    context.set_default_timeout.assert_called_once_with(SETTINGS["timeouts"]["long"])
    page.set_extra_http_headers.assert_called_once_with({"User-Agent": "qa-agent"})


@patch("ingestion.browser_session.sync_playwright")
def test_gambit_session_closes_everything(mock_sync_playwright):
    playwright = mock_sync_playwright.return_value.__enter__.return_value
    browser = playwright.chromium.launch.return_value
    context = browser.new_context.return_value

    with gambit_session(headless=True) as (page, ctx):
        assert page is context.new_page.return_value
        assert ctx is context

    context.close.assert_called_once()
    browser.close.assert_called_once()
    mock_sync_playwright.return_value.__exit__.assert_called_once()
