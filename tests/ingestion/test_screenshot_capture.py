from unittest.mock import MagicMock

from playwright.sync_api import Error as PlaywrightError

from ingestion.screenshot_capture import ScreenshotCapture, timestamped_name


def test_path_layout(tmp_path):
    capture = ScreenshotCapture(tmp_path)
    assert capture.path_for("hero-banner", "foodlion", "full-page") == tmp_path / "hero-banner" / "foodlion-full-page.png"


def test_capture_page(tmp_path):
    page = MagicMock()
    path = ScreenshotCapture(tmp_path).capture_page(page, "small-tiles", "giantfood")
    assert path == tmp_path / "small-tiles" / "giantfood-full-page.png"
    assert path.parent.is_dir()
    page.screenshot.assert_called_once_with(path=str(path), full_page=True)


def test_capture_element_failure_returns_none(tmp_path):
    locator = MagicMock()
    locator.screenshot.side_effect = PlaywrightError("element detached")
    assert ScreenshotCapture(tmp_path).capture_element(locator, "small-tiles", "giantfood", "position-2") is None


def test_timestamped_name():
    name = timestamped_name("homepage")
    assert name.startswith("homepage_")
    assert name.endswith(".png")
    assert ":" not in name
