from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import pytest

from core.suite_runner import BannerSuiteRunner
from data.models import TestResult


def _fake_session_factory(opened):
    @contextmanager
    def factory(headless=None):
        page, context = MagicMock(), MagicMock()
        opened.append(page)
        yield page, context
    return factory


def _passing_check(page, opco, screenshots):
    return TestResult(test_name="fake", passed=True, duration_ms=1, message="ok", opco=opco.key)


def _crashing_check(page, opco, screenshots):
    raise RuntimeError("page crashed")


@pytest.fixture
def opened():
    return []


@pytest.fixture
def runner(opened):
    return BannerSuiteRunner(
        environment="delta",
        session_factory=_fake_session_factory(opened),
        screenshots=MagicMock(),
    )


def test_resolve_opcos_defaults_to_all(runner):
    opcos = runner.resolve_opcos()
    assert len(opcos) == 6
    assert opcos[0].url == "https://nonprd-delta.stopandshop.com"


def test_resolve_opcos_unknown(runner):
    with pytest.raises(ValueError):
        runner.resolve_opcos(["walmart"])


def test_resolve_checks_unknown(runner):
    with pytest.raises(ValueError, match="bogus"):
        runner.resolve_checks(["bogus"])


def test_run_uses_fresh_session_per_case(runner, opened):
    with patch.dict("core.suite_runner.CHECKS", {"fake": _passing_check}, clear=True):
        suite = runner.run(opco_keys=["foodlion", "hannaford"])

    assert [r.opco for r in suite.results] == ["foodlion", "hannaford"]
    assert len(opened) == 2
    assert opened[0] is not opened[1]
    assert suite.ok
    assert suite.finished_at is not None
    assert suite.environment == "delta"


def test_exceptions_become_failed_results(runner):
    checks = {"crash": _crashing_check, "fake": _passing_check}
    with patch.dict("core.suite_runner.CHECKS", checks, clear=True):
        suite = runner.run(opco_keys=["giantfood"], check_names=["crash", "fake"])

    assert len(suite.results) == 2
    failed = suite.failed
    assert len(failed) == 1
    assert failed[0].test_name == "crash"
    assert failed[0].message == "Error: page crashed"
    assert failed[0].opco == "giantfood"
    assert not suite.ok
