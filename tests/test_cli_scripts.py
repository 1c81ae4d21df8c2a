import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from data.models import EndpointResult, PageLoadResult, ProductSearchResult, SuiteRun, TestResult
from scripts import run_banner_checks
from scripts.verify_connection import verify_connection


def _service(page=None, search=None, endpoint=None):
    service = MagicMock()
    service.test_page_load.return_value = page or PageLoadResult(True, 200, 10, 100)
    service.test_product_search.return_value = search or ProductSearchResult(True, 3, 10)
    service.test_endpoint.return_value = endpoint or EndpointResult(True, 200, 10)
    return service


class TestVerifyConnection:
    def test_all_checks_succeed(self, capsys):
        with patch("scripts.verify_connection.QAApiService", return_value=_service()):
            assert verify_connection() is True
        out = capsys.readouterr().out
        assert "Search endpoint working" in out
        assert "Results: 3" in out
        assert "Cart endpoint reachable" in out
        assert "may be outdated" not in out

    def test_forbidden_prints_tip_and_fails(self, capsys):
        service = _service(
            page=PageLoadResult(False, 403, 10, 0, error="403 Client Error: Forbidden"),
            search=ProductSearchResult(False, 0, 10, error="401 Client Error: Unauthorized"),
            endpoint=EndpointResult(False, 401, 10, error="401 Client Error: Unauthorized"),
        )
        with patch("scripts.verify_connection.QAApiService", return_value=service):
            assert not verify_connection()
        out = capsys.readouterr().out
        assert "FAILED: 403" in out
        assert "FAILED: 401 Client Error: Unauthorized" in out
        assert "may be outdated" in out

    def test_block_page_fails(self, capsys):
        service = _service(page=PageLoadResult(True, 200, 10, 100, access_restricted=True))
        with patch("scripts.verify_connection.QAApiService", return_value=service):
            assert not verify_connection()
        assert "Block page served" in capsys.readouterr().out


def _suite(*results):
    return SuiteRun(environment="delta", results=list(results))


class TestRunBannerChecks(unittest.TestCase):
    def _run(self, suite, argv):
        with patch("scripts.run_banner_checks.BannerSuiteRunner") as mock_runner_cls:
            mock_runner_cls.return_value.run.return_value = suite
            code = run_banner_checks.main(argv)
        return code, mock_runner_cls

    def test_exit_code_one_on_failure(self):
        suite = _suite(
            TestResult("Hero Banner", True, 10, "ok", opco="foodlion"),
            TestResult("Small Tiles", False, 10, "wrong positions", opco="foodlion"),
        )
        code, _ = self._run(suite, ["--opco", "foodlion"])
        self.assertEqual(code, 1)

    def test_exit_code_zero_and_reports_written(self):
        suite = _suite(
            TestResult("Hero Banner", True, 10, "ok", opco="hannaford"),
            TestResult("Large Tiles", True, 10, "No large tiles found", skipped=True, opco="hannaford"),
        )
        with tempfile.TemporaryDirectory() as tmp:
            report = Path(tmp) / "report.md"
            json_path = Path(tmp) / "report.json"
            code, mock_runner_cls = self._run(suite, [
                "--opco", "hannaford", "--opco", "foodlion",
                "--env", "beta",
                "--checks", "hero_banner", "large_tiles",
                "--headed",
                "--report", str(report),
                "--json", str(json_path),
            ])

            self.assertEqual(code, 0)
            self.assertTrue(report.read_text(encoding="utf-8").startswith("# Gambit Banner QA Report"))
            data = json.loads(json_path.read_text(encoding="utf-8"))
            self.assertEqual(data["summary"]["skipped"], 1)
            self.assertEqual(data["summary"]["failed"], 0)

        mock_runner_cls.assert_called_once_with(environment="beta", headless=False)
        mock_runner_cls.return_value.run.assert_called_once_with(
            opco_keys=["hannaford", "foodlion"],
            check_names=["hero_banner", "large_tiles"],
        )

    def test_unknown_opco_rejected(self):
        with self.assertRaises(SystemExit):
            run_banner_checks.main(["--opco", "walmart"])
