"""Suite runner that drives the banner checks across OPCOs."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from checks.gambit_checks import CHECKS
from config.settings import SETTINGS, get_all_opco_configs, get_opco_config
from data.models import OpcoConfig, SuiteRun, TestResult
from ingestion.browser_session import gambit_session
from ingestion.screenshot_capture import ScreenshotCapture, get_screenshot_capture

logger = logging.getLogger(__name__)


class BannerSuiteRunner:
    """Runs each selected check against each selected OPCO, one case at a time.

    Every case gets its own browser session so listeners, routes and cookies
    never leak between cases.
    """

    def __init__(
        self,
        environment: Optional[str] = None,
        headless: Optional[bool] = None,
        session_factory: Callable = gambit_session,
        screenshots: Optional[ScreenshotCapture] = None,
    ):
        self.environment = environment or SETTINGS["environment"]
        self.headless = headless
        self.session_factory = session_factory
        self.screenshots = screenshots or get_screenshot_capture()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def resolve_opcos(self, opco_keys: Optional[Iterable[str]] = None) -> List[OpcoConfig]:
        if not opco_keys:
            return [config for _, config in get_all_opco_configs(self.environment)]
        return [get_opco_config(key, self.environment) for key in opco_keys]

    def resolve_checks(self, check_names: Optional[Iterable[str]] = None) -> List[str]:
        if not check_names:
            return list(CHECKS)
        unknown = [name for name in check_names if name not in CHECKS]
        if unknown:
            raise ValueError(f"Unknown check(s): {', '.join(unknown)}. Valid values: {', '.join(CHECKS)}")
        return list(check_names)

    def run(
        self,
        opco_keys: Optional[Iterable[str]] = None,
        check_names: Optional[Iterable[str]] = None,
    ) -> SuiteRun:
        opcos = self.resolve_opcos(opco_keys)
        checks = self.resolve_checks(check_names)
        suite = SuiteRun(environment=self.environment)

        logger.info("Running %s check(s) on %s OPCO(s) in %s", len(checks), len(opcos), self.environment)
        for check_name in checks:
            for opco in opcos:
                result = self.run_case(check_name, opco)
                suite.results.append(result)

        suite.finished_at = datetime.utcnow()
        logger.info(
            "Suite finished: %s passed, %s failed, %s skipped",
            len(suite.passed), len(suite.failed), len(suite.skipped),
        )
        return suite

    def run_case(self, check_name: str, opco: OpcoConfig) -> TestResult:
        check = CHECKS[check_name]
        started = time.time()
        logger.info("Running %s on %s (%s)", check_name, opco.name, opco.url)
        try:
            with self.session_factory(headless=self.headless) as (page, _context):
                return check(page, opco, self.screenshots)
        except Exception as exc:
            logger.exception("%s failed on %s", check_name, opco.name)
            return TestResult(
                test_name=check_name,
                passed=False,
                duration_ms=int((time.time() - started) * 1000),
                message=f"Error: {exc}",
                opco=opco.key,
            )
