#!/usr/bin/env python3
"""CLI entrypoint that runs the Gambit banner checks across OPCOs."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime

from dotenv import load_dotenv

# Ensure project root is on PYTHONPATH
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from checks.gambit_checks import CHECKS
from config.settings import VALID_ENVIRONMENTS, VALID_OPCOS, log_user_agent_config
from core.suite_runner import BannerSuiteRunner
from reporting.qa_report import generate_suite_report, write_json_report, write_markdown_report


logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the Gambit/ADUSA banner checks")
    parser.add_argument("--opco", action="append", choices=VALID_OPCOS,
                        help="OPCO to check (repeatable, default: all)")
    parser.add_argument("--env", choices=VALID_ENVIRONMENTS, help="Non-prod environment (default: TEST_ENV or delta)")
    parser.add_argument("--checks", nargs="+", choices=list(CHECKS), help="Checks to run (default: all)")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--report", help="Write a markdown report to this path")
    parser.add_argument("--json", dest="json_path", help="Write a JSON report to this path")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    load_dotenv(os.path.join(PROJECT_ROOT, '.env'))
    log_user_agent_config()

    runner = BannerSuiteRunner(
        environment=args.env,
        headless=False if args.headed else None,
    )
    suite = runner.run(opco_keys=args.opco, check_names=args.checks)

    report = generate_suite_report(suite)
    print(report)

    stamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")
    if args.report:
        write_markdown_report(report, args.report.format(timestamp=stamp))
    if args.json_path:
        write_json_report(suite, args.json_path.format(timestamp=stamp))

    if not suite.ok:
        logger.error("%s check(s) failed", len(suite.failed))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
