"""
QA Report Generator

Renders a ``SuiteRun`` (or a plain list of QA results) as a markdown summary
with a per-result table, and writes the JSON form for CI artifacts.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, List, Union

from data.models import SuiteRun, TestResult, UserJourneyResult
from utils.result_formatter import format_duration, format_pass_rate, get_result_emoji, get_result_status

logger = logging.getLogger(__name__)


def _escape_cell(text: str) -> str:
    return str(text or "").replace("|", "\\|").replace("\n", " ")


def _results_table(results: Iterable[TestResult]) -> List[str]:
    lines = [
        "| Check | OPCO | Status | Duration | Message |",
        "|-------|------|--------|----------|---------|",
    ]
    for result in results:
        lines.append("| {} | {} | {} | {} | {} |".format(
            _escape_cell(result.test_name),
            _escape_cell(result.opco or "-"),
            get_result_status(result),
            format_duration(result.duration_ms),
            _escape_cell(result.message),
        ))
    return lines


def generate_suite_report(suite: SuiteRun) -> str:
    """
    Generate the markdown report for a banner suite run.

    Args:
        suite: The finished suite run

    Returns:
        Markdown string with a summary block followed by the results table
    """
    total = len(suite.results)
    content = [
        "# Gambit Banner QA Report",
        "",
        f"- **Environment:** {suite.environment}",
        f"- **Started:** {suite.started_at.isoformat(timespec='seconds')}",
    ]
    if suite.finished_at:
        content.append(f"- **Finished:** {suite.finished_at.isoformat(timespec='seconds')}")
    content += [
        f"- **Passed:** {format_pass_rate(len(suite.passed), total)}",
        f"- **Failed:** {len(suite.failed)}",
        f"- **Skipped:** {len(suite.skipped)}",
        "",
        "## Results",
        "",
    ]
    content += _results_table(suite.results)

    if suite.failed:
        content += ["", "## Failures", ""]
        for result in suite.failed:
            content.append(f"- {get_result_emoji(result)} **{result.test_name}** ({result.opco or '-'}): {result.message}")

    return "\n".join(content) + "\n"


def generate_journey_report(journeys: Iterable[UserJourneyResult]) -> str:
    """Markdown for the HTTP user journeys, one table per journey."""
    content = ["# QA User Journeys", ""]
    for journey in journeys:
        status = "✅ Passed" if journey.overall_passed else "❌ Failed"
        content.append(f"## {journey.journey_name} ({status}, {format_duration(journey.total_duration_ms)})")
        content.append("")
        content += _results_table(journey.steps)
        content.append("")
    return "\n".join(content)


def write_markdown_report(content: str, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info("Markdown report written to %s", path)
    return path


def write_json_report(suite: SuiteRun, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(suite.to_dict(), f, indent=2, default=str)
    logger.info("JSON report written to %s", path)
    return path
