"""
Result formatting utilities for the banner QA reports
Handles status labels and human-readable durations
"""

from typing import Union

from data.models import TestResult


def format_duration(duration_ms: Union[int, float, None]) -> str:
    """
    Format a duration for display

    Args:
        duration_ms: Duration in milliseconds

    Returns:
        "850ms" below one second, "12.3s" below one minute, "2m 05s" above
    """
    if duration_ms is None:
        return "0ms"
    duration_ms = int(duration_ms)
    if duration_ms < 1000:
        return f"{duration_ms}ms"
    seconds = duration_ms / 1000
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, remainder = divmod(int(seconds), 60)
    return f"{minutes}m {remainder:02d}s"


def get_result_status(result: TestResult) -> str:
    """
    Get status label for a result

    Args:
        result: The check or QA result

    Returns:
        Status string with emoji ("✅ Passed", "⏭️ Skipped" or "❌ Failed")
    """
    if result.skipped:
        return "⏭️ Skipped"
    elif result.passed:
        return "✅ Passed"
    else:
        return "❌ Failed"


def get_result_emoji(result: TestResult) -> str:
    if result.skipped:
        return "⏭️"
    return "✅" if result.passed else "❌"


def format_pass_rate(passed: int, total: int) -> str:
    if not total:
        return "n/a"
    return f"{passed}/{total} ({passed / total:.0%})"
