"""Live banner checks against the non-prod OPCO sites.

Skipped unless RUN_E2E=1; needs network access and ``playwright install chromium``.
"""
import os

import pytest

from checks.gambit_checks import CHECKS
from config.settings import VALID_OPCOS, get_opco_config
from ingestion.browser_session import gambit_session

pytestmark = [
    pytest.mark.e2e,
    pytest.mark.skipif(os.getenv("RUN_E2E") != "1", reason="set RUN_E2E=1 to run live browser checks"),
]


@pytest.mark.parametrize("opco_key", VALID_OPCOS)
@pytest.mark.parametrize("check_name", list(CHECKS))
def test_banner_check(check_name, opco_key):
    opco = get_opco_config(opco_key)
    with gambit_session() as (page, _context):
        result = CHECKS[check_name](page, opco)
    if result.skipped:
        pytest.skip(result.message)
    assert result.passed, result.message
