"""Data package for the OPCO banner QA tooling.

Exposes the value records shared by the HTTP client, page objects and
banner checks.
"""

from .models import (
    BannerSlot,
    EndpointResult,
    OpcoConfig,
    PageLoadResult,
    ProductSearchResult,
    SlotRequest,
    SuiteRun,
    TestResult,
    UserJourneyResult,
)

__all__ = [
    "BannerSlot",
    "EndpointResult",
    "OpcoConfig",
    "PageLoadResult",
    "ProductSearchResult",
    "SlotRequest",
    "SuiteRun",
    "TestResult",
    "UserJourneyResult",
]
