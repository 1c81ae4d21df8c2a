"""Data models for the OPCO banner QA tooling.

Plain dataclasses shared by the HTTP client, the page objects and the banner
checks. They carry no behaviour beyond serialisation for reports.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class OpcoConfig:
    """One operating company and the slot its search dropdown should serve."""

    key: str
    name: str
    url: str
    expected_slot_name: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class EndpointResult:
    success: bool
    status: int
    response_time_ms: int
    data: Any = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ProductSearchResult:
    success: bool
    products_found: int
    response_time_ms: int
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PageLoadResult:
    success: bool
    status: int
    response_time_ms: int
    content_length: int
    title: Optional[str] = None
    access_restricted: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TestResult:
    """Outcome of a single QA check.

    ``details`` holds whatever the check wants to surface in reports (client
    results, sponsored positions, captured slot names).
    """

    __test__ = False  # not a pytest test class

    test_name: str
    passed: bool
    duration_ms: int
    message: str
    details: Any = None
    skipped: bool = False
    opco: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        details = self.details
        if hasattr(details, "to_dict"):
            details = details.to_dict()
        return {
            "test_name": self.test_name,
            "passed": self.passed,
            "duration_ms": self.duration_ms,
            "message": self.message,
            "details": details,
            "skipped": self.skipped,
            "opco": self.opco,
        }


@dataclass
class UserJourneyResult:
    journey_name: str
    steps: List[TestResult]
    overall_passed: bool
    total_duration_ms: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "journey_name": self.journey_name,
            "steps": [step.to_dict() for step in self.steps],
            "overall_passed": self.overall_passed,
            "total_duration_ms": self.total_duration_ms,
        }


@dataclass
class BannerSlot:
    """One record of the banner API's JSON array (``{slotName, slotID, adType}``)."""

    slot_name: str
    slot_id: Optional[Any] = None
    ad_type: Optional[Any] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_slot_id(self) -> bool:
        return "slotID" in self.raw

    @property
    def has_ad_type(self) -> bool:
        return "adType" in self.raw

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SlotRequest:
    """One slot of an outbound ad request payload."""

    slotname: str
    parameters: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SuiteRun:
    """A multi-OPCO run of the banner checks."""

    environment: str
    started_at: datetime = field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None
    results: List[TestResult] = field(default_factory=list)

    @property
    def passed(self) -> List[TestResult]:
        return [r for r in self.results if r.passed and not r.skipped]

    @property
    def failed(self) -> List[TestResult]:
        return [r for r in self.results if not r.passed]

    @property
    def skipped(self) -> List[TestResult]:
        return [r for r in self.results if r.skipped]

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "environment": self.environment,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "summary": {
                "total": len(self.results),
                "passed": len(self.passed),
                "failed": len(self.failed),
                "skipped": len(self.skipped),
            },
            "results": [r.to_dict() for r in self.results],
        }
