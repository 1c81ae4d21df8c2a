"""HTTP-level QA checks and user journeys against an OPCO environment."""

from __future__ import annotations

import logging
import time
from typing import List, Optional

from data.models import TestResult, UserJourneyResult
from ingestion.qa_api import QAApiService, get_qa_api_service

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class QATestSuite:
    """Validates user journeys through the QA API client."""

    def __init__(self, service: Optional[QAApiService] = None):
        self.service = service or get_qa_api_service()

    def test_homepage_load(self) -> TestResult:
        start = time.monotonic()
        try:
            result = self.service.test_page_load("/")
            if result.success:
                message = f"Homepage loaded in {result.response_time_ms}ms ({result.content_length} bytes)"
            else:
                message = f"Failed: {result.error}"
            return TestResult(
                test_name="Homepage Load",
                passed=result.success and result.status == 200,
                duration_ms=_elapsed_ms(start),
                message=message,
                details=result,
            )
        except Exception as e:
            logger.error("Homepage load check crashed: %s", e)
            return TestResult(
                test_name="Homepage Load",
                passed=False,
                duration_ms=_elapsed_ms(start),
                message=f"Error: {e}",
            )

    def test_product_search(self, query: str) -> TestResult:
        name = f'Product Search: "{query}"'
        start = time.monotonic()
        try:
            result = self.service.test_product_search(query)
            if result.success:
                message = f"Found {result.products_found} products in {result.response_time_ms}ms"
            else:
                message = f"Failed: {result.error}"
            return TestResult(
                test_name=name,
                passed=result.success and result.products_found > 0,
                duration_ms=_elapsed_ms(start),
                message=message,
                details=result,
            )
        except Exception as e:
            logger.error("Product search check crashed for %r: %s", query, e)
            return TestResult(
                test_name=name,
                passed=False,
                duration_ms=_elapsed_ms(start),
                message=f"Error: {e}",
            )

    def test_endpoint_availability(self, path: str, expected_status: int = 200) -> TestResult:
        name = f"Endpoint: {path}"
        start = time.monotonic()
        try:
            result = self.service.test_endpoint(path)
            if result.success:
                message = f"Status {result.status} - Response time: {result.response_time_ms}ms"
            else:
                message = f"Failed with status {result.status}: {result.error}"
            return TestResult(
                test_name=name,
                passed=result.status == expected_status,
                duration_ms=_elapsed_ms(start),
                message=message,
                details=result,
            )
        except Exception as e:
            logger.error("Endpoint check crashed for %s: %s", path, e)
            return TestResult(
                test_name=name,
                passed=False,
                duration_ms=_elapsed_ms(start),
                message=f"Error: {e}",
            )

    def _journey(self, name: str, steps: List[TestResult], start: float) -> UserJourneyResult:
        overall = all(step.passed for step in steps)
        logger.info("Journey '%s' finished: %s", name, "PASSED" if overall else "FAILED")
        return UserJourneyResult(
            journey_name=name,
            steps=steps,
            overall_passed=overall,
            total_duration_ms=_elapsed_ms(start),
        )

    def run_product_discovery_journey(self) -> UserJourneyResult:
        """Homepage, search, product listing, cart."""
        start = time.monotonic()
        steps = [
            self.test_homepage_load(),
            self.test_product_search("milk"),
            self.test_endpoint_availability("/products"),
            self.test_endpoint_availability("/cart"),
        ]
        return self._journey("Product Discovery Journey", steps, start)

    def run_search_to_details_journey(self, search_query: str) -> UserJourneyResult:
        start = time.monotonic()
        steps = [
            self.test_product_search(search_query),
            # assumes the first result's details page
            self.test_endpoint_availability("/product-details"),
        ]
        return self._journey(f'Search to Details: "{search_query}"', steps, start)

    def run_all_tests(self) -> List[TestResult]:
        """Run all critical checks."""
        return [
            self.test_homepage_load(),
            self.test_product_search("banana"),
            self.test_product_search("milk"),
            self.test_endpoint_availability("/"),
            self.test_endpoint_availability("/products"),
        ]
