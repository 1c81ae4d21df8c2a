"""QA API client for the OPCO non-prod environments.

Wraps a ``requests.Session`` with the QA user agent (without it the security
layer blocks delta/beta), request/response logging and a bounded linear
retry. Results of the ``test_*`` helpers are plain records; only
``request_with_retry`` lets the final error escape.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Optional

import requests
from bs4 import BeautifulSoup

from config.settings import SETTINGS
from data.models import EndpointResult, PageLoadResult, ProductSearchResult

logger = logging.getLogger(__name__)

BLOCK_PAGE_MARKERS = (
    "access is temporarily restricted",
    "access denied",
)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _status_of(error: Exception) -> int:
    response = getattr(error, "response", None)
    if response is not None:
        return response.status_code
    return 0


def extract_title(html: str) -> Optional[str]:
    """Return the stripped ``<title>`` of an HTML document, if any."""
    if not html:
        return None
    soup = BeautifulSoup(html, "lxml")
    if soup.title and soup.title.string:
        return soup.title.string.strip()
    return None


def detect_access_restricted(html: str) -> bool:
    """True when the response is the WAF block page rather than the storefront."""
    if not html:
        return False
    # The block page is small; the marker sits near the top
    head = html[:5000].lower()
    return any(marker in head for marker in BLOCK_PAGE_MARKERS)


class QAApiService:
    """HTTP client for testing OPCO endpoints with the QA user agent."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_ms: Optional[int] = None,
        user_agent: Optional[str] = None,
        retry_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        qa = SETTINGS["qa_client"]
        self.base_url = (base_url or qa["base_url"]).rstrip("/")
        self.timeout = (timeout_ms or qa["timeout"]) / 1000.0
        self.retry_attempts = qa["retry_attempts"] if retry_attempts is None else retry_attempts
        self.retry_delay = qa["retry_delay"] if retry_delay is None else retry_delay

        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent or SETTINGS["qa_user_agent"],
            "Accept": "application/json, text/html, */*",
            "Accept-Encoding": ", ".join(qa["accepted_encodings"]),
        })
        self.session.hooks["response"].append(self._log_response)

    @staticmethod
    def _log_response(response: requests.Response, *args, **kwargs) -> None:
        logger.info("[QA] Response: %s %s", response.status_code, response.url)

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = self._url(path)
        logger.info("[QA] Request: %s %s", method.upper(), url)
        kwargs.setdefault("timeout", self.timeout)
        try:
            response = self.session.request(method.upper(), url, **kwargs)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error("[QA] Response error: %s %s", _status_of(e) or None, e)
            raise
        return response

    @staticmethod
    def _body(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    def test_endpoint(self, path: str) -> EndpointResult:
        """Check endpoint availability and response time."""
        start = time.monotonic()
        try:
            response = self._request("GET", path)
            return EndpointResult(
                success=True,
                status=response.status_code,
                response_time_ms=_elapsed_ms(start),
                data=self._body(response),
            )
        except requests.RequestException as e:
            return EndpointResult(
                success=False,
                status=_status_of(e),
                response_time_ms=_elapsed_ms(start),
                error=str(e),
            )

    def test_product_search(self, query: str) -> ProductSearchResult:
        start = time.monotonic()
        try:
            response = self._request("GET", "/api/products/search", params={"q": query})
            data = self._body(response)
            found = len(data) if isinstance(data, list) else 0
            return ProductSearchResult(
                success=True,
                products_found=found,
                response_time_ms=_elapsed_ms(start),
            )
        except requests.RequestException as e:
            return ProductSearchResult(
                success=False,
                products_found=0,
                response_time_ms=_elapsed_ms(start),
                error=str(e),
            )

    def test_page_load(self, path: str = "/") -> PageLoadResult:
        start = time.monotonic()
        try:
            response = self._request("GET", path)
            elapsed = _elapsed_ms(start)
            try:
                content_length = int(response.headers.get("content-length") or 0)
            except ValueError:
                content_length = 0
            html = response.text or ""
            restricted = detect_access_restricted(html)
            if restricted:
                logger.warning("[QA] Block page served for %s", self._url(path))
            return PageLoadResult(
                success=True,
                status=response.status_code,
                response_time_ms=elapsed,
                content_length=content_length,
                title=extract_title(html),
                access_restricted=restricted,
            )
        except requests.RequestException as e:
            return PageLoadResult(
                success=False,
                status=_status_of(e),
                response_time_ms=_elapsed_ms(start),
                content_length=0,
                error=str(e),
            )

    def request_with_retry(
        self,
        method: str = "GET",
        path: str = "/",
        retries: Optional[int] = None,
        **kwargs: Any,
    ) -> requests.Response:
        """Issue a request, retrying on failure with a fixed delay.

        ``retries`` extra attempts are made (default from settings), each after
        sleeping ``retry_delay`` seconds. Once they are used up the last error
        is raised.
        """
        attempts_left = self.retry_attempts if retries is None else retries
        while True:
            try:
                return self._request(method, path, **kwargs)
            except requests.RequestException:
                if attempts_left <= 0:
                    raise
                logger.info("[QA] Retrying... %s attempts left", attempts_left)
                time.sleep(self.retry_delay)
                attempts_left -= 1


# Shared instance
_SERVICE: Optional[QAApiService] = None
_SERVICE_LOCK = threading.Lock()


def get_qa_api_service() -> QAApiService:
    """Get the shared QA API client, creating it on first use."""
    global _SERVICE
    with _SERVICE_LOCK:
        if _SERVICE is None:
            _SERVICE = QAApiService()
    return _SERVICE


def reset_qa_api_service() -> None:
    global _SERVICE
    with _SERVICE_LOCK:
        _SERVICE = None
