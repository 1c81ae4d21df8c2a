"""Capture of ad-serving traffic on OPCO pages.

The banner API answers with a JSON array of ``{slotName, slotID, adType}``
records; outbound ad requests post a ``{"slots": [...]}`` body (or a bare
array) naming the slots the page wants filled. The recorder listens to both
sides so checks can assert on slot names without parsing the DOM.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Iterable, List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page, Request, Response, Route

from data.models import BannerSlot, SlotRequest

logger = logging.getLogger(__name__)

AD_REQUEST_MARKERS = ("/ads", "adhese", "banner")


def is_banner_api_url(url: str) -> bool:
    """The digitalcontent JSON endpoint that serves banner slots."""
    return "digitalcontent" in url and "/json" in url


def is_ad_request_url(url: str) -> bool:
    return any(marker in url for marker in AD_REQUEST_MARKERS)


def extract_slots(payload: Any) -> List[BannerSlot]:
    """Turn a banner API payload (array or single record) into slots.

    Records without a ``slotName`` are ignored.
    """
    if isinstance(payload, dict):
        records = [payload]
    elif isinstance(payload, list):
        records = payload
    else:
        return []

    slots = []
    for record in records:
        if not isinstance(record, dict):
            continue
        name = record.get("slotName")
        if not name:
            continue
        slots.append(BannerSlot(
            slot_name=name,
            slot_id=record.get("slotID"),
            ad_type=record.get("adType"),
            raw=record,
        ))
    return slots


def parse_slot_request(post_data: Optional[str]) -> List[SlotRequest]:
    """Parse an outbound ad request body into the slots it asks for."""
    if not post_data:
        return []
    try:
        data = json.loads(post_data)
    except ValueError:
        return []

    if isinstance(data, dict) and data.get("slots"):
        slots = data["slots"]
    elif isinstance(data, list):
        slots = data
    else:
        return []

    parsed = []
    for slot in slots:
        if isinstance(slot, dict) and slot.get("slotname"):
            parsed.append(SlotRequest(
                slotname=slot["slotname"],
                parameters=slot.get("parameters") or {},
            ))
    return parsed


def collect_slot_names(payloads: Iterable[Any]) -> List[str]:
    names: List[str] = []
    for payload in payloads:
        names.extend(slot.slot_name for slot in extract_slots(payload))
    return names


def find_slot(payloads: Iterable[Any], slot_name: str) -> Optional[BannerSlot]:
    for payload in payloads:
        for slot in extract_slots(payload):
            if slot.slot_name == slot_name:
                return slot
    return None


class BannerTrafficRecorder:
    """Records banner API responses and ad slot requests for one page."""

    def __init__(self, page: Page):
        self.page = page
        self.banner_payloads: List[Any] = []
        self.json_payloads: List[Any] = []
        self.ad_payloads: List[Any] = []
        self.slot_requests: List[SlotRequest] = []

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def listen_banner_responses(self, require_ok: bool = False) -> "BannerTrafficRecorder":
        def on_response(response: Response) -> None:
            if not is_banner_api_url(response.url):
                return
            if require_ok and response.status != 200:
                return
            try:
                self.banner_payloads.append(response.json())
                logger.info("Banner API response captured: %s", response.url)
            except (ValueError, PlaywrightError):
                logger.debug("Banner API response was not JSON: %s", response.url)

        self.page.on("response", on_response)
        return self

    def listen_slot_requests(self) -> "BannerTrafficRecorder":
        def on_request(request: Request) -> None:
            if not is_ad_request_url(request.url):
                return
            slots = parse_slot_request(request.post_data)
            for slot in slots:
                logger.debug("Ad slot requested: %s", slot.slotname)
            self.slot_requests.extend(slots)

        self.page.on("request", on_request)
        return self

    def intercept_json(self) -> "BannerTrafficRecorder":
        """Route ``**/json`` through the recorder, keeping every parsed body."""
        def handle(route: Route) -> None:
            response = route.fetch()
            try:
                self.json_payloads.append(response.json())
                logger.info("Intercepted /json call: %s", route.request.url)
            except (ValueError, PlaywrightError):
                logger.debug("Intercepted /json body was not JSON: %s", route.request.url)
            route.fulfill(response=response)

        self.page.route("**/json", handle)
        return self

    def intercept_ads(self) -> "BannerTrafficRecorder":
        def handle(route: Route) -> None:
            response = route.fetch()
            try:
                payload = json.loads(response.text())
            except (ValueError, PlaywrightError):
                payload = None
            if isinstance(payload, list):
                self.ad_payloads.append(payload)
                for slot in extract_slots(payload):
                    logger.info("Captured ad slot: %s", slot.slot_name)
            route.fulfill(response=response)

        self.page.route("**/ads/**", handle)
        return self

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def latest_banner_payload(self) -> Any:
        return self.banner_payloads[-1] if self.banner_payloads else None

    def slot_names(self) -> List[str]:
        return collect_slot_names(self.banner_payloads + self.json_payloads + self.ad_payloads)

    def requested_slot_names(self) -> List[str]:
        return [slot.slotname for slot in self.slot_requests]

    def saw_slot_containing(self, text: str) -> bool:
        names = self.slot_names() + self.requested_slot_names()
        return any(text in name for name in names)
