"""Validation rules for Gambit/ADUSA banner placements.

Pure functions over captured payloads and scraped text, so the browser
checks only collect evidence and these decide pass/fail. Each validator
returns ``(passed, message)``.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Sequence, Tuple

from ingestion.banner_traffic import extract_slots

MIN_SMALL_TILES = 5
EXPECTED_SPONSORED_SMALL_TILE_POSITIONS = (2, 5)

SPONSORED_MARKER = "Sponsored"
LARGE_TILE_MARKER = "large_tile"
DROPDOWN_MARKER = "dropdown-flex"

Verdict = Tuple[bool, str]


def dropdown_slot_name(opco: str) -> str:
    return f"{opco}.com_website_dropdown-flex"


def search_slot_names(opco: str) -> List[str]:
    return [f"{opco}.com_website_search_1-flex", f"{opco}.com_website_search_2-flex"]


def small_tile_slot_names(opco: str) -> List[str]:
    return [f"{opco}_website_home_small_tile_1-flex", f"{opco}_website_home_small_tile_2-flex"]


def large_tile_slot_name(opco: str) -> str:
    return f"{opco}_website_home_large_tile_1-flex"


def is_sponsored_text(text: str) -> bool:
    return SPONSORED_MARKER in (text or "")


def validate_dropdown_slot(payloads: Sequence[Any], expected_slot_name: str) -> Verdict:
    """The last banner API response must carry a dropdown slot named for this OPCO.

    Only the most recent response counts, since each one replaces the
    dropdown contents. The slot needs a ``slotID`` and an ``adType`` key;
    their values are not checked.
    """
    if not payloads:
        return False, "No banner API response captured"
    latest = payloads[-1]
    if not isinstance(latest, list):
        return False, "Banner API response is not an array"
    if not latest:
        return False, "Banner API returned an empty array"

    for slot in extract_slots(latest):
        if DROPDOWN_MARKER not in slot.slot_name:
            continue
        if slot.slot_name != expected_slot_name:
            return False, f"Dropdown slot name '{slot.slot_name}' != expected '{expected_slot_name}'"
        if not slot.has_slot_id:
            return False, f"Slot '{slot.slot_name}' has no slotID"
        if not slot.has_ad_type:
            return False, f"Slot '{slot.slot_name}' has no adType"
        return True, f"Found slot '{slot.slot_name}' (slotID={slot.slot_id}, adType={slot.ad_type})"

    return False, f"No slot containing '{DROPDOWN_MARKER}' in banner API response"


def validate_search_slots(slot_names: Iterable[str], opco: str) -> Verdict:
    seen = set(slot_names)
    found = [name for name in search_slot_names(opco) if name in seen]
    if not found:
        return False, f"No search banner slots requested for {opco}"
    return True, f"Search banner slots requested: {', '.join(found)}"


def validate_small_tile_positions(sponsored_positions: Sequence[int]) -> Verdict:
    """Sponsored small tiles must sit at positions 2 and 5, and nowhere else."""
    expected = list(EXPECTED_SPONSORED_SMALL_TILE_POSITIONS)
    actual = sorted(sponsored_positions)
    if actual != expected:
        return False, f"Sponsored small tiles at positions {actual}, expected {expected}"
    return True, f"Sponsored small tiles at positions {actual}"


def validate_large_tiles(tile_count: int, request_detected: bool, sponsored_texts: Sequence[str]) -> Verdict:
    if not request_detected:
        return False, f"No {LARGE_TILE_MARKER} slot seen in ad traffic"
    unlabeled = [text for text in sponsored_texts if not is_sponsored_text(text)]
    if unlabeled:
        return False, f"{len(unlabeled)} sponsored large tile(s) missing the '{SPONSORED_MARKER}' label"
    return True, f"Large tile slot requested; {tile_count} tile(s), {len(sponsored_texts)} sponsored"
