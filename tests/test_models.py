import json

from data.models import BannerSlot, SlotRequest, TestResult


def test_banner_slot_to_dict():
    raw = {"slotName": "foodlion.com_website_dropdown-flex", "slotID": "42", "adType": "skinny"}
    slot = BannerSlot(slot_name=raw["slotName"], slot_id="42", ad_type="skinny", raw=raw)
    assert slot.to_dict() == {
        "slot_name": "foodlion.com_website_dropdown-flex",
        "slot_id": "42",
        "ad_type": "skinny",
        "raw": raw,
    }


def test_slot_request_to_dict():
    request = SlotRequest(slotname="foodlion_website_home_large_tile_1-flex", parameters={"xt": "1"})
    assert request.to_dict() == {
        "slotname": "foodlion_website_home_large_tile_1-flex",
        "parameters": {"xt": "1"},
    }


def test_result_details_serialize_slot_records():
    slot = BannerSlot(slot_name="a", raw={"slotName": "a"})
    result = TestResult("Dropdown Slot API", True, 10, "ok", details=slot, opco="foodlion")
    data = result.to_dict()
    assert data["details"]["slot_name"] == "a"
    json.dumps(data)
