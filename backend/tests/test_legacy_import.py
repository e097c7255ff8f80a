import json

import pytest

from estate.catalog import DATA_COLLECTIONS
from estate.services.legacy_import import (
    LEGACY_KEY,
    load_legacy_state,
    read_legacy_blob,
)


@pytest.mark.parametrize("blob", [None, "", "{}", "not json {", "null", "[1, 2]", "42"])
def test_unusable_blob_yields_none(blob):
    assert load_legacy_state(blob) is None


def test_customer_backfill():
    state = load_legacy_state(json.dumps({"customers": [{"id": "C-1", "name": "Ali"}]}))

    assert state["customers"] == [{
        "id": "C-1",
        "name": "Ali",
        "nationalId": "",
        "address": "",
        "status": "active",
        "notes": "",
    }]


def test_existing_customer_fields_are_kept():
    state = load_legacy_state(json.dumps({"customers": [
        {"id": "C-1", "name": "Ali", "status": "inactive", "notes": "vip"},
    ]}))

    assert state["customers"][0]["status"] == "inactive"
    assert state["customers"][0]["notes"] == "vip"


def test_every_collection_present_with_synthesized_safe():
    state = load_legacy_state(json.dumps({"customers": [{"id": "C-1", "name": "Ali"}]}))

    for name in DATA_COLLECTIONS:
        assert isinstance(state[name], list), name
    assert len(state["safes"]) == 1
    assert state["safes"][0]["balance"] == 0
    assert state["safes"][0]["id"].startswith("S-")
    assert state["settings"]["theme"] == "dark"
    assert state["locked"] is False


def test_unit_price_taken_from_first_plan():
    state = load_legacy_state(json.dumps({"units": [
        {"id": "U-1", "code": "A-1", "plans": [{"price": 900000}, {"price": 950000}]},
        {"id": "U-2", "code": "A-2"},
        {"id": "U-3", "code": "A-3", "totalPrice": 500000, "plans": []},
    ]}))
    u1, u2, u3 = state["units"]

    assert u1["totalPrice"] == 900000
    assert "plans" not in u1
    assert u2["totalPrice"] == 0
    assert u2["unitType"] == "residential"
    assert u2["area"] == "" and u2["notes"] == ""
    assert u3["totalPrice"] == 500000
    assert "plans" not in u3


def test_contract_backfill_drops_plan_name():
    state = load_legacy_state(json.dumps({"contracts": [
        {"id": "CT-1", "unitId": "U-1", "customerId": "C-1", "planName": "cash"},
    ]}))
    contract = state["contracts"][0]

    assert contract["brokerName"] == ""
    assert contract["commissionSafeId"] is None
    assert contract["discountAmount"] == 0
    assert "planName" not in contract


def test_existing_safes_get_zero_balance():
    state = load_legacy_state(json.dumps({"safes": [{"id": "S-1", "name": "Cash"}]}))

    assert state["safes"] == [{"id": "S-1", "name": "Cash", "balance": 0}]


def _legacy_with_payments():
    return {
        "customers": [{"id": "C-1", "name": "Ali"}],
        "units": [{"id": "U-1", "code": "A-101"}],
        "contracts": [
            {"id": "CT-1", "unitId": "U-1", "customerId": "C-1", "start": "2023-01-01",
             "brokerName": "Samir", "brokerAmount": 5000, "commissionSafeId": "S-1"},
        ],
        "safes": [{"id": "S-1", "name": "Cash", "balance": 0}],
        "payments": [
            {"unitId": "U-1", "amount": 10000, "date": "2023-02-01", "safeId": "S-1"},
            {"unitId": "U-404", "amount": 700, "date": "2023-03-01", "safeId": "S-1"},
        ],
    }


def test_payments_become_vouchers():
    state = load_legacy_state(json.dumps(_legacy_with_payments()))
    receipts = [v for v in state["vouchers"] if v["type"] == "receipt"]
    commissions = [v for v in state["vouchers"] if v["type"] == "payment"]

    assert len(receipts) == 2
    assert receipts[0]["payer"] == "Ali"
    assert receipts[0]["amount"] == 10000
    assert receipts[0]["linked_ref"] == "U-1"
    assert "A-101" in receipts[0]["description"]

    # Unresolvable unit degrades to placeholders
    assert "unknown unit" in receipts[1]["description"]
    assert receipts[1]["payer"] == "unspecified"

    assert len(commissions) == 1
    assert commissions[0]["beneficiary"] == "Samir"
    assert commissions[0]["safeId"] == "S-1"
    assert commissions[0]["date"] == "2023-01-01"
    assert commissions[0]["linked_ref"] == "CT-1"


def test_second_import_does_not_duplicate_vouchers():
    first = load_legacy_state(json.dumps(_legacy_with_payments()))
    second = load_legacy_state(json.dumps(first))

    assert len(second["vouchers"]) == len(first["vouchers"]) == 3
    assert [v["id"] for v in second["vouchers"]] == [v["id"] for v in first["vouchers"]]


def test_existing_vouchers_block_payment_backfill():
    legacy = _legacy_with_payments()
    legacy["vouchers"] = [{"id": "V-1", "type": "receipt", "amount": 1}]
    state = load_legacy_state(json.dumps(legacy))

    assert state["vouchers"] == [{"id": "V-1", "type": "receipt", "amount": 1}]


def test_broker_roster_is_deduplicated():
    state = load_legacy_state(json.dumps({
        "contracts": [
            {"id": "CT-1", "brokerName": "Samir"},
            {"id": "CT-2", "brokerName": "Samir"},
            {"id": "CT-3", "brokerName": ""},
        ],
        "brokerDues": [{"id": "BD-1", "brokerName": "Mona"}],
    }))

    assert [b["name"] for b in state["brokers"]] == ["Samir", "Mona"]
    assert all(b["id"].startswith("B-") and b["phone"] == "" for b in state["brokers"])


def test_existing_brokers_are_not_repopulated():
    state = load_legacy_state(json.dumps({
        "brokers": [{"id": "B-1", "name": "Samir"}],
        "contracts": [{"id": "CT-1", "brokerName": "Mona"}],
    }))

    assert state["brokers"] == [{"id": "B-1", "name": "Samir"}]


def test_malformed_shape_yields_none():
    assert load_legacy_state(json.dumps({"customers": ["not a record"]})) is None


def test_read_legacy_blob(tmp_path):
    assert read_legacy_blob(str(tmp_path)) is None
    assert read_legacy_blob(None) is None

    (tmp_path / f"{LEGACY_KEY}.json").write_text('{"customers": []}', encoding="utf-8")
    assert read_legacy_blob(str(tmp_path)) == '{"customers": []}'


def test_broker_amount_stored_as_text_still_migrates():
    legacy = _legacy_with_payments()
    legacy["contracts"][0]["brokerAmount"] = "5000"
    legacy["contracts"].append({"id": "CT-2", "unitId": "U-1", "customerId": "C-1",
                                "brokerAmount": "n/a"})

    state = load_legacy_state(json.dumps(legacy))

    assert state is not None
    assert [c["id"] for c in state["customers"]] == ["C-1"]
    commissions = [v for v in state["vouchers"] if v["type"] == "payment"]
    assert len(commissions) == 1
    assert commissions[0]["amount"] == "5000"
    assert commissions[0]["linked_ref"] == "CT-1"
