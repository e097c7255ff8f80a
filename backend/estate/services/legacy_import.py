# Overview: One-time import of the legacy single-blob state into the collection layout.

"""
Legacy Flat-File Importer

The previous release kept the whole state tree as one JSON blob under the
key ``estate_pro_final_v3``. This module reads that blob once and reshapes
it into the current collection layout, backfilling fields that older
releases did not write and synthesizing collections they did not have.

BEST EFFORT: load_legacy_state() never raises. Anything unreadable maps to
None and the caller falls back to the record store.
"""

from __future__ import annotations

import json
import logging
import os

from ..catalog import DATA_COLLECTIONS, MAIN_SAFE_NAME, default_settings
from .identifier_service import uid, PREFIX_BROKER, PREFIX_SAFE, PREFIX_VOUCHER


logger = logging.getLogger(__name__)

LEGACY_KEY = "estate_pro_final_v3"

STATUS_ACTIVE = "active"
UNIT_TYPE_RESIDENTIAL = "residential"
UNKNOWN_UNIT = "unknown unit"
UNKNOWN_PAYER = "unspecified"
DEFAULT_BENEFICIARY = "broker"

VOUCHER_RECEIPT = "receipt"
VOUCHER_PAYMENT = "payment"


def read_legacy_blob(directory: str | None, key: str = LEGACY_KEY) -> str | None:
    """Raw legacy blob stored as <directory>/<key>.json, or None when absent."""
    if not directory:
        return None
    path = os.path.join(directory, f"{key}.json")
    if not os.path.isfile(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return fh.read()
    except OSError as exc:
        logger.warning("Legacy blob %s unreadable: %s", path, exc)
        return None


def main_safe() -> dict:
    return {"id": uid(PREFIX_SAFE), "name": MAIN_SAFE_NAME, "balance": 0}


def _list(source: dict, name: str) -> list:
    value = source.get(name)
    return value if isinstance(value, list) else []


def _number(value) -> float:
    """Numeric value of a legacy amount that may be stored as text; 0 when unusable."""
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0


def _backfill_customers(customers: list) -> None:
    for customer in customers:
        customer["nationalId"] = customer.get("nationalId") or ""
        customer["address"] = customer.get("address") or ""
        customer["status"] = customer.get("status") or STATUS_ACTIVE
        customer["notes"] = customer.get("notes") or ""


def _normalize_units(units: list) -> None:
    for unit in units:
        unit["area"] = unit.get("area") or ""
        unit["notes"] = unit.get("notes") or ""
        unit["unitType"] = unit.get("unitType") or UNIT_TYPE_RESIDENTIAL
        plans = unit.get("plans")
        if plans:
            unit["totalPrice"] = plans[0].get("price")
        elif "totalPrice" not in unit:
            unit["totalPrice"] = 0
        unit.pop("plans", None)


def _backfill_contracts(contracts: list) -> None:
    for contract in contracts:
        contract["brokerName"] = contract.get("brokerName") or ""
        contract["commissionSafeId"] = contract.get("commissionSafeId") or None
        contract["discountAmount"] = contract.get("discountAmount") or 0
        contract.pop("planName", None)


def _backfill_safes(safes: list) -> None:
    if not safes:
        safes.append(main_safe())
        return
    for safe in safes:
        safe["balance"] = safe.get("balance") or 0


def _vouchers_from_payments(source: dict) -> list[dict]:
    units = {u.get("id"): u for u in _list(source, "units")}
    customers = {c.get("id"): c for c in _list(source, "customers")}
    contracts = _list(source, "contracts")

    vouchers = []
    for payment in _list(source, "payments"):
        unit = units.get(payment.get("unitId"))
        contract = next((c for c in contracts if c.get("unitId") == payment.get("unitId")), None)
        customer = customers.get(contract.get("customerId")) if contract else None
        vouchers.append({
            "id": uid(PREFIX_VOUCHER),
            "type": VOUCHER_RECEIPT,
            "date": payment.get("date"),
            "amount": payment.get("amount"),
            "safeId": payment.get("safeId"),
            "description": f"Payment for unit {unit.get('code') if unit else UNKNOWN_UNIT}",
            "payer": customer.get("name") if customer else UNKNOWN_PAYER,
            "linked_ref": payment.get("unitId"),
        })

    for contract in contracts:
        if _number(contract.get("brokerAmount")) > 0:
            unit = units.get(contract.get("unitId"))
            vouchers.append({
                "id": uid(PREFIX_VOUCHER),
                "type": VOUCHER_PAYMENT,
                "date": contract.get("start"),
                "amount": contract.get("brokerAmount"),
                "safeId": contract.get("commissionSafeId"),
                "description": f"Broker commission for unit {unit.get('code') if unit else UNKNOWN_UNIT}",
                "beneficiary": contract.get("brokerName") or DEFAULT_BENEFICIARY,
                "linked_ref": contract.get("id"),
            })
    return vouchers


def _brokers_from_names(source: dict) -> list[dict]:
    names = [c.get("brokerName") for c in _list(source, "contracts")]
    names += [d.get("brokerName") for d in _list(source, "brokerDues")]
    seen = []
    for name in names:
        if name and name not in seen:
            seen.append(name)
    return [{"id": uid(PREFIX_BROKER), "name": name, "phone": "", "notes": ""} for name in seen]


def _default_state() -> dict:
    state = {name: [] for name in DATA_COLLECTIONS}
    state["payments"] = []
    state["settings"] = default_settings()
    state["locked"] = False
    return state


def migrate_legacy_state(source: dict) -> dict:
    """Apply every legacy backfill to a parsed blob and return the full tree."""
    if source.get("customers"):
        _backfill_customers(source["customers"])
    if source.get("units"):
        _normalize_units(source["units"])
    if source.get("contracts"):
        _backfill_contracts(source["contracts"])

    source["safes"] = source.get("safes") or []
    _backfill_safes(source["safes"])

    source["auditLog"] = source.get("auditLog") or []
    source["vouchers"] = source.get("vouchers") or []

    if _list(source, "payments") and not source["vouchers"]:
        logger.info("Migrating legacy payments to vouchers")
        source["vouchers"].extend(_vouchers_from_payments(source))

    source["brokerDues"] = source.get("brokerDues") or []
    source["brokers"] = source.get("brokers") or []
    source["partnerGroups"] = source.get("partnerGroups") or []

    if not source["brokers"]:
        brokers = _brokers_from_names(source)
        if brokers:
            logger.info("Populating broker roster from %d legacy broker names", len(brokers))
            source["brokers"].extend(brokers)

    state = _default_state()
    state.update(source)
    return state


def load_legacy_state(blob: str | None) -> dict | None:
    """
    Parse and migrate a legacy blob.

    Returns None for a missing blob, invalid JSON, a non-object document or
    an empty object. Never raises.
    """
    if not blob:
        return None
    try:
        source = json.loads(blob) or {}
        if not isinstance(source, dict) or not source:
            return None
        return migrate_legacy_state(source)
    except Exception as exc:
        logger.warning("Legacy state could not be imported: %s", exc)
        return None
