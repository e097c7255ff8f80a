# Overview: Key-value flags stored in the keyval collection of the record store.

from __future__ import annotations

from typing import Any

from ..catalog import KEYVAL_COLLECTION
from . import record_store


def get_value(key: str) -> Any:
    """Stored value for key, or None when the key was never set."""
    record = record_store.get_record(KEYVAL_COLLECTION, key)
    if record is None:
        return None
    return record.get("value")


def set_value(key: str, value: Any) -> None:
    record_store.put_record(KEYVAL_COLLECTION, {"key": key, "value": value})
