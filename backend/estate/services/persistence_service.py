# Overview: State synchronizer; mirrors the in-memory state tree into the record store.

"""
State Synchronizer

persist() makes the whole tree durable with a clear-and-rewrite of every
collection. It is O(total records) per call; there is no diffing.

TRANSACTION: all clears and writes share one database transaction and are
committed once. A failure rolls the transaction back, is logged, and leaves
the in-memory tree authoritative until the next successful persist.

SINGLE WRITER: overlapping persists are not supported. Callers serialize
(the engine holds a lock around every mutation).
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..catalog import (
    OBJECT_STORES,
    SETTINGS_COLLECTION,
    KEYVAL_COLLECTION,
    SETTINGS_RECORD_KEY,
    default_settings,
)
from . import record_store
from .record_store import RecordStoreError


logger = logging.getLogger(__name__)


def _persistable(item) -> bool:
    return isinstance(item, dict) and bool(item.get("id"))


def persist(state: dict, on_applied: Optional[Callable[[dict], None]] = None) -> bool:
    """
    Write every collection of state to the record store.

    Elements without an id (or that are not objects) are skipped. Returns
    True on success; failures are logged and reported as False.
    """
    written = 0
    try:
        for name in OBJECT_STORES:
            if name == KEYVAL_COLLECTION:
                continue
            record_store.clear_collection(name, commit=False)

            data = state.get(name)
            if name == SETTINGS_COLLECTION:
                if isinstance(data, dict):
                    record_store.put_record(
                        name, {**data, "key": SETTINGS_RECORD_KEY, "locked": bool(state.get("locked"))}, commit=False
                    )
                    written += 1
            elif isinstance(data, list):
                for item in data:
                    if _persistable(item):
                        record_store.put_record(name, item, commit=False)
                        written += 1
        db.session.commit()
    except (RecordStoreError, SQLAlchemyError):
        db.session.rollback()
        logger.exception("Failed to persist state to the record store")
        return False

    logger.debug("Persisted %d records", written)
    if on_applied is not None:
        on_applied(state.get(SETTINGS_COLLECTION) or {})
    return True


def load_state_from_store() -> dict:
    """
    Build a tree from the record store.

    Settings collapse from their single record, which also carries the
    lock flag; an empty settings collection yields the defaults.
    """
    state: dict = {}
    for name in OBJECT_STORES:
        if name == KEYVAL_COLLECTION:
            continue
        records = record_store.get_all_records(name)
        if name == SETTINGS_COLLECTION:
            if records:
                settings = dict(records[0])
                settings.pop("key", None)
                state["locked"] = bool(settings.pop("locked", False))
                state[name] = settings
            else:
                state[name] = default_settings()
        else:
            state[name] = records
    return state
