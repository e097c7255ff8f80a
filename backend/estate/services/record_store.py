# Overview: Service-layer operations for the record store; named collections of keyed JSON records.

"""
Record Store - durable named collections

Each collection in ``OBJECT_STORES`` holds records keyed by ``id`` (``key``
for settings/keyval). Records are opaque JSON documents: a put with an
existing key overwrites the stored document in full, never merges.

FAILURES: storage-engine errors are rolled back and re-raised as
RecordStoreError. Callers decide whether that is fatal (bootstrap) or
logged-and-ignored (persist).
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import StoredRecord
from ..catalog import OBJECT_STORES, SCHEMA_VERSION, SCHEMA_VERSION_KEY, KEYVAL_COLLECTION, key_field


logger = logging.getLogger(__name__)


class RecordStoreError(RuntimeError):
    """Raised when the backing storage engine fails."""


class UnknownCollectionError(RecordStoreError):
    """Raised for a collection name outside the fixed catalog."""


def _check_collection(collection: str) -> None:
    if collection not in OBJECT_STORES:
        raise UnknownCollectionError(f"Unknown collection: {collection}")


def _record_key(collection: str, record: Any) -> str:
    field = key_field(collection)
    if not isinstance(record, dict) or record.get(field) in (None, ""):
        raise RecordStoreError(f"Record for {collection} has no '{field}'")
    return str(record[field])


def _fail(action: str, exc: Exception):
    db.session.rollback()
    logger.error("Record store %s failed: %s", action, exc)
    raise RecordStoreError(f"Record store {action} failed: {exc}") from exc


def open_store() -> None:
    """
    Open the store, creating any missing collection tables.

    Tables are the upgrade hook only: record shapes are never migrated here.
    The declared schema version is stamped into the keyval collection.
    """
    try:
        db.create_all()
        stamped = get_record(KEYVAL_COLLECTION, SCHEMA_VERSION_KEY)
        if not stamped or stamped.get("value") != SCHEMA_VERSION:
            put_record(KEYVAL_COLLECTION, {"key": SCHEMA_VERSION_KEY, "value": SCHEMA_VERSION})
            logger.info("Record store schema stamped at version %s", SCHEMA_VERSION)
    except SQLAlchemyError as exc:
        _fail("open", exc)


def get_all_records(collection: str) -> list[dict]:
    _check_collection(collection)
    try:
        rows = (
            db.session.query(StoredRecord)
            .filter_by(collection=collection)
            .order_by(StoredRecord.seq.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        _fail(f"read of {collection}", exc)
    return [row.to_dict() for row in rows]


def get_record(collection: str, key: str) -> dict | None:
    _check_collection(collection)
    try:
        row = db.session.get(StoredRecord, (collection, str(key)))
    except SQLAlchemyError as exc:
        _fail(f"read of {collection}/{key}", exc)
    return row.to_dict() if row else None


def count_records(collection: str) -> int:
    _check_collection(collection)
    try:
        return db.session.query(StoredRecord).filter_by(collection=collection).count()
    except SQLAlchemyError as exc:
        _fail(f"count of {collection}", exc)


def put_record(collection: str, record: dict, *, commit: bool = True) -> None:
    """Insert, or overwrite in full the record with the same key."""
    _check_collection(collection)
    key = _record_key(collection, record)
    data = copy.deepcopy(record)
    try:
        row = db.session.get(StoredRecord, (collection, key))
        if row is None:
            next_seq = (
                db.session.query(func.max(StoredRecord.seq))
                .filter(StoredRecord.collection == collection)
                .scalar()
            )
            db.session.add(StoredRecord(
                collection=collection,
                record_key=key,
                seq=(next_seq or 0) + 1,
                data=data,
            ))
        else:
            row.data = data
        if commit:
            db.session.commit()
        else:
            db.session.flush()
    except SQLAlchemyError as exc:
        _fail(f"put into {collection}", exc)


def clear_collection(collection: str, *, commit: bool = True) -> int:
    """Remove every record of the collection; returns how many were removed."""
    _check_collection(collection)
    try:
        deleted = (
            db.session.query(StoredRecord)
            .filter_by(collection=collection)
            .delete()
        )
        if commit:
            db.session.commit()
        else:
            db.session.flush()
    except SQLAlchemyError as exc:
        _fail(f"clear of {collection}", exc)
    return deleted
