# Overview: Service-layer operations for JSON backup, restore and full reset of the state tree.

from __future__ import annotations

import hashlib
import json
from typing import Any, TYPE_CHECKING

from ..catalog import DATA_COLLECTIONS, SETTINGS_COLLECTION, empty_state
from ..time_utils import utcnow, to_utc_z
from .bootstrap_service import backfill_state
from .history_service import restore_into

if TYPE_CHECKING:
    from ..engine import EstateEngine


BACKUP_VERSION = "2.0.0"


class BackupError(ValueError):
    """Raised for a backup payload that cannot be restored."""


def _canonical(state: dict) -> str:
    return json.dumps(state, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


def checksum(state: dict) -> str:
    return hashlib.sha256(_canonical(state).encode("utf-8")).hexdigest()


def total_records(state: dict) -> int:
    return sum(len(v) for v in state.values() if isinstance(v, list))


def export_backup(state: dict) -> dict:
    return {
        "timestamp": to_utc_z(utcnow()),
        "version": BACKUP_VERSION,
        "totalRecords": total_records(state),
        "checksum": checksum(state),
        "data": state,
    }


def _unwrap(payload: Any) -> dict:
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as exc:
            raise BackupError("Backup is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise BackupError("Backup must be a JSON object")

    # An export envelope carries the tree under "data"
    if isinstance(payload.get("data"), dict) and "version" in payload:
        data = payload["data"]
        expected = payload.get("checksum")
        if expected and checksum(data) != expected:
            raise BackupError("Backup checksum mismatch")
        return data

    if not any(name in payload for name in DATA_COLLECTIONS):
        raise BackupError("Backup holds no known collections")
    return payload


def restore_backup(engine: "EstateEngine", payload: Any) -> dict:
    """Replace the whole tree with a backup; one undo step brings the previous tree back."""
    data = _unwrap(payload)
    with engine.mutation("Restored backup", {"totalRecords": total_records(data)}) as state:
        restore_into(state, data)
        backfill_state(state)
    return state


def reset_all(engine: "EstateEngine") -> dict:
    """Empty every data collection, keeping settings; a fresh main safe is synthesized."""
    with engine.mutation("Cleared all data") as state:
        settings = state.get(SETTINGS_COLLECTION)
        locked = state.get("locked", False)
        restore_into(state, empty_state())
        state[SETTINGS_COLLECTION] = settings
        state["locked"] = locked
        backfill_state(state)
    return state
