# Overview: Audit log entries appended to the state tree.

from __future__ import annotations

from typing import Any

from ..time_utils import utcnow, to_utc_z
from .identifier_service import uid, PREFIX_LOG


def log_action(state: dict, description: str, details: dict[str, Any] | None = None) -> dict:
    """
    Append an audit entry to state["auditLog"].

    The entry becomes durable with the next persist, like any other mutation.
    """
    if not isinstance(state.get("auditLog"), list):
        state["auditLog"] = []
    entry = {
        "id": uid(PREFIX_LOG),
        "timestamp": to_utc_z(utcnow()),
        "description": description,
        "details": details or {},
    }
    state["auditLog"].append(entry)
    return entry
