# backend/estate/routes/system.py
"""
System health and view endpoints.

/health reports record store connectivity and engine readiness; it stays
reachable when bootstrap failed so that operators can see why.
"""

import time
from flask import Blueprint, jsonify, request

from ..catalog import OBJECT_STORES
from ..engine import get_engine
from ..services import record_store
from ..services.record_store import RecordStoreError

system_bp = Blueprint("system", __name__)


def check_record_store_health() -> dict:
    """
    Count records per collection.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        counts = {name: record_store.count_records(name) for name in OBJECT_STORES}
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "response_time_ms": round(elapsed_ms, 2),
            "collections": counts,
        }
    except RecordStoreError as exc:
        return {"status": "unhealthy", "error": str(exc)}


@system_bp.get("/health")
def health():
    engine = get_engine()
    store = check_record_store_health()
    healthy = engine.ready and store["status"] == "healthy"
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "engine": {
            "ready": engine.ready,
            "fatal_error": engine.fatal_error,
            "history": engine.history.summary(),
        },
        "record_store": store,
    }
    return jsonify(body), 200 if healthy else 503


@system_bp.get("/api/view")
def current_view():
    engine = get_engine()
    return jsonify({**engine.presentation.to_dict(), "locked": engine.session_locked})


@system_bp.post("/api/view")
def navigate():
    data = request.get_json(silent=True) or {}
    view = data.get("view")
    if not view or not isinstance(view, str):
        return jsonify({"error": "view required"}), 400
    engine = get_engine()
    engine.presentation.nav(view, data.get("param"))
    return jsonify(engine.presentation.to_dict())
