# Overview: Flask API routes for the state tree; record mutations and undo/redo.

# backend/estate/routes/state.py
"""State tree API routes; every mutation persists and records one undo step"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_unlocked
from ..services.record_store import UnknownCollectionError


state_bp = Blueprint("state", __name__, url_prefix="/api")


def _history_body(changed: bool):
    engine = g.engine
    return {"changed": changed, "history": engine.history.summary(), "view": engine.presentation.to_dict()}


@state_bp.get("/state")
@require_unlocked
def get_state_route():
    return jsonify(g.engine.snapshot())


@state_bp.get("/state/<collection>")
@require_unlocked
def list_collection_route(collection: str):
    try:
        records = g.engine.list_records(collection)
    except UnknownCollectionError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"items": records, "count": len(records)})


@state_bp.get("/state/<collection>/<record_id>")
@require_unlocked
def get_record_route(collection: str, record_id: str):
    try:
        record = g.engine.get_record(collection, record_id)
    except UnknownCollectionError as e:
        return jsonify({"error": str(e)}), 404
    if record is None:
        return jsonify({"error": "Record not found"}), 404
    return jsonify({"record": record})


@state_bp.post("/state/<collection>")
@require_unlocked
def create_record_route(collection: str):
    """
    Append a record; an id is generated when the body has none.

    Body: the record fields, plus optional "description" for the audit log.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "JSON object required"}), 400
    description = data.pop("description", None)
    try:
        record = g.engine.upsert_record(collection, data, description=description)
    except UnknownCollectionError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to create record")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"record": record, "history": g.engine.history.summary()}), 201


@state_bp.put("/state/<collection>/<record_id>")
@require_unlocked
def put_record_route(collection: str, record_id: str):
    """Insert or fully overwrite the record with this id (no merge)."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "JSON object required"}), 400
    description = data.pop("description", None)
    data["id"] = record_id
    try:
        record = g.engine.upsert_record(collection, data, description=description)
    except UnknownCollectionError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to save record")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"record": record, "history": g.engine.history.summary()})


@state_bp.delete("/state/<collection>/<record_id>")
@require_unlocked
def delete_record_route(collection: str, record_id: str):
    description = request.args.get("description")
    try:
        deleted = g.engine.delete_record(collection, record_id, description=description)
    except UnknownCollectionError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete record")
        return jsonify({"error": "Internal server error"}), 500
    if not deleted:
        return jsonify({"error": "Record not found"}), 404
    return jsonify({"deleted": record_id, "history": g.engine.history.summary()})


@state_bp.get("/history")
@require_unlocked
def history_route():
    return jsonify(g.engine.history.summary())


@state_bp.post("/history/undo")
@require_unlocked
def undo_route():
    """Step back one snapshot; a no-op (changed=false) at the oldest snapshot."""
    try:
        changed = g.engine.undo()
    except Exception:
        current_app.logger.exception("Failed to undo")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(_history_body(changed))


@state_bp.post("/history/redo")
@require_unlocked
def redo_route():
    """Step forward one snapshot; a no-op (changed=false) at the newest snapshot."""
    try:
        changed = g.engine.redo()
    except Exception:
        current_app.logger.exception("Failed to redo")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(_history_body(changed))
