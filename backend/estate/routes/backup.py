# Overview: Flask API routes for JSON backup, restore and reset.

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_unlocked
from ..services import backup_service
from ..services.backup_service import BackupError
from ..time_utils import today


backup_bp = Blueprint("backup", __name__, url_prefix="/api/backup")


@backup_bp.get("")
@require_unlocked
def export_backup_route():
    snapshot = g.engine.snapshot()
    response = jsonify(backup_service.export_backup(snapshot["state"]))
    response.headers["Content-Disposition"] = f'attachment; filename="estate-backup-{today()}.json"'
    return response


@backup_bp.post("/restore")
@require_unlocked
def restore_backup_route():
    """
    Replace all data with a backup.

    Accepts an export envelope or a bare state tree. Undo brings the
    previous data back.
    """
    payload = request.get_json(silent=True)
    if payload is None:
        payload = request.get_data(as_text=True)
    try:
        state = backup_service.restore_backup(g.engine, payload)
    except BackupError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to restore backup")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({
        "restored": backup_service.total_records(state),
        "history": g.engine.history.summary(),
    })


@backup_bp.post("/reset")
@require_unlocked
def reset_route():
    if not (request.get_json(silent=True) or {}).get("confirm"):
        return jsonify({"error": "confirm required"}), 400
    try:
        backup_service.reset_all(g.engine)
    except Exception:
        current_app.logger.exception("Failed to reset data")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"reset": True, "history": g.engine.history.summary()})
