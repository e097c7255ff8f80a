from __future__ import annotations

from flask import Blueprint, jsonify, request, g

from ..decorators import require_unlocked
from ..engine import get_engine
from ..services.settings_service import SettingsValidationError, LockError


settings_bp = Blueprint("settings", __name__, url_prefix="/api")


def _json_error(exc: Exception):
    if isinstance(exc, SettingsValidationError):
        return jsonify({"error": str(exc)}), 400
    if isinstance(exc, LockError):
        return jsonify({"error": str(exc), "reloaded": True}), 403
    return jsonify({"error": "Internal server error"}), 500


@settings_bp.get("/settings")
@require_unlocked
def get_settings():
    settings = dict(g.engine.state["settings"])
    # The passcode never leaves the server
    settings.pop("pass", None)
    return jsonify({"settings": settings, "locked": g.engine.state["locked"]})


@settings_bp.patch("/settings")
@require_unlocked
def patch_settings():
    data = request.get_json(silent=True) or {}
    try:
        settings = g.engine.update_settings(theme=data.get("theme"), font=data.get("font"))
    except SettingsValidationError as exc:
        return _json_error(exc)
    return jsonify({"settings": {k: v for k, v in settings.items() if k != "pass"}})


@settings_bp.post("/lock")
@require_unlocked
def set_lock():
    """Set a passcode (locks future sessions) or clear it with an empty passcode."""
    data = request.get_json(silent=True) or {}
    try:
        locked = g.engine.set_lock(data.get("passcode"))
    except SettingsValidationError as exc:
        return _json_error(exc)
    return jsonify({"locked": locked})


@settings_bp.post("/unlock")
def unlock():
    data = request.get_json(silent=True) or {}
    engine = get_engine()
    try:
        engine.unlock(data.get("passcode"))
    except LockError as exc:
        return _json_error(exc)
    return jsonify({"locked": engine.session_locked})
