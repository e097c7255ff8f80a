# Overview: Request decorators for API routes.

from functools import wraps
from flask import jsonify, g

from .engine import get_engine


def require_unlocked(f):
    """
    Refuse access to the state while the session is locked.

    Sets g.engine for the wrapped view. Returns 423 until POST /api/unlock
    succeeds with the stored passcode.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        engine = get_engine()
        if engine.session_locked:
            return jsonify({"error": "Session is locked", "locked": True}), 423
        g.engine = engine
        return f(*args, **kwargs)

    return decorated_function
