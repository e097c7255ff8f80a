# backend/estate/__init__.py
from __future__ import annotations

from flask import Flask, jsonify, request

from .config import Config
from .extensions import db, migrate
from .engine import EstateEngine, EXTENSION_KEY
from .services.bootstrap_service import BootstrapError


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    engine = EstateEngine(
        legacy_dir=app.config.get("LEGACY_STORAGE_DIR") or app.instance_path,
        history_limit=app.config["HISTORY_LIMIT"],
    )
    app.extensions[EXTENSION_KEY] = engine

    # Register blueprints
    from .routes.system import system_bp
    from .routes.state import state_bp
    from .routes.settings import settings_bp
    from .routes.backup import backup_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(state_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(backup_bp)

    @app.before_request
    def fatal_error_view():
        # A failed bootstrap blocks every view except the health probe
        if engine.fatal_error and request.endpoint != "system.health":
            return jsonify({
                "error": "The application could not be loaded. The local database may be damaged.",
                "detail": engine.fatal_error,
            }), 503
        return None

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    if app.config.get("ESTATE_AUTO_BOOTSTRAP", True):
        with app.app_context():
            try:
                engine.bootstrap()
            except BootstrapError:
                app.logger.error("Bootstrap failed; serving the fatal error view")

    return app
