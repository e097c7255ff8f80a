# backend/estate/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/estate.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///estate.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Directory holding the legacy single-blob export; defaults to the instance path
    LEGACY_STORAGE_DIR = os.environ.get("LEGACY_STORAGE_DIR")

    HISTORY_LIMIT = int(os.environ.get("HISTORY_LIMIT", "50"))

    # Run the bootstrap sequence inside create_app()
    ESTATE_AUTO_BOOTSTRAP = _env_bool("ESTATE_AUTO_BOOTSTRAP", True)
