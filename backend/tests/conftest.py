"""
Pytest fixtures for the estate backend tests.

Each test gets its own SQLite file under tmp_path so that a second app built
on the same path behaves like a fresh process reopening the same store.
"""

import json

import pytest
from estate import create_app
from estate.extensions import db
from estate.engine import EXTENSION_KEY
from estate.services.legacy_import import LEGACY_KEY


@pytest.fixture(scope='function')
def make_app(tmp_path):
    """Factory for apps sharing this test's database and legacy directory."""
    def _make(**overrides):
        config = {
            'TESTING': True,
            'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'estate.sqlite3'}",
            'SQLALCHEMY_TRACK_MODIFICATIONS': False,
            'LEGACY_STORAGE_DIR': str(tmp_path / 'legacy'),
            'ESTATE_AUTO_BOOTSTRAP': False,
        }
        config.update(overrides)
        return create_app(config)
    return _make


@pytest.fixture(scope='function')
def app(make_app):
    """Application with an open app context and an empty store."""
    app = make_app()
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()


@pytest.fixture(scope='function')
def engine(app):
    """Bootstrapped engine of the app fixture."""
    engine = app.extensions[EXTENSION_KEY]
    engine.bootstrap()
    return engine


@pytest.fixture(scope='function')
def client(app, engine):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def write_legacy(tmp_path):
    """Write a legacy blob (dict or raw text) where bootstrap looks for it."""
    def _write(payload):
        legacy_dir = tmp_path / 'legacy'
        legacy_dir.mkdir(exist_ok=True)
        text = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
        (legacy_dir / f"{LEGACY_KEY}.json").write_text(text, encoding='utf-8')
    return _write


@pytest.fixture(scope='function')
def reopen(app, make_app):
    """Bootstrap another app on the same store, like a process restart."""
    contexts = []

    def _reopen(**overrides):
        app = make_app(**overrides)
        ctx = app.app_context()
        ctx.push()
        contexts.append(ctx)
        engine = app.extensions[EXTENSION_KEY]
        engine.bootstrap()
        return engine

    yield _reopen

    for ctx in reversed(contexts):
        db.session.remove()
        ctx.pop()
