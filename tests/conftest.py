import os
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so 'app', 'config', and 'melodix' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from tests.support import factories as test_factories
from tests.support import stubs as test_stubs


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path_factory):
    """Ensure a clean env for tests with per-test sqlite files."""
    db_dir = tmp_path_factory.mktemp("db")
    db_path = Path(db_dir) / "test.sqlite"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path.as_posix()}")
    monkeypatch.setenv("SPOTIPY_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("SPOTIPY_CLIENT_SECRET", "test-client-secret")
    monkeypatch.delenv("OTEL_EXPORTER_OTLP_ENDPOINT", raising=False)
    monkeypatch.delenv("APP_ENV", raising=False)
    yield db_path


@pytest.fixture
def recognizer_stub():
    return test_stubs.ShazamStub()


@pytest.fixture
def catalog_stub():
    return test_stubs.CatalogStub()


@pytest.fixture
def events_stub():
    return test_stubs.TicketmasterStub()


@pytest.fixture
def app(_isolate_env, recognizer_stub, catalog_stub, events_stub):
    import app as app_module

    application = app_module.create_app(
        config_overrides={
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{_isolate_env.as_posix()}",
        },
        settings_overrides={
            "featured_playlist_names": ["BEST HITS 2025"],
            "top_songs_limit": 4,
        },
    )
    test_stubs.install_stub_services(
        application,
        recognizer=recognizer_stub,
        catalog=catalog_stub,
        events=events_stub,
    )
    yield application


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture
def db_session(app_context):
    from melodix.database.db_manager import db

    test_factories.set_session(db.session)
    try:
        yield db.session
    finally:
        db.session.rollback()
        db.session.remove()
        test_factories.reset_session()


@pytest.fixture
def factories(db_session):
    yield test_factories


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def seed(app):
    """Build rows in a short-lived app context and commit them.

    ``build`` receives the factories module and should return plain values
    (ids, strings); ORM instances are detached once the context closes.
    """
    from melodix.database.db_manager import db

    def _seed(build):
        with app.app_context():
            test_factories.set_session(db.session)
            try:
                result = build(test_factories)
                db.session.commit()
                return result
            finally:
                test_factories.reset_session()

    return _seed


@pytest.fixture
def device_headers(client):
    """Register a device through the API and return its request headers."""
    resp = client.post("/users", json={"device_id": "device-owner"})
    assert resp.status_code == 201
    return {"x-device-id": "device-owner"}
