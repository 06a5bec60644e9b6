# tests/conftest.py
import datetime as dt

import pytest
from sqlalchemy.pool import StaticPool

from wsbilling import create_app
from wsbilling.extensions import db
from wsbilling.models import APIToken, Bill, Service, Workspace
from wsbilling.services.accounts import register_user


@pytest.fixture
def app():
    """App con SQLite en memoria y un hash rápido para los tests."""
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret-key",
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "SQLALCHEMY_ENGINE_OPTIONS": {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            },
            "PASSWORD_HASH_METHOD": "pbkdf2:sha256:1000",
        }
    )
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


class AuthActions:
    def __init__(self, client):
        self._client = client

    def register(self, username="alice", password="secret123", password_repeat=None):
        return self._client.post(
            "/register",
            data={
                "username": username,
                "password": password,
                "password-repeat": password if password_repeat is None else password_repeat,
            },
        )

    def login(self, username="alice", password="secret123"):
        return self._client.post("/login", data={"username": username, "password": password})

    def logout(self):
        return self._client.get("/logout")


@pytest.fixture
def auth(client):
    return AuthActions(client)


@pytest.fixture
def make_user(app):
    def _make(username, password="secret123"):
        with app.app_context():
            user = register_user(username, password)
            assert user is not None
            return user.id

    return _make


@pytest.fixture
def make_workspace(app):
    """
    Crea un workspace con tokens/servicios/bills:
      make_workspace(owner_id, "Acme", {"tok1": {"translate": (0.002, [5000, 3000])}})
    Devuelve el id del workspace.
    """

    def _make(owner_id, title, tokens=None):
        started = dt.datetime(2023, 1, 1)
        with app.app_context():
            ws = Workspace(title=title, owner_id=owner_id)
            db.session.add(ws)
            for token_name, services in (tokens or {}).items():
                token = APIToken(name=token_name, workspace=ws)
                db.session.add(token)
                for service_name, (cost, durations) in services.items():
                    service = Service(name=service_name, cost_per_ms=cost, api_token=token)
                    db.session.add(service)
                    for ms in durations:
                        db.session.add(
                            Bill(service=service, usage_started_at=started, usage_duration_in_ms=ms)
                        )
            db.session.commit()
            return ws.id

    return _make
