# tests/test_sessions.py
import datetime as dt

from wsbilling.extensions import db
from wsbilling.models import ServerSession

COOKIE = "wsbilling_sid"


def test_anonymous_request_sets_no_cookie(client):
    client.get("/login")
    assert client.get_cookie(COOKIE) is None


def test_cookie_holds_only_signed_session_id(app, client, auth):
    auth.register("alice", "s3cret")
    auth.login("alice", "s3cret")

    cookie = client.get_cookie(COOKIE)
    assert cookie is not None
    assert "user_id" not in cookie.value

    with app.app_context():
        row = db.session.query(ServerSession).one()
        assert row.sid not in ("", None)
        assert row.expires_at > dt.datetime.utcnow()


def test_tampered_cookie_is_ignored(client, auth):
    auth.register("alice", "s3cret")
    auth.login("alice", "s3cret")
    client.set_cookie(COOKIE, "not-a-valid-signature")
    assert client.get("/").status_code == 302


def test_expired_session_is_discarded(app, client, auth):
    auth.register("alice", "s3cret")
    auth.login("alice", "s3cret")
    with app.app_context():
        row = db.session.query(ServerSession).one()
        row.expires_at = dt.datetime.utcnow() - dt.timedelta(seconds=1)
        db.session.commit()

    assert client.get("/").status_code == 302
    with app.app_context():
        assert db.session.query(ServerSession).count() == 0


def test_login_issues_new_session_id(app, client, auth, make_user):
    make_user("mallory", "m4llory")
    alice = make_user("alice", "s3cret")

    # mallory obtiene una sesión válida y la planta en otro navegador
    auth.login("mallory", "m4llory")
    planted = client.get_cookie(COOKIE).value

    victim = app.test_client()
    victim.set_cookie(COOKIE, planted)
    resp = victim.post("/login", data={"username": "alice", "password": "s3cret"})
    assert resp.status_code == 302
    assert victim.get_cookie(COOKIE).value != planted
    assert "alice" in victim.get("/").get_data(as_text=True)

    # la sesión plantada ya no existe: el cliente original queda anónimo
    resp = client.get("/")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/login")
    with app.app_context():
        rows = db.session.query(ServerSession).all()
        assert len(rows) == 1
        assert rows[0].data["user_id"] == alice
