# tests/test_importer.py
import datetime as dt
import logging

import pytest

from wsbilling.extensions import db
from wsbilling.models import APIToken, Bill, Service, User, Workspace
from wsbilling.services import importer as importer_module
from wsbilling.services.importer import UsageImporter, parse_timestamp

HEADER = (
    "username,workspace_title,api_token_name,service_name,"
    "service_cost_per_ms,usage_started_at,usage_duration_in_ms\n"
)


@pytest.fixture
def csv_file(tmp_path):
    def _write(*rows):
        path = tmp_path / "service_usages.csv"
        path.write_text(HEADER + "".join(r + "\n" for r in rows), encoding="utf-8")
        return str(path)

    return _write


def _counts():
    return {
        "workspaces": db.session.query(Workspace).count(),
        "tokens": db.session.query(APIToken).count(),
        "services": db.session.query(Service).count(),
        "bills": db.session.query(Bill).count(),
    }


def test_creates_demo_users(app, csv_file):
    path = csv_file()
    with app.app_context():
        UsageImporter().run(path)
        names = sorted(u.username for u in db.session.query(User))
        assert names == ["demo1", "demo2"]


def test_demo_users_can_log_in(app, csv_file, auth):
    with app.app_context():
        UsageImporter().run(csv_file())
    resp = auth.login("demo1", "skills2023d1")
    assert resp.status_code == 302


def test_acme_scenario(app, client, auth, csv_file):
    path = csv_file(
        "demo1, Acme, tok1, translate, 0.002, 2023-01-01T00:00:00Z, 5000",
        "demo1, Acme, tok1, translate, 0.002, 2023-01-02T00:00:00Z, 3000",
    )
    with app.app_context():
        report = UsageImporter().run(path)
        assert report.rows_read == 2
        assert report.bills_created == 2
        assert report.rows_skipped == 0
        assert _counts() == {"workspaces": 1, "tokens": 1, "services": 1, "bills": 2}

        ws = db.session.query(Workspace).one()
        assert ws.title == "Acme"
        assert ws.owner.username == "demo1"
        assert db.session.query(APIToken).one().name == "tok1"
        service = db.session.query(Service).one()
        assert service.name == "translate"
        assert service.cost_per_ms == pytest.approx(0.002)
        assert sum(b.usage_duration_in_ms for b in db.session.query(Bill)) == 8000
        ws_id = ws.id

    auth.login("demo1", "skills2023d1")
    resp = client.get(f"/workspaces/{ws_id}/bills")
    assert resp.status_code == 200
    assert "8.000" in resp.get_data(as_text=True)


def test_rerun_dedups_entities_but_appends_bills(app, csv_file):
    path = csv_file(
        "demo1,Acme,tok1,translate,0.002,2023-01-01T00:00:00Z,5000",
        "demo1,Acme,tok2,ocr,0.001,2023-01-01T01:00:00Z,1000",
        "demo2,Globex,main,translate,0.003,2023-01-02T00:00:00Z,2500",
    )
    with app.app_context():
        importer = UsageImporter()
        importer.run(path)
        first = _counts()
        assert first == {"workspaces": 2, "tokens": 3, "services": 3, "bills": 3}

        # misma instancia (mismas caches) y una nueva: nunca duplica entidades
        importer.run(path)
        report = UsageImporter().run(path)
        assert report.workspaces_created == 0
        assert report.tokens_created == 0
        assert report.services_created == 0

        after = _counts()
        assert after["workspaces"] == first["workspaces"]
        assert after["tokens"] == first["tokens"]
        assert after["services"] == first["services"]
        # los bills son append-only
        assert after["bills"] == 3 * first["bills"]
        assert db.session.query(User).count() == 2


def test_same_service_name_under_different_tokens(app, csv_file):
    path = csv_file(
        "demo1,Acme,tok1,translate,0.002,2023-01-01T00:00:00Z,5000",
        "demo1,Acme,tok2,translate,0.002,2023-01-01T00:00:00Z,5000",
    )
    with app.app_context():
        UsageImporter().run(path)
        assert _counts() == {"workspaces": 1, "tokens": 2, "services": 2, "bills": 2}


def test_bad_rows_are_skipped(app, csv_file):
    path = csv_file(
        "demo1,Acme,tok1,translate,0.002,2023-01-01T00:00:00Z,5000",
        "demo1,Acme,tok1,translate,0.002,not-a-date,5000",
        "demo1,Acme,tok1,translate,0.002,2023-01-01T00:00:00Z,abc",
        "ghost,Acme,tok1,translate,0.002,2023-01-01T00:00:00Z,5000",
        "demo1,Acme,tok1,translate,0.002,2023-01-03T00:00:00Z,1000",
    )
    with app.app_context():
        report = UsageImporter().run(path)
        assert report.rows_read == 5
        assert report.rows_skipped == 3
        assert report.bills_created == 2
        assert _counts()["bills"] == 2


def test_rows_for_existing_users_without_demo_accounts(app, csv_file, make_user):
    make_user("carol")
    path = csv_file("carol,Initech,tok,svc,0.1,2023-05-01T12:00:00,100")
    with app.app_context():
        report = UsageImporter().run(path, create_demo_users=False)
        assert report.bills_created == 1
        assert db.session.query(User).count() == 1
        assert db.session.query(Workspace).one().owner.username == "carol"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2023-01-01T00:00:00Z", dt.datetime(2023, 1, 1)),
        ("2023-01-01T03:00:00+03:00", dt.datetime(2023, 1, 1)),
        ("2023-01-01 10:15:00", dt.datetime(2023, 1, 1, 10, 15)),
    ],
)
def test_parse_timestamp(raw, expected):
    assert parse_timestamp(raw) == expected


def test_get_or_create_falls_back_to_lookup_on_conflict(app, make_user, make_workspace, monkeypatch):
    alice = make_user("alice")
    ws_id = make_workspace(alice, "Acme")

    real_find = importer_module._find
    calls = []

    def stale_first_lookup(model, lookup):
        # la primera búsqueda "no ve" la fila creada por otro proceso
        calls.append(model)
        if len(calls) == 1:
            return None
        return real_find(model, lookup)

    monkeypatch.setattr(importer_module, "_find", stale_first_lookup)
    with app.app_context():
        obj, created = importer_module._get_or_create(Workspace, owner_id=alice, title="Acme")
        assert created is False
        assert obj.id == ws_id
        assert len(calls) == 2
        assert db.session.query(Workspace).count() == 1


def test_rerun_logs_no_errors_for_existing_demo_users(app, csv_file, caplog):
    path = csv_file("demo1,Acme,tok1,translate,0.002,2023-01-01T00:00:00Z,5000")
    with app.app_context():
        UsageImporter().run(path)
        caplog.clear()
        with caplog.at_level(logging.INFO):
            report = UsageImporter().run(path)
        assert report.rows_skipped == 0
        assert not [r for r in caplog.records if r.levelno >= logging.ERROR]
        assert db.session.query(User).count() == 2
