# wsbilling/services/importer.py
"""
Importación de usos desde CSV (job batch, fuera del request).

Columnas: username, workspace_title, api_token_name, service_name,
service_cost_per_ms, usage_started_at, usage_duration_in_ms

Las filas se procesan en orden y de una en una. Workspace / APIToken /
Service se resuelven con find-or-create (cache de la corrida -> BD -> insert);
el Bill siempre se agrega.
"""
from __future__ import annotations

import csv
import datetime as dt
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from wsbilling.extensions import db
from wsbilling.models import APIToken, Bill, Service, User, Workspace
from wsbilling.services.accounts import find_user, register_user

log = logging.getLogger(__name__)

DEMO_USERS = (
    ("demo1", "skills2023d1"),
    ("demo2", "skills2023d2"),
)


@dataclass
class ImportReport:
    rows_read: int = 0
    rows_skipped: int = 0
    bills_created: int = 0
    workspaces_created: int = 0
    tokens_created: int = 0
    services_created: int = 0


def parse_timestamp(raw: str) -> dt.datetime:
    """ISO-8601 (acepta 'Z'); se guarda como UTC sin tz."""
    s = (raw or "").strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    value = dt.datetime.fromisoformat(s)
    if value.tzinfo is not None:
        value = value.astimezone(dt.timezone.utc).replace(tzinfo=None)
    return value


class UsageImporter:
    def __init__(self):
        self._users: Dict[str, User] = {}
        self._workspaces: Dict[str, Workspace] = {}
        self._tokens: Dict[Tuple[str, str], APIToken] = {}
        self._services: Dict[Tuple[str, str, str], Service] = {}

    # ------------------------------
    # Usuarios demo
    # ------------------------------
    def ensure_demo_users(self) -> None:
        for username, password in DEMO_USERS:
            user = find_user(username) or register_user(username, password)
            if user is None:
                log.error("No se pudo crear ni encontrar el usuario demo %s", username)
                continue
            self._users[username] = user

    # ------------------------------
    # Corrida
    # ------------------------------
    def run(self, path: str, create_demo_users: bool = True) -> ImportReport:
        if create_demo_users:
            self.ensure_demo_users()
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f, skipinitialspace=True)
            report = self.import_rows(reader)
        log.info("Importación terminada (%s): %s", path, report)
        return report

    def import_rows(self, rows: Iterable[Mapping[str, Any]]) -> ImportReport:
        report = ImportReport()
        for lineno, row in enumerate(rows, start=2):
            report.rows_read += 1
            try:
                self._import_row(row, report)
            except (KeyError, ValueError, SQLAlchemyError) as e:
                db.session.rollback()
                report.rows_skipped += 1
                log.warning("Fila %d omitida: %s", lineno, e)
        return report

    def _import_row(self, row: Mapping[str, Any], report: ImportReport) -> None:
        row = {k.strip(): (v or "").strip() for k, v in row.items() if k}

        username = row["username"]
        user = self._resolve_user(username)
        if user is None:
            raise ValueError(f"usuario desconocido {username!r}")

        title = row["workspace_title"]
        token_name = row["api_token_name"]
        service_name = row["service_name"]
        cost_per_ms = float(row["service_cost_per_ms"])
        started_at = parse_timestamp(row["usage_started_at"])
        duration_ms = int(row["usage_duration_in_ms"])

        workspace = self._workspaces.get(title)
        if workspace is None:
            workspace, created = _get_or_create(Workspace, owner_id=user.id, title=title)
            report.workspaces_created += int(created)
            self._workspaces[title] = workspace

        token_key = (title, token_name)
        token = self._tokens.get(token_key)
        if token is None:
            token, created = _get_or_create(APIToken, workspace_id=workspace.id, name=token_name)
            report.tokens_created += int(created)
            self._tokens[token_key] = token

        service_key = (title, token_name, service_name)
        service = self._services.get(service_key)
        if service is None:
            service, created = _get_or_create(
                Service,
                defaults={"cost_per_ms": cost_per_ms},
                api_token_id=token.id,
                name=service_name,
            )
            report.services_created += int(created)
            self._services[service_key] = service

        db.session.add(
            Bill(
                service_id=service.id,
                usage_started_at=started_at,
                usage_duration_in_ms=duration_ms,
            )
        )
        db.session.commit()
        report.bills_created += 1

    def _resolve_user(self, username: str) -> Optional[User]:
        user = self._users.get(username)
        if user is None:
            user = find_user(username)
            if user is not None:
                self._users[username] = user
        return user


def _find(model, lookup: Mapping[str, Any]):
    return db.session.query(model).filter_by(**lookup).first()


def _get_or_create(model, defaults: Optional[Mapping[str, Any]] = None, **lookup):
    """
    Devuelve (obj, created). Si el insert choca con la constraint única
    (otro proceso lo creó antes), se vuelve a buscar.
    """
    obj = _find(model, lookup)
    if obj is not None:
        return obj, False

    obj = model(**lookup, **(defaults or {}))
    db.session.add(obj)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        obj = _find(model, lookup)
        if obj is None:
            raise
        return obj, False
    return obj, True
