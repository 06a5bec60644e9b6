# wsbilling/services/bills.py
"""
Resumen de facturación de un workspace.

Una sola consulta agrupada:
  api_tokens LEFT JOIN services LEFT JOIN bills
  GROUP BY token, servicio -> SUM(usage_duration_in_ms)
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import joinedload

from wsbilling.extensions import db
from wsbilling.models import APIToken, Bill, Service, Workspace


@dataclass
class ServiceUsage:
    service: Service
    total_ms: int = 0

    @property
    def time(self) -> float:
        """Tiempo total de uso en segundos."""
        return self.total_ms / 1000

    @property
    def cost(self) -> float:
        return self.total_ms * float(self.service.cost_per_ms or 0)


@dataclass
class TokenUsage:
    token: APIToken
    services: List[ServiceUsage] = field(default_factory=list)

    @property
    def time(self) -> float:
        return sum(s.time for s in self.services)

    @property
    def cost(self) -> float:
        return sum(s.cost for s in self.services)


@dataclass
class WorkspaceBills:
    workspace: Workspace
    tokens: List[TokenUsage] = field(default_factory=list)

    @property
    def time(self) -> float:
        return sum(t.time for t in self.tokens)

    @property
    def cost(self) -> float:
        return sum(t.cost for t in self.tokens)

    def service_time(self, token_name: str, service_name: str) -> Optional[float]:
        for t in self.tokens:
            if t.token.name != token_name:
                continue
            for s in t.services:
                if s.service.name == service_name:
                    return s.time
        return None


def get_workspace(workspace_id: int) -> Optional[Workspace]:
    return (
        db.session.query(Workspace)
        .options(joinedload(Workspace.owner))
        .filter(Workspace.id == workspace_id)
        .first()
    )


def summarize_workspace_bills(workspace: Workspace) -> WorkspaceBills:
    total_ms = func.coalesce(func.sum(Bill.usage_duration_in_ms), 0)
    rows = (
        db.session.query(APIToken, Service, total_ms)
        .select_from(APIToken)
        .outerjoin(Service, Service.api_token_id == APIToken.id)
        .outerjoin(Bill, Bill.service_id == Service.id)
        .filter(APIToken.workspace_id == workspace.id)
        .group_by(APIToken.id, Service.id)
        .order_by(APIToken.id, Service.id)
        .all()
    )

    by_token: Dict[int, TokenUsage] = {}
    for token, service, ms in rows:
        usage = by_token.get(token.id)
        if usage is None:
            usage = by_token[token.id] = TokenUsage(token=token)
        # token sin servicios: fila con service=None
        if service is not None:
            usage.services.append(ServiceUsage(service=service, total_ms=int(ms or 0)))

    return WorkspaceBills(workspace=workspace, tokens=list(by_token.values()))


def parse_month(raw: Optional[str]) -> Optional[dt.date]:
    """
    ?month=YYYY-MM o YYYY-MM-DD. Valor inválido -> None.
    Todavía no filtra la consulta; solo se pasa al template.
    """
    raw = (raw or "").strip()
    if not raw:
        return None
    for fmt in ("%Y-%m", "%Y-%m-%d"):
        try:
            return dt.datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None
