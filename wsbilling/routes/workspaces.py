# wsbilling/routes/workspaces.py
from __future__ import annotations

from typing import Optional

from flask import Blueprint, current_app, g, render_template, request

from wsbilling.services.bills import get_workspace, parse_month, summarize_workspace_bills
from wsbilling.utils_auth import login_required

bp = Blueprint("workspaces", __name__, url_prefix="/workspaces")

MAX_ID = 2**31 - 1


def _parse_id(raw: str) -> Optional[int]:
    """Id de la URL; None si no es un entero válido (la vista responde 404)."""
    try:
        value = int(raw)
    except ValueError:
        return None
    if value < 1 or value > MAX_ID:
        return None
    return value


@bp.get("/creation")
@login_required
def create():
    return render_template("pages/workspaces/create.html")


@bp.post("/creation")
@login_required
def create_post():
    # Sin implementar: no crea nada
    return "", 204


@bp.get("/<workspace_id>/bills")
@login_required
def bills(workspace_id: str):
    month = parse_month(request.args.get("month"))

    ws_id = _parse_id(workspace_id)
    workspace = get_workspace(ws_id) if ws_id is not None else None
    # not-found siempre antes que forbidden
    if workspace is None:
        return render_template("pages/404.html", description="Workspace no encontrado"), 404
    if workspace.owner.id != g.user.id:
        current_app.logger.warning(
            "Acceso denegado: user=%s workspace=%s owner=%s",
            g.user.id,
            workspace.id,
            workspace.owner_id,
        )
        return render_template("pages/403.html", description="No tienes acceso a este workspace"), 403

    summary = summarize_workspace_bills(workspace)
    return render_template(
        "pages/workspaces/detail/bills.html",
        workspace=workspace,
        summary=summary,
        month=month,
    )
