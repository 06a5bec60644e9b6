# wsbilling/routes/pages.py
from __future__ import annotations

from flask import Blueprint, g, render_template

from wsbilling.services.workspaces import list_user_workspaces
from wsbilling.utils_auth import login_required

bp = Blueprint("pages", __name__)


@bp.get("/")
@login_required
def index():
    workspaces = list_user_workspaces(g.user.id)
    return render_template("pages/index.html", workspaces=workspaces)
