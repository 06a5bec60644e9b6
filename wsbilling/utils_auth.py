# wsbilling/utils_auth.py
from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import g, redirect, session, url_for

from wsbilling.extensions import db
from wsbilling.models import User


def get_session_user_id() -> Optional[int]:
    """user_id guardado en la sesión server-side (o None)."""
    raw = session.get("user_id")
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def load_current_user() -> None:
    """
    Hook before_request: deja en g.user el usuario de la sesión.
    Solo carga la fila de User; workspaces/tokens se consultan en cada vista.
    """
    g.user = None
    uid = get_session_user_id()
    if uid is not None:
        g.user = db.session.get(User, uid)


def login_user(user: User) -> None:
    session.clear()
    # id nuevo: un id de sesión previo (fijado por terceros) no queda autenticado
    session.regenerate()
    session["user_id"] = int(user.id)


def logout_user() -> None:
    session.clear()


def login_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if g.get("user") is None:
            return redirect(url_for("auth.login"))
        return view(*args, **kwargs)

    return wrapped
