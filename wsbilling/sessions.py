# wsbilling/sessions.py
"""
Sesiones server-side guardadas en la tabla `sessions`.

La cookie del cliente lleva SOLO el id de sesión (firmado con itsdangerous);
los datos (p.ej. user_id) viven en la base de datos.
"""
from __future__ import annotations

import secrets
from datetime import timedelta
from typing import Optional

from flask.sessions import SessionInterface, SessionMixin
from itsdangerous import BadSignature, URLSafeSerializer
from werkzeug.datastructures import CallbackDict

from wsbilling.extensions import db
from wsbilling.models import ServerSession, utcnow


class ServerSideSession(CallbackDict, SessionMixin):
    def __init__(self, initial=None, sid: Optional[str] = None, new: bool = False):
        def on_update(self):
            self.modified = True

        super().__init__(initial, on_update)
        self.sid = sid or secrets.token_hex(32)
        self.new = new
        self.modified = False

    def regenerate(self) -> None:
        """Nuevo id de sesión (p.ej. al hacer login); la fila anterior se borra."""
        row = db.session.get(ServerSession, self.sid)
        if row is not None:
            db.session.delete(row)
        self.sid = secrets.token_hex(32)
        self.new = True
        self.modified = True


class SqlAlchemySessionInterface(SessionInterface):
    salt = "wsbilling-session"

    def _serializer(self, app) -> URLSafeSerializer:
        return URLSafeSerializer(app.secret_key, salt=self.salt)

    def open_session(self, app, request) -> ServerSideSession:
        cookie = request.cookies.get(self.get_cookie_name(app))
        if not cookie:
            return ServerSideSession(new=True)

        try:
            sid = self._serializer(app).loads(cookie)
        except BadSignature:
            app.logger.warning("Cookie de sesión con firma inválida")
            return ServerSideSession(new=True)

        row = db.session.get(ServerSession, sid)
        if row is None:
            return ServerSideSession(new=True)

        if row.expires_at <= utcnow():
            db.session.delete(row)
            db.session.commit()
            return ServerSideSession(new=True)

        return ServerSideSession(dict(row.data or {}), sid=sid)

    def save_session(self, app, session: ServerSideSession, response) -> None:
        name = self.get_cookie_name(app)
        domain = self.get_cookie_domain(app)
        path = self.get_cookie_path(app)

        # Sesión vacía: si se limpió, borrar fila y cookie
        if not session:
            if session.modified:
                row = db.session.get(ServerSession, session.sid)
                if row is not None:
                    db.session.delete(row)
                    db.session.commit()
                response.delete_cookie(name, domain=domain, path=path)
            return

        if not self.should_set_cookie(app, session):
            return

        expires = utcnow() + timedelta(days=int(app.config.get("SESSION_LIFETIME_DAYS", 14)))

        row = db.session.get(ServerSession, session.sid)
        if row is None:
            row = ServerSession(sid=session.sid)
            db.session.add(row)
        row.data = dict(session)
        row.expires_at = expires
        db.session.commit()

        response.set_cookie(
            name,
            self._serializer(app).dumps(session.sid),
            expires=expires,
            httponly=self.get_cookie_httponly(app),
            domain=domain,
            path=path,
            secure=self.get_cookie_secure(app),
            samesite=self.get_cookie_samesite(app),
        )
