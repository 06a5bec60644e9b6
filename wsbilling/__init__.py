# wsbilling/__init__.py
from __future__ import annotations

import os
from typing import Any, Mapping, Optional

from flask import Flask

from wsbilling.extensions import db, migrate


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask(
        __name__,
        static_folder=os.getenv("FLASK_STATIC_FOLDER", "static"),
        template_folder=os.getenv("FLASK_TEMPLATES_FOLDER", "templates"),
    )

    # -----------------------------------------------------------
    # CONFIG
    # -----------------------------------------------------------
    from wsbilling.config import Config, ensure_sqlite_dir

    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)
    ensure_sqlite_dir(app.config["SQLALCHEMY_DATABASE_URI"])

    # -----------------------------------------------------------
    # EXTENSIONES
    # -----------------------------------------------------------
    db.init_app(app)
    migrate.init_app(app, db, directory=os.path.join(os.path.dirname(__file__), "..", "alembic"))

    # Importar modelos (registra tablas en metadata)
    from wsbilling import models  # noqa: F401

    # Sesiones server-side en la tabla `sessions`
    from wsbilling.sessions import SqlAlchemySessionInterface
    app.session_interface = SqlAlchemySessionInterface()

    # Usuario actual en g.user
    from wsbilling.utils_auth import load_current_user
    app.before_request(load_current_user)

    # -----------------------------------------------------------
    # BLUEPRINTS
    # -----------------------------------------------------------
    from wsbilling.routes import register_routes
    register_routes(app)

    # -----------------------------------------------------------
    # HEALTHCHECK
    # -----------------------------------------------------------
    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    # Crear tablas si no existen
    with app.app_context():
        db.create_all()

    return app
