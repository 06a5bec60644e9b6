# wsbilling/config.py
from __future__ import annotations

import os

from dotenv import load_dotenv
from sqlalchemy.engine.url import URL, make_url

# .env en dev; las variables ya exportadas tienen prioridad
load_dotenv(override=False)


def _database_uri() -> str:
    """
    Orden de prioridad:
      1) MYSQL_HOST (+ MYSQL_PORT / MYSQL_USERNAME / MYSQL_PASSWORD / MYSQL_DATABASE)
      2) DATABASE_URL
      3) sqlite local
    """
    host = os.getenv("MYSQL_HOST")
    if host:
        port = os.getenv("MYSQL_PORT")
        return URL.create(
            "mysql+pymysql",
            username=os.getenv("MYSQL_USERNAME"),
            password=os.getenv("MYSQL_PASSWORD"),
            host=host,
            port=int(port) if port else None,
            database=os.getenv("MYSQL_DATABASE"),
        ).render_as_string(hide_password=False)
    return os.getenv("DATABASE_URL", "sqlite:///wsbilling.db")


class Config:
    # ==========================
    #  SECRET / SECURITY
    # ==========================
    SECRET_KEY = os.getenv("SECRET_KEY") or os.getenv("SECRET", "change-me")

    # Hash de contraseñas: método werkzeug con factor de trabajo fijo
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "pbkdf2:sha256:600000")
    PASSWORD_SALT_LENGTH = int(os.getenv("PASSWORD_SALT_LENGTH", "16"))

    # ==========================
    #  DATABASE
    # ==========================
    SQLALCHEMY_DATABASE_URI = _database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # ==========================
    #  SESIONES (server-side)
    # ==========================
    SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "wsbilling_sid")
    SESSION_COOKIE_HTTPONLY = True
    SESSION_LIFETIME_DAYS = int(os.getenv("SESSION_LIFETIME_DAYS", "14"))

    # ==========================
    #  SERVIDOR
    # ==========================
    HOST = os.getenv("HOST", "127.0.0.1")
    PORT = int(os.getenv("PORT", "8000"))


def ensure_sqlite_dir(uri: str) -> None:
    """Crea la carpeta del archivo SQLite (evita "unable to open database file")."""
    url = make_url(uri)
    if url.get_backend_name() != "sqlite":
        return
    db_path = url.database
    if db_path and db_path != ":memory:":
        directory = os.path.dirname(db_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)
