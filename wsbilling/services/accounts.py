# wsbilling/services/accounts.py
from __future__ import annotations

import logging
from typing import Optional

from flask import current_app
from werkzeug.security import check_password_hash, generate_password_hash

from wsbilling.extensions import db
from wsbilling.models import User

log = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return generate_password_hash(
        password,
        method=current_app.config.get("PASSWORD_HASH_METHOD", "pbkdf2:sha256:600000"),
        salt_length=int(current_app.config.get("PASSWORD_SALT_LENGTH", 16)),
    )


def register_user(username: str, password: str) -> Optional[User]:
    """
    Crea el usuario con la contraseña hasheada.
    Cualquier fallo al crear (username duplicado u otro) se loguea y
    devuelve None; el llamador lo trata como "usuario ya existe".
    """
    user = User(username=username, password_hash=hash_password(password))
    try:
        db.session.add(user)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        log.error("No se pudo crear el usuario %r: %s", username, e)
        return None
    log.info("Usuario creado: id=%s username=%s", user.id, user.username)
    return user


def authenticate(username: str, password: str) -> Optional[User]:
    """Busca por username exacto y verifica el hash. None si no coincide."""
    user = find_user(username)
    if user is None:
        return None
    if not check_password_hash(user.password_hash, password):
        return None
    return user


def find_user(username: str) -> Optional[User]:
    return db.session.query(User).filter(User.username == username).first()
