# wsbilling/models.py
from __future__ import annotations

import datetime as dt
import secrets

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import validates

from wsbilling.extensions import db


def utcnow():
    return dt.datetime.utcnow()


def gen_api_token() -> str:
    """Genera un token de 40 caracteres hex (20 bytes aleatorios)."""
    return secrets.token_hex(20)


# ---------------------------------------------------------
# USUARIOS
# ---------------------------------------------------------
class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    username = db.Column(db.String(256), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.Text, nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    workspaces = db.relationship(
        "Workspace",
        back_populates="owner",
        cascade="all, delete-orphan",
        order_by="Workspace.id",
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username}>"


# ---------------------------------------------------------
# WORKSPACES
# ---------------------------------------------------------
class Workspace(db.Model):
    __tablename__ = "workspaces"
    __table_args__ = (
        db.UniqueConstraint("owner_id", "title", name="uq_workspaces_owner_id_title"),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)

    owner_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    owner = db.relationship("User", back_populates="workspaces")
    api_tokens = db.relationship(
        "APIToken",
        back_populates="workspace",
        cascade="all, delete-orphan",
        order_by="APIToken.id",
    )
    # Cuota declarada pero sin lógica de enforcement
    billing_quota = db.relationship(
        "BillingQuota",
        back_populates="workspace",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Workspace id={self.id} title={self.title} owner={self.owner_id}>"


# ---------------------------------------------------------
# API TOKENS
# ---------------------------------------------------------
class APIToken(db.Model):
    """
    Token de API de un workspace.

    - token: 40 chars hex, se genera una sola vez al crear el registro
    - revoked_at: fecha de revocación (None = activo)
    Sin updated_at: el registro no se edita.
    """

    __tablename__ = "api_tokens"
    __table_args__ = (
        db.UniqueConstraint("workspace_id", "name", name="uq_api_tokens_workspace_id_name"),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(100), nullable=False)
    token = db.Column(db.String(40), nullable=False, default=gen_api_token)
    revoked_at = db.Column(db.DateTime, nullable=True)

    workspace_id = db.Column(
        db.Integer,
        db.ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    workspace = db.relationship("Workspace", back_populates="api_tokens")
    services = db.relationship(
        "Service",
        back_populates="api_token",
        cascade="all, delete-orphan",
        order_by="Service.id",
    )

    def __init__(self, **kwargs):
        # el token se fija al construir, así es visible antes del flush
        kwargs.setdefault("token", gen_api_token())
        super().__init__(**kwargs)

    @validates("token")
    def _validate_token(self, key, value):
        state = sa_inspect(self)
        if state.has_identity and "token" in state.expired_attributes and state.session is not None:
            state.session.refresh(self, ["token"])
        current = self.__dict__.get("token")
        if current is not None and current != value:
            raise ValueError("El token de API es inmutable")
        return value

    def __repr__(self) -> str:
        return f"<APIToken id={self.id} name={self.name} workspace={self.workspace_id}>"


# ---------------------------------------------------------
# CUOTAS (inertes)
# ---------------------------------------------------------
class BillingQuota(db.Model):
    __tablename__ = "billing_quotas"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    limit = db.Column(db.Float, nullable=False)

    workspace_id = db.Column(
        db.Integer,
        db.ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
    )

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    workspace = db.relationship("Workspace", back_populates="billing_quota")


# ---------------------------------------------------------
# SERVICIOS
# ---------------------------------------------------------
class Service(db.Model):
    __tablename__ = "services"
    __table_args__ = (
        db.UniqueConstraint("api_token_id", "name", name="uq_services_api_token_id_name"),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(100), nullable=False)
    cost_per_ms = db.Column(db.Float, nullable=False)

    api_token_id = db.Column(
        db.Integer,
        db.ForeignKey("api_tokens.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    api_token = db.relationship("APIToken", back_populates="services")
    bills = db.relationship(
        "Bill",
        back_populates="service",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Service id={self.id} name={self.name} cost_per_ms={self.cost_per_ms}>"


# ---------------------------------------------------------
# BILLS (append-only)
# ---------------------------------------------------------
class Bill(db.Model):
    __tablename__ = "bills"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    usage_started_at = db.Column(db.DateTime, nullable=False)
    usage_duration_in_ms = db.Column(db.Integer, nullable=False)

    service_id = db.Column(
        db.Integer,
        db.ForeignKey("services.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    service = db.relationship("Service", back_populates="bills")

    def __repr__(self) -> str:
        return (
            f"<Bill id={self.id} service={self.service_id} "
            f"started={self.usage_started_at} ms={self.usage_duration_in_ms}>"
        )


# ---------------------------------------------------------
# SESIONES SERVER-SIDE
# ---------------------------------------------------------
class ServerSession(db.Model):
    __tablename__ = "sessions"

    sid = db.Column(db.String(64), primary_key=True)
    data = db.Column(db.JSON, nullable=False, default=dict)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<ServerSession sid={self.sid[:8]}… expires={self.expires_at}>"
