# wsbilling/services/workspaces.py
from __future__ import annotations

from typing import List

from sqlalchemy.orm import selectinload

from wsbilling.extensions import db
from wsbilling.models import Workspace


def list_user_workspaces(user_id: int) -> List[Workspace]:
    """Workspaces del usuario con sus tokens (consulta explícita, no en cada request)."""
    return (
        db.session.query(Workspace)
        .options(selectinload(Workspace.api_tokens))
        .filter(Workspace.owner_id == user_id)
        .order_by(Workspace.id)
        .all()
    )
