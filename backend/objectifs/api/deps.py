from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from objectifs.core.errors import invalid_credential
from objectifs.core.security import Identity, decode_token, extract_bearer
from objectifs.db.session import get_db
from objectifs.models import User

"""
Dépendances API.

Rôle (fonctionnel) :
- Centralise les dépendances réutilisables sur les routes.
- Authentification : Bearer JWT -> Identity, rafraîchie depuis la table users
  (rôle et BU courants ; un compte supprimé n’est plus authentifié).
"""


async def _identity_from_token(token: str, db: AsyncSession) -> Identity:
    claims = decode_token(token)

    # Colonnes seules : pas d’entité User dans la session de la requête
    row = (
        await db.execute(
            select(User.id, User.username, User.role, User.business_unit_id).where(User.id == claims.id)
        )
    ).first()
    if row is None:
        raise invalid_credential()

    return Identity(id=row.id, username=row.username, role=row.role, business_unit_id=row.business_unit_id)


async def get_current_identity(request: Request, db: AsyncSession = Depends(get_db)) -> Identity:
    identity = await _identity_from_token(extract_bearer(request), db)
    # Contexte pour les logs de requête (middleware)
    request.state.actor_id = identity.id
    return identity


async def get_optional_identity(request: Request, db: AsyncSession = Depends(get_db)) -> Optional[Identity]:
    """Identity si un Bearer est fourni, None sinon (routes publiques)."""
    if not request.headers.get("authorization"):
        return None
    return await get_current_identity(request, db)


# Dépendance prête à l’emploi pour protéger un endpoint
CurrentIdentity = Depends(get_current_identity)
