from __future__ import annotations

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from objectifs.core.errors import bad_request, forbidden, not_found
from objectifs.core.permissions import is_bum, is_manager_of, require_view_user_resources
from objectifs.core.security import Identity
from objectifs.models import Commentaire, Objectif
from objectifs.services.objectifs_service import load_objectif
from objectifs.services.persistence import commit

"""
Commentaires Service.

Rôle (fonctionnel) :
- Fil de commentaires d’un objectif (le plus récent d’abord, auteur inclus).
- Lecture et ajout : toute personne qui peut voir l’objectif (propriétaire, son BUM, ADMIN).
- Modification et suppression : l’auteur, un ADMIN, ou le BUM du propriétaire de l’objectif.
- Seul le contenu est modifiable ; l’objectif et l’auteur restent ceux de la création.
"""

log = logging.getLogger("objectifs.commentaires")


def _clean_contenu(value: str) -> str:
    text = value.strip()
    if not text:
        raise bad_request("contenu is required")
    return text


async def _load_commentaire(db: AsyncSession, commentaire_id: int) -> Commentaire:
    stmt = (
        select(Commentaire)
        .where(Commentaire.id == commentaire_id)
        .options(
            selectinload(Commentaire.user),
            selectinload(Commentaire.objectif).selectinload(Objectif.user),
        )
        .execution_options(populate_existing=True)
    )
    com = (await db.execute(stmt)).scalars().first()
    if com is None:
        raise not_found("commentaire")
    return com


def _require_can_edit(identity: Identity, com: Commentaire) -> None:
    if com.user_id == identity.id or is_manager_of(identity, com.objectif.user):
        return
    if is_bum(identity):
        raise forbidden("NOT_YOUR_CONSULTANT", "forbidden: not your consultant")
    raise forbidden("NOT_AUTHOR", "forbidden: not the author of this comment")


async def list_comments(db: AsyncSession, identity: Identity, objectif_id: int) -> List[Commentaire]:
    obj = await load_objectif(db, objectif_id)
    require_view_user_resources(identity, obj.user)

    stmt = (
        select(Commentaire)
        .where(Commentaire.objectif_id == obj.id)
        .options(selectinload(Commentaire.user))
        .order_by(Commentaire.created_at.desc(), Commentaire.id.desc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def add_comment(db: AsyncSession, identity: Identity, objectif_id: int, contenu: str) -> Commentaire:
    obj = await load_objectif(db, objectif_id)
    require_view_user_resources(identity, obj.user)

    com = Commentaire(contenu=_clean_contenu(contenu), objectif_id=obj.id, user_id=identity.id)
    db.add(com)
    await commit(db)

    log.info("commentaire_created", extra={"actor_id": identity.id, "objectif_id": obj.id, "commentaire_id": com.id})
    return await _load_commentaire(db, com.id)


async def update_comment(db: AsyncSession, identity: Identity, commentaire_id: int, contenu: str) -> Commentaire:
    com = await _load_commentaire(db, commentaire_id)
    _require_can_edit(identity, com)

    # Même contenu : aucun UPDATE émis (l’ORM ne voit pas de changement)
    com.contenu = _clean_contenu(contenu)
    await commit(db)

    log.info("commentaire_updated", extra={"actor_id": identity.id, "commentaire_id": com.id})
    return await _load_commentaire(db, com.id)


async def remove_comment(db: AsyncSession, identity: Identity, commentaire_id: int) -> None:
    com = await _load_commentaire(db, commentaire_id)
    _require_can_edit(identity, com)

    await db.delete(com)
    await commit(db)
    log.info("commentaire_deleted", extra={"actor_id": identity.id, "commentaire_id": commentaire_id})
