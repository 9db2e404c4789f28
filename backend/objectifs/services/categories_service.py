from __future__ import annotations

import logging
import random
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from objectifs.core.errors import bad_request, conflict, forbidden, not_found
from objectifs.core.permissions import (
    can_view_user_resources,
    is_admin,
    is_bum,
    is_manager_of,
    require_manager_of,
    require_view_user_resources,
)
from objectifs.core.security import Identity
from objectifs.core.settings import settings
from objectifs.models import Categorie, Objectif, User
from objectifs.schemas.categories import CategorieCreate, CategorieOut, CategorieUpdate
from objectifs.services.persistence import commit

"""
Catégories Service.

Rôle (fonctionnel) :
- Liste : catégories globales + catégories privées visibles par l’appelant
  (les siennes, ou celles d’un consultant précis si l’appelant est ce consultant, son BUM ou un ADMIN).
- Création : globale (ADMIN uniquement), pour un consultant (son BUM / ADMIN), sinon privée.
- Modification / suppression : propriétaire, BUM du propriétaire ou ADMIN ; une catégorie
  globale n’est gérée que par un ADMIN.
- Suppression refusée tant qu’un objectif référence la catégorie (pas de FK orpheline).
"""

log = logging.getLogger("objectifs.categories")

HAS_DEPENDENTS = "conflict: has dependents"
CATEGORY_EXISTS = "conflict: category already exists"


def random_color() -> str:
    return random.choice(settings.DEFAULT_CATEGORY_COLORS)


def _clean_nom(value: str) -> str:
    nom = value.strip()
    if not nom:
        raise bad_request("nom is required")
    return nom


def _to_out(cat: Categorie, nb_objectifs: int = 0) -> CategorieOut:
    out = CategorieOut.model_validate(cat)
    return out.model_copy(update={"is_global": cat.user_id is None, "nb_objectifs": int(nb_objectifs or 0)})


async def _count_dependents(db: AsyncSession, categorie_id: int) -> int:
    stmt = select(func.count(Objectif.id)).where(Objectif.categorie_id == categorie_id)
    return int((await db.execute(stmt)).scalar_one())


async def _ensure_name_free(db: AsyncSession, nom: str, owner_id: Optional[int], exclude_id: Optional[int] = None) -> None:
    stmt = select(Categorie.id).where(func.lower(Categorie.nom) == nom.lower())
    stmt = stmt.where(Categorie.user_id.is_(None) if owner_id is None else Categorie.user_id == owner_id)
    if exclude_id is not None:
        stmt = stmt.where(Categorie.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise conflict(CATEGORY_EXISTS)


async def _load_user(db: AsyncSession, user_id: int) -> User:
    user = (await db.execute(select(User).where(User.id == user_id))).scalars().first()
    if user is None:
        raise not_found("user")
    return user


async def _require_can_manage(db: AsyncSession, identity: Identity, cat: Categorie) -> None:
    if cat.user_id is None:
        if not is_admin(identity):
            raise forbidden("GLOBAL_CATEGORY", "forbidden: global categories are managed by admins")
        return
    if cat.user_id == identity.id or is_admin(identity):
        return
    owner = await _load_user(db, cat.user_id)
    if is_manager_of(identity, owner):
        return
    if is_bum(identity):
        raise forbidden("NOT_YOUR_CONSULTANT", "forbidden: not your consultant")
    raise forbidden("NOT_OWNER", "forbidden: not authorized")


async def list_categories(
    db: AsyncSession, identity: Identity, consultant_id: Optional[int] = None
) -> List[CategorieOut]:
    owner_id = identity.id
    if consultant_id is not None and consultant_id != identity.id:
        consultant = await _load_user(db, consultant_id)
        require_view_user_resources(identity, consultant)
        owner_id = consultant.id

    counts = (
        select(Objectif.categorie_id.label("categorie_id"), func.count(Objectif.id).label("nb"))
        .where(Objectif.categorie_id.is_not(None))
        .group_by(Objectif.categorie_id)
        .subquery()
    )
    stmt = (
        select(Categorie, counts.c.nb)
        .outerjoin(counts, counts.c.categorie_id == Categorie.id)
        .where(or_(Categorie.user_id.is_(None), Categorie.user_id == owner_id))
        .order_by(Categorie.ordre.is_(None), Categorie.ordre, Categorie.nom, Categorie.id)
    )
    rows = (await db.execute(stmt)).all()
    return [_to_out(cat, nb) for cat, nb in rows]


async def get_categorie(db: AsyncSession, identity: Identity, categorie_id: int) -> CategorieOut:
    cat = await db.get(Categorie, categorie_id)
    if cat is None:
        raise not_found("categorie")
    if cat.user_id is not None and cat.user_id != identity.id:
        owner = await _load_user(db, cat.user_id)
        if not can_view_user_resources(identity, owner):
            raise forbidden("NOT_OWNER", "forbidden: not authorized")
    return _to_out(cat, await _count_dependents(db, cat.id))


async def create_categorie(db: AsyncSession, identity: Identity, payload: CategorieCreate) -> CategorieOut:
    nom = _clean_nom(payload.nom)

    owner_id: Optional[int]
    if payload.is_global:
        if not is_admin(identity):
            raise forbidden("GLOBAL_CATEGORY", "forbidden: only admins create global categories")
        owner_id = None
    elif payload.consultant_id is not None and payload.consultant_id != identity.id:
        consultant = await _load_user(db, payload.consultant_id)
        require_manager_of(identity, consultant)
        owner_id = consultant.id
    else:
        owner_id = identity.id

    await _ensure_name_free(db, nom, owner_id)

    cat = Categorie(
        nom=nom,
        description=(payload.description or "").strip() or None,
        couleur=payload.couleur or random_color(),
        user_id=owner_id,
        ordre=payload.ordre,
        icone=payload.icone,
    )
    db.add(cat)
    await commit(db, conflict_message=CATEGORY_EXISTS)

    log.info("categorie_created", extra={"actor_id": identity.id, "categorie_id": cat.id, "target_id": owner_id})
    return _to_out(cat)


async def update_categorie(
    db: AsyncSession, identity: Identity, categorie_id: int, payload: CategorieUpdate
) -> CategorieOut:
    cat = await db.get(Categorie, categorie_id)
    if cat is None:
        raise not_found("categorie")
    await _require_can_manage(db, identity, cat)

    fields = payload.model_fields_set
    if "nom" in fields and payload.nom is not None:
        nom = _clean_nom(payload.nom)
        await _ensure_name_free(db, nom, cat.user_id, exclude_id=cat.id)
        cat.nom = nom
    if "description" in fields:
        cat.description = (payload.description or "").strip() or None
    if "couleur" in fields and payload.couleur:
        cat.couleur = payload.couleur
    if "ordre" in fields:
        cat.ordre = payload.ordre
    if "icone" in fields:
        cat.icone = payload.icone

    await commit(db, conflict_message=CATEGORY_EXISTS)
    log.info("categorie_updated", extra={"actor_id": identity.id, "categorie_id": cat.id})
    return _to_out(cat, await _count_dependents(db, cat.id))


async def delete_categorie(db: AsyncSession, identity: Identity, categorie_id: int) -> None:
    cat = await db.get(Categorie, categorie_id)
    if cat is None:
        raise not_found("categorie")
    await _require_can_manage(db, identity, cat)

    nb = await _count_dependents(db, cat.id)
    if nb > 0:
        raise conflict(HAS_DEPENDENTS)

    await db.delete(cat)
    await commit(db)
    log.info("categorie_deleted", extra={"actor_id": identity.id, "categorie_id": categorie_id})
