from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from objectifs.core.errors import AppHTTPException, bad_request, forbidden, not_found
from objectifs.core.permissions import (
    is_admin,
    is_manager_of,
    require_any_role,
    require_manager_of,
    require_role,
    require_view_user_resources,
)
from objectifs.core.security import Identity
from objectifs.models import STATUS_EN_COURS, Categorie, Commentaire, Objectif, Role, User
from objectifs.schemas.objectifs import (
    BatchFailure,
    BumObjectifReview,
    ObjectifBatchCreate,
    ObjectifCreate,
    ObjectifCreateForUser,
    ObjectifOut,
    ObjectifUpdate,
)
from objectifs.services.persistence import commit

"""
Objectifs Service.

Rôle (fonctionnel) :
- Listes : mes objectifs (année courante par défaut), tous les objectifs (ADMIN) ou ceux
  de mon équipe (BUM).
- Création pour soi, pour un consultant (ADMIN/BUM) ou pour plusieurs consultants d’un coup.
- Mise à jour partielle et suppression, avec les règles de la hiérarchie ADMIN > BUM > CONSULTANT.

Règles clés :
- validatedbyadmin n’est modifiable que par un ADMIN ou le BUM du propriétaire ; une requête
  consultant qui le contient est refusée en bloc (403, rien n’est modifié).
- Une catégorie privée n’est utilisable que par son propriétaire (ou via un ADMIN).
- Création multiple : toutes les cibles sont vérifiées avant la première insertion ;
  ensuite chaque insertion est indépendante (résultat agrégé created / failed).
"""

log = logging.getLogger("objectifs.objectifs")


def current_year() -> int:
    return datetime.now().year


def objectif_options():
    return (selectinload(Objectif.categorie), selectinload(Objectif.user))


def _clean_description(value: str) -> str:
    text = value.strip()
    if not text:
        raise bad_request("description is required")
    return text


async def load_objectif(db: AsyncSession, objectif_id: int) -> Objectif:
    """Charge un objectif avec sa catégorie et son propriétaire (bum_id inclus) ou 404."""
    stmt = (
        select(Objectif)
        .where(Objectif.id == objectif_id)
        .options(*objectif_options())
        .execution_options(populate_existing=True)
    )
    obj = (await db.execute(stmt)).scalars().first()
    if obj is None:
        raise not_found("objectif")
    return obj


async def load_objectif_detail(db: AsyncSession, objectif_id: int) -> Objectif:
    stmt = (
        select(Objectif)
        .where(Objectif.id == objectif_id)
        .options(
            *objectif_options(),
            selectinload(Objectif.commentaires).selectinload(Commentaire.user),
        )
        .execution_options(populate_existing=True)
    )
    obj = (await db.execute(stmt)).scalars().first()
    if obj is None:
        raise not_found("objectif")
    return obj


async def check_category_usable(
    db: AsyncSession, identity: Identity, categorie_id: Optional[int], owner_id: int
) -> None:
    """Catégorie globale, appartenant au propriétaire de l’objectif, ou appelant ADMIN."""
    if categorie_id is None:
        return
    categorie = await db.get(Categorie, categorie_id)
    if categorie is None:
        raise not_found("categorie")
    if categorie.user_id is None or categorie.user_id == owner_id or is_admin(identity):
        return
    raise forbidden("CATEGORY_NOT_USABLE", "forbidden: category not usable")


async def list_mine(db: AsyncSession, identity: Identity, year: Optional[int] = None) -> List[Objectif]:
    annee = year if year is not None else current_year()
    stmt = (
        select(Objectif)
        .where(Objectif.user_id == identity.id, Objectif.annee == annee)
        .options(*objectif_options())
        .order_by(Objectif.created_at.desc(), Objectif.id.desc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def list_all(db: AsyncSession, identity: Identity, year: Optional[int] = None) -> List[Objectif]:
    """ADMIN : tous les objectifs. BUM : objectifs des utilisateurs qui lui sont assignés."""
    require_any_role(identity, (Role.ADMIN, Role.BUM))
    stmt = select(Objectif).options(*objectif_options())
    if not is_admin(identity):
        team = select(User.id).where(User.bum_id == identity.id)
        stmt = stmt.where(Objectif.user_id.in_(team))
    if year is not None:
        stmt = stmt.where(Objectif.annee == year)
    stmt = stmt.order_by(Objectif.annee.desc(), Objectif.created_at.desc(), Objectif.id.desc())
    return list((await db.execute(stmt)).scalars().all())


async def get_objectif(db: AsyncSession, identity: Identity, objectif_id: int) -> Objectif:
    obj = await load_objectif_detail(db, objectif_id)
    require_view_user_resources(identity, obj.user)
    return obj


async def _insert(db: AsyncSession, owner_id: int, payload: ObjectifCreate) -> Objectif:
    obj = Objectif(
        description=_clean_description(payload.description),
        status=STATUS_EN_COURS,
        validatedbyadmin=False,
        annee=payload.annee or current_year(),
        user_id=owner_id,
        categorie_id=payload.categorie_id,
    )
    db.add(obj)
    await commit(db)
    return await load_objectif(db, obj.id)


async def create(db: AsyncSession, identity: Identity, payload: ObjectifCreate) -> Objectif:
    await check_category_usable(db, identity, payload.categorie_id, identity.id)
    obj = await _insert(db, identity.id, payload)
    log.info("objectif_created", extra={"actor_id": identity.id, "objectif_id": obj.id})
    return obj


async def _load_target(db: AsyncSession, identity: Identity, user_id: int) -> User:
    target = (
        await db.execute(select(User).where(User.id == user_id).execution_options(populate_existing=True))
    ).scalars().first()
    if target is None:
        raise not_found("user")
    require_manager_of(identity, target)
    return target


async def create_for_user(db: AsyncSession, identity: Identity, payload: ObjectifCreateForUser) -> Objectif:
    require_any_role(identity, (Role.ADMIN, Role.BUM))
    target = await _load_target(db, identity, payload.user_id)
    await check_category_usable(db, identity, payload.categorie_id, target.id)

    obj = await _insert(db, target.id, payload)
    log.info(
        "objectif_created_for_user",
        extra={"actor_id": identity.id, "target_id": target.id, "objectif_id": obj.id},
    )
    return obj


async def create_for_many_users(db: AsyncSession, identity: Identity, payload: ObjectifBatchCreate) -> dict:
    require_any_role(identity, (Role.ADMIN, Role.BUM))

    # Dédoublonnage en conservant l’ordre de la requête
    user_ids = list(dict.fromkeys(payload.user_ids))

    rows = (await db.execute(select(User).where(User.id.in_(user_ids)))).scalars().all()
    by_id = {u.id: u for u in rows}
    missing = [uid for uid in user_ids if uid not in by_id]
    if missing:
        raise AppHTTPException(404, "NOT_FOUND", "not found: user", details={"userIds": missing})

    _clean_description(payload.description)

    # Autorisation “tout ou rien” : aucune insertion si une seule cible est refusée
    for uid in user_ids:
        require_manager_of(identity, by_id[uid])
        await check_category_usable(db, identity, payload.categorie_id, uid)

    created: List[ObjectifOut] = []
    failed: List[BatchFailure] = []
    for uid in user_ids:
        try:
            created.append(ObjectifOut.model_validate(await _insert(db, uid, payload)))
        except AppHTTPException as exc:
            failed.append(BatchFailure(user_id=uid, error=exc.message))
        except SQLAlchemyError:
            await db.rollback()
            log.exception("objectif_batch_item_failed", extra={"target_id": uid})
            failed.append(BatchFailure(user_id=uid, error="internal server error"))

    log.info(
        "objectif_batch_created",
        extra={"actor_id": identity.id, "count": len(created)},
    )
    return {"created": created, "failed": failed}


async def update(db: AsyncSession, identity: Identity, objectif_id: int, payload: ObjectifUpdate) -> Objectif:
    obj = await load_objectif(db, objectif_id)
    owner = obj.user
    fields = payload.model_fields_set

    # Propriétaire, son BUM ou un ADMIN
    if identity.id != owner.id:
        require_manager_of(identity, owner)

    # Validation : ADMIN ou BUM du propriétaire uniquement (vérifié avant toute modification)
    if "validatedbyadmin" in fields and not is_manager_of(identity, owner):
        raise forbidden("VALIDATION_RESERVED", "forbidden: only an admin or the consultant's manager can validate")

    if "categorie_id" in fields:
        await check_category_usable(db, identity, payload.categorie_id, owner.id)
        obj.categorie_id = payload.categorie_id

    if "description" in fields and payload.description is not None:
        obj.description = _clean_description(payload.description)
    if "status" in fields and payload.status is not None:
        obj.status = payload.status.strip() or obj.status
    if "annee" in fields and payload.annee is not None:
        obj.annee = payload.annee
    if "validatedbyadmin" in fields and payload.validatedbyadmin is not None:
        obj.validatedbyadmin = payload.validatedbyadmin

    await commit(db)

    log.info(
        "objectif_updated",
        extra={"actor_id": identity.id, "actor_role": identity.role, "objectif_id": obj.id},
    )
    return await load_objectif(db, obj.id)


async def review_by_bum(db: AsyncSession, identity: Identity, objectif_id: int, payload: BumObjectifReview) -> Objectif:
    """Revue BUM : validation / statut, plus un commentaire optionnel signé par le BUM."""
    require_role(identity, Role.BUM)
    obj = await load_objectif(db, objectif_id)
    require_manager_of(identity, obj.user)

    fields = payload.model_fields_set
    if "validatedbyadmin" in fields and payload.validatedbyadmin is not None:
        obj.validatedbyadmin = payload.validatedbyadmin
    if payload.status:
        obj.status = payload.status.strip() or obj.status
    if payload.commentaire and payload.commentaire.strip():
        db.add(Commentaire(contenu=payload.commentaire.strip(), objectif_id=obj.id, user_id=identity.id))

    await commit(db)
    log.info("objectif_reviewed", extra={"actor_id": identity.id, "objectif_id": obj.id})
    return await load_objectif_detail(db, obj.id)


async def remove(db: AsyncSession, identity: Identity, objectif_id: int) -> None:
    require_any_role(identity, (Role.ADMIN, Role.BUM))
    obj = await load_objectif(db, objectif_id)
    require_manager_of(identity, obj.user)

    await db.execute(delete(Commentaire).where(Commentaire.objectif_id == obj.id))
    await db.delete(obj)
    await commit(db)
    log.info("objectif_deleted", extra={"actor_id": identity.id, "objectif_id": objectif_id})
