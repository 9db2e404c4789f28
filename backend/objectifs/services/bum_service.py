from __future__ import annotations

import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from objectifs.core.errors import not_found
from objectifs.core.permissions import require_manager_of, require_role
from objectifs.core.security import Identity
from objectifs.models import STATUS_EN_COURS, BusinessUnit, Commentaire, Objectif, Role, User
from objectifs.schemas.business_units import BumStatsOut

"""
BUM Service (espace manager).

Rôle (fonctionnel) :
- Statistiques du tableau de bord BUM, calculées en SQL sur ses consultants (bum_id == BUM) :
  - totalConsultants, totalObjectifs
  - objectifsValides (validatedbyadmin = true), objectifsEnCours (status = "En cours")
  - tauxValidation : pourcentage entier des objectifs validés (0 si aucun objectif)
- Sa Business Unit avec la liste des membres.
- Ses consultants (BU, manager, résumé des objectifs) et le détail des objectifs d’un consultant.
"""

log = logging.getLogger("objectifs.bum")


def validation_rate(valides: int, total: int) -> int:
    """Arrondi au plus proche, .5 vers le haut (0 si total nul)."""
    if total <= 0:
        return 0
    return int(valides * 100 / total + 0.5)


async def get_stats(db: AsyncSession, identity: Identity) -> BumStatsOut:
    require_role(identity, Role.BUM)

    team = select(User.id).where(User.bum_id == identity.id)

    consultants_stmt = select(func.count(User.id)).where(User.bum_id == identity.id)
    total_stmt = select(func.count(Objectif.id)).where(Objectif.user_id.in_(team))
    valides_stmt = (
        select(func.count(Objectif.id))
        .where(Objectif.user_id.in_(team), Objectif.validatedbyadmin.is_(True))
    )
    en_cours_stmt = (
        select(func.count(Objectif.id))
        .where(Objectif.user_id.in_(team), Objectif.status == STATUS_EN_COURS)
    )

    total_consultants = int((await db.execute(consultants_stmt)).scalar_one() or 0)
    total_objectifs = int((await db.execute(total_stmt)).scalar_one() or 0)
    objectifs_valides = int((await db.execute(valides_stmt)).scalar_one() or 0)
    objectifs_en_cours = int((await db.execute(en_cours_stmt)).scalar_one() or 0)

    return BumStatsOut(
        total_consultants=total_consultants,
        total_objectifs=total_objectifs,
        objectifs_valides=objectifs_valides,
        objectifs_en_cours=objectifs_en_cours,
        taux_validation=validation_rate(objectifs_valides, total_objectifs),
    )


async def get_my_business_unit(db: AsyncSession, identity: Identity) -> BusinessUnit:
    require_role(identity, Role.BUM)

    business_unit_id = (
        await db.execute(select(User.business_unit_id).where(User.id == identity.id))
    ).scalar_one_or_none()
    if business_unit_id is None:
        raise not_found("business unit")

    stmt = (
        select(BusinessUnit)
        .where(BusinessUnit.id == business_unit_id)
        .options(selectinload(BusinessUnit.users))
        .execution_options(populate_existing=True)
    )
    bu = (await db.execute(stmt)).scalars().first()
    if bu is None:
        raise not_found("business unit")
    return bu


async def list_consultants(db: AsyncSession, identity: Identity) -> List[User]:
    require_role(identity, Role.BUM)
    stmt = (
        select(User)
        .where(User.bum_id == identity.id, User.role == Role.CONSULTANT.value)
        .options(
            selectinload(User.business_unit),
            selectinload(User.bum),
            selectinload(User.objectifs),
        )
        .order_by(User.username)
    )
    return list((await db.execute(stmt)).scalars().all())


async def list_consultant_objectifs(db: AsyncSession, identity: Identity, consultant_id: int) -> dict:
    """Objectifs d’un consultant du BUM (toutes années), commentaires inclus."""
    require_role(identity, Role.BUM)

    consultant = (
        await db.execute(select(User).where(User.id == consultant_id).execution_options(populate_existing=True))
    ).scalars().first()
    if consultant is None:
        raise not_found("user")
    require_manager_of(identity, consultant)

    stmt = (
        select(Objectif)
        .where(Objectif.user_id == consultant.id)
        .options(
            selectinload(Objectif.categorie),
            selectinload(Objectif.user),
            selectinload(Objectif.commentaires).selectinload(Commentaire.user),
        )
        .order_by(Objectif.annee.desc(), Objectif.created_at.desc(), Objectif.id.desc())
    )
    objectifs = list((await db.execute(stmt)).scalars().all())
    return {"consultant": consultant, "objectifs": objectifs}
