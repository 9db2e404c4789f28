from __future__ import annotations

import logging
from typing import List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from objectifs.core.errors import bad_request, conflict, not_found
from objectifs.core.permissions import is_admin, require_any_role, require_role
from objectifs.core.security import Identity
from objectifs.models import BusinessUnit, Role, User
from objectifs.schemas.business_units import BusinessUnitIn
from objectifs.services.persistence import commit, get_or_404

"""
Business Units Service.

Rôle (fonctionnel) :
- ADMIN : lecture / écriture sans restriction (liste, création, renommage, suppression).
- BUM : lecture de sa propre BU uniquement.
- Suppression : les membres sont détachés (business_unit_id = NULL), jamais supprimés.
"""

log = logging.getLogger("objectifs.business_units")

NAME_TAKEN = "conflict: business unit name taken"


def _clean_nom(value: str) -> str:
    nom = value.strip()
    if not nom:
        raise bad_request("nom is required")
    return nom


async def _ensure_name_free(db: AsyncSession, nom: str, exclude_id: int | None = None) -> None:
    stmt = select(BusinessUnit.id).where(BusinessUnit.nom == nom)
    if exclude_id is not None:
        stmt = stmt.where(BusinessUnit.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise conflict(NAME_TAKEN)


async def _load_with_members(db: AsyncSession, business_unit_id: int) -> BusinessUnit:
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


async def list_business_units(db: AsyncSession, identity: Identity) -> List[BusinessUnit]:
    require_any_role(identity, (Role.ADMIN, Role.BUM))
    stmt = select(BusinessUnit).options(selectinload(BusinessUnit.users)).order_by(BusinessUnit.nom)
    if not is_admin(identity):
        if identity.business_unit_id is None:
            return []
        stmt = stmt.where(BusinessUnit.id == identity.business_unit_id)
    return list((await db.execute(stmt)).scalars().all())


async def create_business_unit(db: AsyncSession, identity: Identity, payload: BusinessUnitIn) -> BusinessUnit:
    require_role(identity, Role.ADMIN)
    nom = _clean_nom(payload.nom)
    await _ensure_name_free(db, nom)

    bu = BusinessUnit(nom=nom)
    db.add(bu)
    await commit(db, conflict_message=NAME_TAKEN)

    log.info("business_unit_created", extra={"actor_id": identity.id, "target_id": bu.id})
    return await _load_with_members(db, bu.id)


async def update_business_unit(
    db: AsyncSession, identity: Identity, business_unit_id: int, payload: BusinessUnitIn
) -> BusinessUnit:
    require_role(identity, Role.ADMIN)
    bu = await get_or_404(db, BusinessUnit, business_unit_id, "business unit")

    nom = _clean_nom(payload.nom)
    await _ensure_name_free(db, nom, exclude_id=bu.id)
    bu.nom = nom
    await commit(db, conflict_message=NAME_TAKEN)

    log.info("business_unit_updated", extra={"actor_id": identity.id, "target_id": bu.id})
    return await _load_with_members(db, bu.id)


async def delete_business_unit(db: AsyncSession, identity: Identity, business_unit_id: int) -> None:
    require_role(identity, Role.ADMIN)
    bu = await get_or_404(db, BusinessUnit, business_unit_id, "business unit")

    await db.execute(update(User).where(User.business_unit_id == bu.id).values(business_unit_id=None))
    await db.delete(bu)
    await commit(db)
    log.info("business_unit_deleted", extra={"actor_id": identity.id, "target_id": business_unit_id})
