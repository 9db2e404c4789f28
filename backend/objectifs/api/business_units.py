from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from objectifs.api.deps import CurrentIdentity
from objectifs.core.security import Identity
from objectifs.db.session import get_db
from objectifs.schemas.business_units import BusinessUnitDetailOut, BusinessUnitIn
from objectifs.schemas.common import MessageOut
from objectifs.services import business_units_service

"""
API Business Units.

Rôle (fonctionnel) :
- Lecture : ADMIN (toutes les BU) ou BUM (la sienne).
- Écriture (création, renommage, suppression) : ADMIN uniquement.
"""

router = APIRouter(prefix="/business-units", tags=["business-units"])


@router.get("", response_model=List[BusinessUnitDetailOut])
async def list_business_units(identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    return await business_units_service.list_business_units(db, identity)


@router.post("", response_model=BusinessUnitDetailOut, status_code=201)
async def create_business_unit(
    payload: BusinessUnitIn,
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    return await business_units_service.create_business_unit(db, identity, payload)


@router.put("/{business_unit_id}", response_model=BusinessUnitDetailOut)
async def update_business_unit(
    business_unit_id: int,
    payload: BusinessUnitIn,
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    return await business_units_service.update_business_unit(db, identity, business_unit_id, payload)


@router.delete("/{business_unit_id}", response_model=MessageOut)
async def delete_business_unit(
    business_unit_id: int,
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    await business_units_service.delete_business_unit(db, identity, business_unit_id)
    return {"message": "business unit deleted"}
