from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from objectifs.api.deps import CurrentIdentity
from objectifs.core.security import Identity
from objectifs.db.session import get_db
from objectifs.schemas.common import MessageOut
from objectifs.schemas.objectifs import (
    ObjectifBatchCreate,
    ObjectifBatchOut,
    ObjectifCreate,
    ObjectifCreateForUser,
    ObjectifDetailOut,
    ObjectifOut,
    ObjectifUpdate,
)
from objectifs.services import objectifs_service

"""
API Objectifs.

Rôle (fonctionnel) :
- Mes objectifs (année courante ou année donnée), tous les objectifs (ADMIN / BUM).
- Création pour soi, pour un consultant (/admin) ou pour plusieurs (/admin/batch).
- Détail (avec commentaires), mise à jour partielle (PUT et PATCH), suppression.

Notes :
- Les routes fixes (/mine, /all, /admin) sont déclarées avant /{objectif_id}.
"""

router = APIRouter(prefix="/objectifs", tags=["objectifs"])


@router.get("/mine", response_model=List[ObjectifOut])
async def list_mine(identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    return await objectifs_service.list_mine(db, identity)


@router.get("/mine/{year}", response_model=List[ObjectifOut])
async def list_mine_for_year(
    year: int = Path(..., ge=1900, le=2200),
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    return await objectifs_service.list_mine(db, identity, year)


@router.get("/all", response_model=List[ObjectifOut])
async def list_all(
    annee: Optional[int] = Query(None, ge=1900, le=2200),
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    return await objectifs_service.list_all(db, identity, annee)


@router.post("", response_model=ObjectifOut, status_code=201)
async def create_objectif(payload: ObjectifCreate, identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    return await objectifs_service.create(db, identity, payload)


@router.post("/admin", response_model=ObjectifOut, status_code=201)
async def create_for_user(
    payload: ObjectifCreateForUser,
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    return await objectifs_service.create_for_user(db, identity, payload)


@router.post("/admin/batch", response_model=ObjectifBatchOut, status_code=201)
async def create_for_many_users(
    payload: ObjectifBatchCreate,
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    return await objectifs_service.create_for_many_users(db, identity, payload)


@router.get("/{objectif_id}", response_model=ObjectifDetailOut)
async def get_objectif(objectif_id: int, identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    return await objectifs_service.get_objectif(db, identity, objectif_id)


@router.put("/{objectif_id}", response_model=ObjectifOut)
@router.patch("/{objectif_id}", response_model=ObjectifOut)
async def update_objectif(
    objectif_id: int,
    payload: ObjectifUpdate,
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    return await objectifs_service.update(db, identity, objectif_id, payload)


@router.delete("/{objectif_id}", response_model=MessageOut)
async def delete_objectif(objectif_id: int, identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    await objectifs_service.remove(db, identity, objectif_id)
    return {"message": "objectif deleted"}
