from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from objectifs.api.deps import CurrentIdentity
from objectifs.core.security import Identity
from objectifs.db.session import get_db
from objectifs.schemas.categories import CategorieCreate, CategorieOut, CategorieUpdate
from objectifs.schemas.common import MessageOut
from objectifs.services import categories_service

"""
API Catégories.

Rôle (fonctionnel) :
- Liste (globales + privées visibles), avec ?consultantId= pour un BUM / ADMIN.
- CRUD ; la suppression est refusée si des objectifs utilisent encore la catégorie.
"""

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=List[CategorieOut])
async def list_categories(
    consultant_id: Optional[int] = Query(None, alias="consultantId"),
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    return await categories_service.list_categories(db, identity, consultant_id)


@router.get("/{categorie_id}", response_model=CategorieOut)
async def get_categorie(categorie_id: int, identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    return await categories_service.get_categorie(db, identity, categorie_id)


@router.post("", response_model=CategorieOut, status_code=201)
async def create_categorie(
    payload: CategorieCreate,
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    return await categories_service.create_categorie(db, identity, payload)


@router.put("/{categorie_id}", response_model=CategorieOut)
async def update_categorie(
    categorie_id: int,
    payload: CategorieUpdate,
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    return await categories_service.update_categorie(db, identity, categorie_id, payload)


@router.delete("/{categorie_id}", response_model=MessageOut)
async def delete_categorie(categorie_id: int, identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    await categories_service.delete_categorie(db, identity, categorie_id)
    return {"message": "categorie deleted"}
