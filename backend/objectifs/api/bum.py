from __future__ import annotations

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from objectifs.api.deps import CurrentIdentity
from objectifs.core.security import Identity
from objectifs.db.session import get_db
from objectifs.schemas.business_units import BumStatsOut, BusinessUnitDetailOut
from objectifs.schemas.common import MessageOut
from objectifs.schemas.objectifs import BumObjectifReview, ConsultantObjectifsOut, ObjectifDetailOut
from objectifs.schemas.users import ConsultantCreate, ConsultantOut, UserOut
from objectifs.services import bum_service, objectifs_service, users_service
from objectifs.services.notification_service import Notifier, get_notifier, schedule_welcome_email

"""
API BUM (espace Business Unit Manager).

Rôle (fonctionnel) :
- Tableau de bord : statistiques agrégées, Business Unit et membres.
- Consultants : liste, création (email de bienvenue en tâche de fond), suppression.
- Objectifs d’un consultant et revue d’un objectif (validation + commentaire).

Toutes les routes exigent le rôle BUM (vérifié par les services).
"""

router = APIRouter(prefix="/bum", tags=["bum"])


@router.get("/stats", response_model=BumStatsOut)
async def stats(identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    return await bum_service.get_stats(db, identity)


@router.get("/my-bu", response_model=BusinessUnitDetailOut)
async def my_business_unit(identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    return await bum_service.get_my_business_unit(db, identity)


@router.get("/consultants", response_model=List[ConsultantOut])
async def list_consultants(identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    return await bum_service.list_consultants(db, identity)


@router.post("/consultants", response_model=UserOut, status_code=201)
async def create_consultant(
    payload: ConsultantCreate,
    background_tasks: BackgroundTasks,
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    consultant, password = await users_service.create_consultant_under_bum(db, identity, payload)

    # Le compte est déjà commité : un échec d’envoi ne change pas la réponse
    schedule_welcome_email(
        background_tasks,
        notifier,
        email=consultant.email,
        username=consultant.username,
        password=password,
    )
    return consultant


@router.delete("/consultants/{consultant_id}", response_model=MessageOut)
async def delete_consultant(consultant_id: int, identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    await users_service.delete_own_consultant(db, identity, consultant_id)
    return {"message": "consultant deleted"}


@router.get("/consultants/{consultant_id}/objectifs", response_model=ConsultantObjectifsOut)
async def consultant_objectifs(
    consultant_id: int,
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    return await bum_service.list_consultant_objectifs(db, identity, consultant_id)


@router.patch("/objectifs/{objectif_id}", response_model=ObjectifDetailOut)
async def review_objectif(
    objectif_id: int,
    payload: BumObjectifReview,
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    return await objectifs_service.review_by_bum(db, identity, objectif_id, payload)
