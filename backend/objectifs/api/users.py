from __future__ import annotations

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from objectifs.api.deps import CurrentIdentity
from objectifs.core.security import Identity
from objectifs.db.session import get_db
from objectifs.models import Role
from objectifs.schemas.common import MessageOut
from objectifs.schemas.users import UserCreate, UserOut, UserUpdate
from objectifs.services import users_service
from objectifs.services.notification_service import Notifier, get_notifier, schedule_welcome_email

"""
API Users (gestion des comptes).

Rôle (fonctionnel) :
- ADMIN : liste complète, création, mise à jour, suppression (sauf son propre compte).
- ADMIN / BUM : “mon équipe” (tous les consultants pour un ADMIN, les siens pour un BUM).
- Lecture d’un compte : l’utilisateur lui-même, son BUM ou un ADMIN.
- DELETE ouvert au BUM pour ses propres consultants.
"""

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserOut])
async def list_users(identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    return await users_service.list_all_users(db, identity)


# Déclarée avant /{user_id} : "my-team" n’est pas un id
@router.get("/my-team", response_model=List[UserOut])
async def my_team(identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    return await users_service.list_my_team(db, identity)


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: int, identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    return await users_service.get_user(db, identity, user_id)


@router.post("", response_model=UserOut, status_code=201)
async def create_user(
    payload: UserCreate,
    background_tasks: BackgroundTasks,
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    user = await users_service.create_user(db, identity, payload)

    # Email de bienvenue après commit, sans bloquer la réponse
    if user.role == Role.CONSULTANT.value:
        schedule_welcome_email(
            background_tasks,
            notifier,
            email=user.email,
            username=user.username,
            password=payload.password,
        )
    return user


@router.put("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    return await users_service.update_user(db, identity, user_id, payload)


@router.delete("/{user_id}", response_model=MessageOut)
async def delete_user(user_id: int, identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    await users_service.delete_user(db, identity, user_id)
    return {"message": "user deleted"}
