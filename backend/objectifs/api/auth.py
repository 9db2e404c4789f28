from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from objectifs.api.deps import CurrentIdentity, get_optional_identity
from objectifs.core.rate_limit import login_rate_limiter
from objectifs.core.security import Identity, create_access_token
from objectifs.db.session import get_db
from objectifs.schemas.users import LoginIn, LoginOut, RegisterIn, UserOut
from objectifs.services import users_service

"""
API Auth.

Rôle (fonctionnel) :
- Inscription (POST /auth/register) : compte CONSULTANT ouvert à tous ; rôles BUM/ADMIN
  réservés à un ADMIN (sauf premier compte de la base).
- Connexion (POST /auth/login) : token JWT + utilisateur ; tentatives limitées par IP.
- Profil courant (GET /auth/me).
"""

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserOut, status_code=201)
async def register(
    payload: RegisterIn,
    db: AsyncSession = Depends(get_db),
    caller: Optional[Identity] = Depends(get_optional_identity),
):
    return await users_service.register(db, caller, payload)


@router.post("/login", response_model=LoginOut)
async def login(payload: LoginIn, request: Request, db: AsyncSession = Depends(get_db)):
    login_rate_limiter.check(request)

    user = await users_service.authenticate(db, payload.username, payload.password)
    token = create_access_token(user.id, user.username, user.role)
    return {"token": token, "token_type": "bearer", "user": user}


@router.get("/me", response_model=UserOut)
async def me(identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    return await users_service.get_user(db, identity, identity.id)
