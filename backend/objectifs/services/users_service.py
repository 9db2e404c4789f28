from __future__ import annotations

import logging
import secrets
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from objectifs.core.errors import AppHTTPException, bad_request, conflict, forbidden, invalid_credential, not_found
from objectifs.core.permissions import (
    is_admin,
    require_any_role,
    require_role,
    require_view_user_resources,
)
from objectifs.core.security import Identity, hash_password, verify_password
from objectifs.core.settings import settings
from objectifs.models import BusinessUnit, Categorie, Commentaire, Objectif, Role, User
from objectifs.schemas.users import ConsultantCreate, RegisterIn, UserCreate, UserUpdate
from objectifs.services.persistence import commit

"""
Users Service.

Rôle (fonctionnel) :
- Inscription / connexion (vérification du mot de passe haché).
- Gestion des comptes par un ADMIN (liste, création, mise à jour, suppression).
- Création d’un consultant par son BUM (rattachement forcé au BUM et à sa BU).
- Suppression en cascade explicite (commentaires, objectifs, catégories privées).

Notes :
- Le mot de passe n’est jamais renvoyé ; le mot de passe en clair n’est retourné qu’au
  moment de la création d’un consultant, pour l’email de bienvenue.
- Toute vérification d’accès relit l’état courant (aucun cache d’autorisation).
"""

log = logging.getLogger("objectifs.users")

USERNAME_TAKEN = "conflict: username taken"


def _user_options():
    return (selectinload(User.business_unit),)


def check_password_policy(password: str) -> None:
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        raise bad_request(f"password must be at least {settings.PASSWORD_MIN_LENGTH} characters")


def generate_password(length: int = 12) -> str:
    """Mot de passe initial aléatoire (envoyé par email au consultant)."""
    return secrets.token_urlsafe(length)[:length]


def _clean_username(username: str) -> str:
    value = username.strip()
    if not value:
        raise bad_request("username is required")
    return value


async def load_user(db: AsyncSession, user_id: int, *, with_relations: bool = True) -> User:
    stmt = select(User).where(User.id == user_id).execution_options(populate_existing=True)
    if with_relations:
        stmt = stmt.options(*_user_options())
    user = (await db.execute(stmt)).scalars().first()
    if user is None:
        raise not_found("user")
    return user


async def _ensure_username_free(db: AsyncSession, username: str, exclude_id: Optional[int] = None) -> None:
    stmt = select(User.id).where(User.username == username)
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise conflict(USERNAME_TAKEN)


async def _validate_links(db: AsyncSession, business_unit_id: Optional[int], bum_id: Optional[int]) -> None:
    """Vérifie la BU (doit exister) et le manager (doit exister et être BUM)."""
    if business_unit_id is not None and await db.get(BusinessUnit, business_unit_id) is None:
        raise not_found("business unit")
    if bum_id is not None:
        role = (await db.execute(select(User.role).where(User.id == bum_id))).scalar_one_or_none()
        if role is None:
            raise not_found("manager")
        if role != Role.BUM.value:
            raise bad_request("bumId must reference a user with role BUM")


async def authenticate(db: AsyncSession, username: str, password: str) -> User:
    stmt = select(User).where(User.username == username.strip()).options(*_user_options())
    user = (await db.execute(stmt)).scalars().first()
    if user is None or not verify_password(password, user.password):
        log.info("login_failed")
        raise invalid_credential("invalid credentials")
    log.info("login_ok", extra={"actor_id": user.id, "actor_role": user.role})
    return user


async def register(db: AsyncSession, caller: Optional[Identity], payload: RegisterIn) -> User:
    """
    Inscription publique.

    - Sans rôle (ou CONSULTANT) : ouverte à tous.
    - Rôle BUM / ADMIN : réservé à un ADMIN authentifié, sauf pour le tout premier compte
      (base vide) qui peut s'auto-déclarer ADMIN.
    """
    role = (payload.role or Role.CONSULTANT).value
    if role != Role.CONSULTANT.value and not (caller is not None and is_admin(caller)):
        total = (await db.execute(select(func.count(User.id)))).scalar_one()
        if total > 0:
            raise forbidden("ROLE_REQUIRED", "forbidden: only an admin can register elevated roles")

    username = _clean_username(payload.username)
    check_password_policy(payload.password)
    await _ensure_username_free(db, username)

    user = User(username=username, password=hash_password(payload.password), role=role, email=payload.email)
    db.add(user)
    await commit(db, conflict_message=USERNAME_TAKEN)

    log.info("user_registered", extra={"target_id": user.id, "actor_role": role})
    return await load_user(db, user.id)


async def list_all_users(db: AsyncSession, identity: Identity) -> List[User]:
    require_role(identity, Role.ADMIN)
    stmt = select(User).options(*_user_options()).order_by(User.id)
    return list((await db.execute(stmt)).scalars().all())


async def list_my_team(db: AsyncSession, identity: Identity) -> List[User]:
    require_any_role(identity, (Role.ADMIN, Role.BUM))
    stmt = select(User).where(User.role == Role.CONSULTANT.value)
    if not is_admin(identity):
        stmt = stmt.where(User.bum_id == identity.id)
    stmt = stmt.options(*_user_options()).order_by(User.username)
    return list((await db.execute(stmt)).scalars().all())


async def get_user(db: AsyncSession, identity: Identity, user_id: int) -> User:
    user = await load_user(db, user_id)
    require_view_user_resources(identity, user)
    return user


async def create_user(db: AsyncSession, identity: Identity, payload: UserCreate) -> User:
    require_role(identity, Role.ADMIN)

    username = _clean_username(payload.username)
    check_password_policy(payload.password)
    await _ensure_username_free(db, username)
    await _validate_links(db, payload.business_unit_id, payload.bum_id)

    user = User(
        username=username,
        password=hash_password(payload.password),
        role=payload.role.value,
        email=payload.email,
        business_unit_id=payload.business_unit_id,
        bum_id=payload.bum_id,
    )
    db.add(user)
    await commit(db, conflict_message=USERNAME_TAKEN)

    log.info("user_created", extra={"actor_id": identity.id, "target_id": user.id, "actor_role": identity.role})
    return await load_user(db, user.id)


async def create_consultant_under_bum(
    db: AsyncSession, identity: Identity, payload: ConsultantCreate
) -> Tuple[User, str]:
    """Crée un consultant rattaché au BUM appelant ; retourne (consultant, mot de passe en clair)."""
    require_role(identity, Role.BUM)

    business_unit_id = (
        await db.execute(select(User.business_unit_id).where(User.id == identity.id))
    ).scalar_one_or_none()
    if business_unit_id is None:
        raise AppHTTPException(
            400,
            "PRECONDITION_FAILED",
            "precondition failed: manager unassigned to a business unit",
        )

    username = _clean_username(payload.username)
    password = payload.password or generate_password()
    check_password_policy(password)
    await _ensure_username_free(db, username)

    consultant = User(
        username=username,
        password=hash_password(password),
        role=Role.CONSULTANT.value,
        email=payload.email,
        business_unit_id=business_unit_id,
        bum_id=identity.id,
    )
    db.add(consultant)
    await commit(db, conflict_message=USERNAME_TAKEN)

    log.info("consultant_created", extra={"actor_id": identity.id, "target_id": consultant.id})
    return await load_user(db, consultant.id), password


async def update_user(db: AsyncSession, identity: Identity, user_id: int, payload: UserUpdate) -> User:
    require_role(identity, Role.ADMIN)
    user = await load_user(db, user_id, with_relations=False)
    fields = payload.model_fields_set

    if "username" in fields and payload.username is not None:
        username = _clean_username(payload.username)
        await _ensure_username_free(db, username, exclude_id=user.id)
        user.username = username

    if "password" in fields and payload.password:
        check_password_policy(payload.password)
        user.password = hash_password(payload.password)

    if "role" in fields and payload.role is not None:
        if user.role == Role.BUM.value and payload.role != Role.BUM:
            # Un ancien BUM ne manage plus personne
            await db.execute(update(User).where(User.bum_id == user.id).values(bum_id=None))
        user.role = payload.role.value

    if "email" in fields:
        user.email = payload.email

    if "business_unit_id" in fields or "bum_id" in fields:
        await _validate_links(
            db,
            payload.business_unit_id if "business_unit_id" in fields else None,
            payload.bum_id if "bum_id" in fields else None,
        )
        if "business_unit_id" in fields:
            user.business_unit_id = payload.business_unit_id
        if "bum_id" in fields:
            if payload.bum_id is not None and payload.bum_id == user.id:
                raise bad_request("a user cannot be their own manager")
            user.bum_id = payload.bum_id

    await commit(db, conflict_message=USERNAME_TAKEN)
    log.info("user_updated", extra={"actor_id": identity.id, "target_id": user.id})
    return await load_user(db, user.id)


async def purge_user(db: AsyncSession, user_id: int) -> None:
    """
    Supprime un utilisateur et ses dépendances, dans l’ordre des clés étrangères.

    Les FK déclarent aussi ON DELETE, mais tous les moteurs ne les appliquent pas
    (SQLite sans PRAGMA foreign_keys) : la cascade est donc faite explicitement.
    """
    own_objectifs = select(Objectif.id).where(Objectif.user_id == user_id)
    own_categories = select(Categorie.id).where(Categorie.user_id == user_id)

    await db.execute(
        delete(Commentaire).where(
            or_(Commentaire.user_id == user_id, Commentaire.objectif_id.in_(own_objectifs))
        )
    )
    await db.execute(delete(Objectif).where(Objectif.user_id == user_id))
    await db.execute(
        update(Objectif).where(Objectif.categorie_id.in_(own_categories)).values(categorie_id=None)
    )
    await db.execute(delete(Categorie).where(Categorie.user_id == user_id))
    await db.execute(update(User).where(User.bum_id == user_id).values(bum_id=None))
    await db.execute(delete(User).where(User.id == user_id))


async def delete_user(db: AsyncSession, identity: Identity, user_id: int) -> None:
    """ADMIN : tout compte sauf le sien. BUM : uniquement ses propres consultants."""
    require_any_role(identity, (Role.ADMIN, Role.BUM))

    target = (
        await db.execute(select(User.id, User.role, User.bum_id).where(User.id == user_id))
    ).first()
    if target is None:
        raise not_found("user")

    if is_admin(identity):
        if target.id == identity.id:
            raise bad_request("an admin cannot delete their own account")
    else:
        if target.bum_id != identity.id:
            raise forbidden("NOT_YOURS", "forbidden: not yours")
        if target.role != Role.CONSULTANT.value:
            raise forbidden("NOT_A_CONSULTANT", "forbidden: not a consultant")

    await purge_user(db, user_id)
    await commit(db)
    log.info("user_deleted", extra={"actor_id": identity.id, "actor_role": identity.role, "target_id": user_id})


async def delete_own_consultant(db: AsyncSession, identity: Identity, user_id: int) -> None:
    """Variante /bum/consultants : réservée au BUM, mêmes règles que delete_user."""
    require_role(identity, Role.BUM)
    await delete_user(db, identity, user_id)
