from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from objectifs.models.user import Role
from objectifs.schemas.common import ApiIn, ApiOut, BusinessUnitRef, UserRef

"""
Schemas Users / Auth (Pydantic).

Rôle (fonctionnel) :
- Contrat HTTP des comptes : inscription, connexion, gestion admin, création par un BUM.
- Le mot de passe n’apparaît que dans les entrées, jamais dans les sorties.
"""


class UserOut(ApiOut):
    """Sortie API d’un utilisateur (sans mot de passe), avec sa BU."""
    id: int
    username: str
    role: str
    email: Optional[str] = None
    business_unit_id: Optional[int] = Field(default=None, alias="businessUnitId")
    bum_id: Optional[int] = Field(default=None, alias="bumId")
    created_at: datetime = Field(alias="createdAt")
    business_unit: Optional[BusinessUnitRef] = Field(default=None, alias="businessUnit")


class ObjectifSummary(ApiOut):
    id: int
    description: str
    status: str
    validatedbyadmin: bool
    annee: int


class ConsultantOut(UserOut):
    """Consultant vu par son BUM : manager + résumé des objectifs."""
    bum: Optional[UserRef] = None
    objectifs: List[ObjectifSummary] = []


class RegisterIn(ApiIn):
    username: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1, max_length=128)
    role: Optional[Role] = None
    email: Optional[str] = Field(default=None, max_length=255)


class LoginIn(ApiIn):
    username: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1, max_length=128)


class LoginOut(ApiOut):
    token: str
    token_type: str = "bearer"
    user: UserOut


class UserCreate(ApiIn):
    """Création directe par un ADMIN."""
    username: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1, max_length=128)
    role: Role = Role.CONSULTANT
    email: Optional[str] = Field(default=None, max_length=255)
    business_unit_id: Optional[int] = Field(default=None, alias="businessUnitId")
    bum_id: Optional[int] = Field(default=None, alias="bumId")


class UserUpdate(ApiIn):
    """Mise à jour partielle par un ADMIN (seuls les champs fournis sont appliqués)."""
    username: Optional[str] = Field(default=None, min_length=1, max_length=150)
    password: Optional[str] = Field(default=None, min_length=1, max_length=128)
    role: Optional[Role] = None
    email: Optional[str] = Field(default=None, max_length=255)
    business_unit_id: Optional[int] = Field(default=None, alias="businessUnitId")
    bum_id: Optional[int] = Field(default=None, alias="bumId")


class ConsultantCreate(ApiIn):
    """Création d’un consultant par son BUM (mot de passe généré si absent)."""
    username: str = Field(min_length=1, max_length=150)
    password: Optional[str] = Field(default=None, max_length=128)
    email: Optional[str] = Field(default=None, max_length=255)
