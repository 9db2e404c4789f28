from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from objectifs.schemas.common import ApiIn, ApiOut

"""
Schemas Catégories (Pydantic).

Notes :
- userid NULL en sortie = catégorie globale (isGlobal=true).
- nbObjectifs : nombre d’objectifs qui référencent la catégorie (bloque la suppression si > 0).
"""

_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class CategorieOut(ApiOut):
    id: int
    nom: str
    description: Optional[str] = None
    couleur: str
    user_id: Optional[int] = Field(default=None, alias="userid")
    ordre: Optional[int] = None
    icone: Optional[str] = None
    is_global: bool = Field(default=False, alias="isGlobal")
    created_at: datetime = Field(alias="createdAt")
    nb_objectifs: int = Field(default=0, alias="nbObjectifs")


class CategorieCreate(ApiIn):
    nom: str = Field(min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=2000)
    couleur: Optional[str] = Field(default=None, pattern=_COLOR_PATTERN)
    is_global: bool = Field(default=False, alias="isGlobal")
    # BUM / ADMIN : création pour le compte d’un consultant
    consultant_id: Optional[int] = Field(default=None, alias="consultantId")
    ordre: Optional[int] = None
    icone: Optional[str] = Field(default=None, max_length=50)


class CategorieUpdate(ApiIn):
    nom: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=2000)
    couleur: Optional[str] = Field(default=None, pattern=_COLOR_PATTERN)
    ordre: Optional[int] = None
    icone: Optional[str] = Field(default=None, max_length=50)
