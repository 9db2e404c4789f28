from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import Field

from objectifs.schemas.common import ApiIn, ApiOut, UserRef

"""
Schemas Business Units (Pydantic).
"""


class BusinessUnitIn(ApiIn):
    nom: str = Field(min_length=1, max_length=120)


class BusinessUnitOut(ApiOut):
    id: int
    nom: str
    created_at: datetime = Field(alias="createdAt")


class BusinessUnitDetailOut(BusinessUnitOut):
    """BU avec la liste de ses membres."""
    users: List[UserRef] = []


class BumStatsOut(ApiOut):
    """Indicateurs du tableau de bord BUM (agrégés sur ses consultants)."""
    total_consultants: int = Field(alias="totalConsultants")
    total_objectifs: int = Field(alias="totalObjectifs")
    objectifs_valides: int = Field(alias="objectifsValides")
    objectifs_en_cours: int = Field(alias="objectifsEnCours")
    taux_validation: int = Field(alias="tauxValidation")
