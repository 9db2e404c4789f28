from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from objectifs.schemas.common import ApiIn, ApiOut, UserRef

"""
Schemas Commentaires (Pydantic).
"""


class CommentaireIn(ApiIn):
    # Contenu obligatoire (un contenu fait uniquement d’espaces est refusé par le service)
    contenu: str = Field(min_length=1, max_length=5000)


class CommentaireOut(ApiOut):
    id: int
    contenu: str
    objectif_id: int = Field(alias="objectifId")
    user_id: int = Field(alias="userid")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    user: Optional[UserRef] = None
