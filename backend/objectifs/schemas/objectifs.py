from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, Field

from objectifs.schemas.commentaires import CommentaireOut
from objectifs.schemas.common import ApiIn, ApiOut, CategorieRef, UserRef

"""
Schemas Objectifs (Pydantic).

Rôle (fonctionnel) :
- Création (pour soi, pour un consultant, pour plusieurs consultants).
- Mise à jour partielle : seuls les champs présents dans le JSON sont appliqués
  (categorieId: null détache la catégorie, un champ absent ne change rien).
- Sorties : objectif + catégorie + propriétaire, et variante détaillée avec commentaires.
"""

_YEAR = dict(ge=1900, le=2200)


class ObjectifOut(ApiOut):
    id: int
    description: str
    status: str
    validatedbyadmin: bool
    annee: int
    user_id: int = Field(alias="userid")
    categorie_id: Optional[int] = Field(default=None, alias="categorieId")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    categorie: Optional[CategorieRef] = None
    user: Optional[UserRef] = None


class ObjectifDetailOut(ObjectifOut):
    commentaires: List[CommentaireOut] = []


class ObjectifCreate(ApiIn):
    description: str = Field(min_length=1, max_length=5000)
    annee: Optional[int] = Field(default=None, **_YEAR)
    categorie_id: Optional[int] = Field(default=None, alias="categorieId")


class ObjectifCreateForUser(ObjectifCreate):
    # Le front historique envoie userId ou userid
    user_id: int = Field(validation_alias=AliasChoices("userId", "userid", "user_id"))


class ObjectifBatchCreate(ObjectifCreate):
    user_ids: List[int] = Field(min_length=1, validation_alias=AliasChoices("userIds", "userids", "user_ids"))


class BatchFailure(ApiOut):
    user_id: int = Field(alias="userId")
    error: str


class ObjectifBatchOut(ApiOut):
    created: List[ObjectifOut] = []
    failed: List[BatchFailure] = []


class ObjectifUpdate(ApiIn):
    description: Optional[str] = Field(default=None, min_length=1, max_length=5000)
    status: Optional[str] = Field(default=None, min_length=1, max_length=50)
    categorie_id: Optional[int] = Field(default=None, alias="categorieId")
    validatedbyadmin: Optional[bool] = None
    annee: Optional[int] = Field(default=None, **_YEAR)


class BumObjectifReview(ApiIn):
    """Revue d’un objectif par le BUM : validation, statut et commentaire optionnel."""
    validatedbyadmin: Optional[bool] = None
    status: Optional[str] = Field(default=None, min_length=1, max_length=50)
    commentaire: Optional[str] = Field(default=None, max_length=5000)


class ConsultantObjectifsOut(ApiOut):
    consultant: UserRef
    objectifs: List[ObjectifDetailOut] = []
