from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

"""
Schemas communs (références légères + base de configuration).

Les “Ref” sont les formes réduites imbriquées dans les autres réponses
(auteur d’un commentaire, BU d’un utilisateur, catégorie d’un objectif).
"""


class ApiOut(BaseModel):
    """Base des sorties : construction depuis l’ORM + sérialisation par alias."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ApiIn(BaseModel):
    """Base des entrées : alias ou nom Python acceptés, champs inconnus refusés."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class MessageOut(BaseModel):
    message: str


class UserRef(ApiOut):
    id: int
    username: str
    role: str


class BusinessUnitRef(ApiOut):
    id: int
    nom: str


class CategorieRef(ApiOut):
    id: int
    nom: str
    couleur: str
    icone: Optional[str] = None
