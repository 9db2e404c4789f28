from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from objectifs.api.deps import CurrentIdentity
from objectifs.core.security import Identity
from objectifs.db.session import get_db
from objectifs.schemas.commentaires import CommentaireIn, CommentaireOut
from objectifs.schemas.common import MessageOut
from objectifs.services import commentaires_service

"""
API Commentaires.

Rôle (fonctionnel) :
- Fil de discussion d’un objectif : lecture et ajout (/objectifs/{id}/commentaires).
- Modification et suppression d’un commentaire (/objectifs/commentaire/{id}).
"""

router = APIRouter(prefix="/objectifs", tags=["commentaires"])


@router.get("/{objectif_id}/commentaires", response_model=List[CommentaireOut])
async def list_commentaires(objectif_id: int, identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    return await commentaires_service.list_comments(db, identity, objectif_id)


@router.post("/{objectif_id}/commentaires", response_model=CommentaireOut, status_code=201)
async def add_commentaire(
    objectif_id: int,
    payload: CommentaireIn,
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    return await commentaires_service.add_comment(db, identity, objectif_id, payload.contenu)


@router.put("/commentaire/{commentaire_id}", response_model=CommentaireOut)
async def update_commentaire(
    commentaire_id: int,
    payload: CommentaireIn,
    identity: Identity = CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    return await commentaires_service.update_comment(db, identity, commentaire_id, payload.contenu)


@router.delete("/commentaire/{commentaire_id}", response_model=MessageOut)
async def delete_commentaire(commentaire_id: int, identity: Identity = CurrentIdentity, db: AsyncSession = Depends(get_db)):
    await commentaires_service.remove_comment(db, identity, commentaire_id)
    return {"message": "commentaire deleted"}
