from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from objectifs.db.base import Base, utcnow

"""
Model Commentaire.

Rôle (fonctionnel) :
- Remarque horodatée d’un utilisateur sur un objectif (échanges consultant / BUM / admin).
- Seul `contenu` est modifiable après création ; objectif et auteur sont figés.
"""


class Commentaire(Base):
    __tablename__ = "commentaires"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    contenu: Mapped[str] = mapped_column(Text, nullable=False)

    objectif_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("objectifs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Auteur
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    objectif = relationship("Objectif", back_populates="commentaires")
    user = relationship("User")
