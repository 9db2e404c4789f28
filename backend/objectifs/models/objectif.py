from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from objectifs.db.base import Base, utcnow

"""
Model Objectif.

Rôle (fonctionnel) :
- Objectif annuel d’un utilisateur (description, statut libre, année).
- validatedbyadmin : validation par un admin ou par le BUM du propriétaire.
- Catégorie optionnelle (mise à NULL si la catégorie disparaît).

Relations :
- Objectif -> User (propriétaire, suppression en cascade).
- Objectif -> Categorie (optionnelle).
- Objectif 1..N Commentaire (suppression en cascade).
"""

STATUS_EN_COURS = "En cours"
STATUS_VALIDE = "Validé"


class Objectif(Base):
    __tablename__ = "objectifs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Statut libre (valeurs observées : "En cours", "Validé")
    status: Mapped[str] = mapped_column(String(50), nullable=False, default=STATUS_EN_COURS)

    validatedbyadmin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    annee: Mapped[int] = mapped_column(Integer, nullable=False)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    categorie_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="objectifs")
    categorie = relationship("Categorie", back_populates="objectifs")
    commentaires = relationship(
        "Commentaire",
        back_populates="objectif",
        passive_deletes=True,
        order_by="Commentaire.created_at.desc()",
    )

    # Listes “mes objectifs de l’année” et “objectifs de mon équipe”
    __table_args__ = (
        Index("ix_objectifs_user_annee", "user_id", "annee"),
    )
