from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from objectifs.db.base import Base, utcnow

"""
Model Categorie.

Rôle (fonctionnel) :
- Étiquette appliquée aux objectifs (nom, couleur d’affichage, icône, ordre).
- user_id NULL : catégorie globale (partagée, gérée par les admins).
- user_id renseigné : catégorie privée, utilisable uniquement par son propriétaire (ou un admin).
"""


class Categorie(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    nom: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Couleur hex (#RRGGBB), tirée de la palette par défaut si absente
    couleur: Mapped[str] = mapped_column(String(20), nullable=False)

    # Propriétaire (NULL = globale)
    user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    ordre: Mapped[int | None] = mapped_column(Integer, nullable=True)
    icone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User")
    objectifs = relationship("Objectif", back_populates="categorie", passive_deletes=True)

    @property
    def is_global(self) -> bool:
        return self.user_id is None
