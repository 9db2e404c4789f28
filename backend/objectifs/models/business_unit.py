from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from objectifs.db.base import Base, utcnow

"""
Model BusinessUnit.

Rôle (fonctionnel) :
- Regroupement organisationnel des utilisateurs (consultants + leur BUM).
- Le BUM d’une BU est l’utilisateur de rôle BUM dont business_unit_id pointe sur elle.

Relation :
- BusinessUnit 1..N User (via users.business_unit_id, mis à NULL si la BU est supprimée).
"""


class BusinessUnit(Base):
    __tablename__ = "business_units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    nom: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Membres (chargés explicitement via selectinload : pas de lazy-load en async)
    users = relationship(
        "User",
        back_populates="business_unit",
        foreign_keys="User.business_unit_id",
        passive_deletes=True,
    )
