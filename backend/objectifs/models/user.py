from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from objectifs.db.base import Base, utcnow

"""
Model User.

Rôle (fonctionnel) :
- Compte applicatif : ADMIN, BUM (Business Unit Manager) ou CONSULTANT.
- Un consultant est rattaché à un BUM (bum_id) et à une Business Unit (business_unit_id).
- Le mot de passe est stocké haché (jamais renvoyé par l’API).

Relations :
- User -> BusinessUnit (N..1, nullable).
- User -> User (bum : le manager assigné, auto-référence nullable).
- User 1..N Objectif, 1..N Categorie (privées), 1..N Commentaire (auteur).
"""


class Role(str, Enum):
    """Rôles applicatifs (hiérarchie ADMIN > BUM > CONSULTANT)."""
    ADMIN = "ADMIN"
    BUM = "BUM"
    CONSULTANT = "CONSULTANT"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(String(150), nullable=False, unique=True, index=True)

    # Hash passlib (pbkdf2_sha256)
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(String(20), nullable=False, default=Role.CONSULTANT.value, index=True)

    # Adresse d’envoi des identifiants (optionnelle)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    business_unit_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("business_units.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Manager assigné (doit être un BUM)
    bum_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    business_unit = relationship("BusinessUnit", back_populates="users", foreign_keys=[business_unit_id])
    bum = relationship("User", remote_side=[id], foreign_keys=[bum_id])
    objectifs = relationship("Objectif", back_populates="user", passive_deletes=True)
