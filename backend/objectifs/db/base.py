from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase

"""
DB Base.

Rôle (fonctionnel) :
- Définit la classe Base SQLAlchemy commune à tous les modèles ORM.
- Sert de point d’ancrage pour la déclaration des tables (models/*), la création
  de schéma (Alembic, tests) et l’introspection ORM.

Note :
- Tous les modèles doivent hériter de Base pour être enregistrés dans la metadata.
"""


def utcnow() -> datetime:
    """Horodatage UTC (valeur par défaut des colonnes created_at / updated_at)."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Classe racine ORM (SQLAlchemy Declarative)."""
    pass
