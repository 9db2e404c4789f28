"""
objectifs.models

Package ORM (SQLAlchemy) : définition des entités persistées en base.

- BusinessUnit : regroupement organisationnel, piloté par un BUM.
- User         : compte (ADMIN, BUM, CONSULTANT), rattaché à une BU et à un BUM.
- Categorie    : étiquette d’objectif, globale (user_id NULL) ou privée.
- Objectif     : objectif annuel d’un utilisateur.
- Commentaire  : remarque horodatée sur un objectif.

Importer ce package enregistre toutes les tables dans Base.metadata (Alembic, tests).
"""

from objectifs.models.business_unit import BusinessUnit
from objectifs.models.user import Role, User
from objectifs.models.categorie import Categorie
from objectifs.models.objectif import Objectif, STATUS_EN_COURS, STATUS_VALIDE
from objectifs.models.commentaire import Commentaire

__all__ = [
    "BusinessUnit",
    "Role",
    "User",
    "Categorie",
    "Objectif",
    "STATUS_EN_COURS",
    "STATUS_VALIDE",
    "Commentaire",
]
