"""
objectifs

Package racine du backend de suivi des objectifs annuels (consultants, BUM, admins).

Rôle (fonctionnel) :
- Contient tout le code applicatif (API, logique métier, accès DB, schémas).
- Sert de point d’ancrage pour les imports : `from objectifs...`

Organisation (haute-level) :
- objectifs.api      : routes FastAPI (contrats HTTP, dépendances, sérialisation)
- objectifs.core     : briques transverses (settings, errors, logs, sécurité, permissions, rate-limit)
- objectifs.db       : base SQLAlchemy + session async
- objectifs.models   : modèles ORM (users, business units, objectifs, catégories, commentaires)
- objectifs.schemas  : contrats Pydantic (entrées / sorties)
- objectifs.services : logique métier (règles d’accès + persistance + notification)
"""
