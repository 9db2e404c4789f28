"""
objectifs.services

Package “services” : logique applicative (use-cases) indépendante des endpoints HTTP.

Rôle (fonctionnel) :
- Chaque service reçoit la session DB et l’Identity de l’appelant, applique les règles
  d’accès (objectifs.core.permissions), valide, puis lit/écrit en base.
- Les erreurs sont levées en AppHTTPException (401/403/404/400/500) : la couche API
  n’a plus qu’à sérialiser.

Principe :
- objectifs.api = transport HTTP (routes, validation, dépendances)
- objectifs.services = orchestration métier (réutilisable, testable)
- objectifs.models / objectifs.schemas = persistance et contrats
"""
