"""
objectifs.schemas

Package des schémas API (Pydantic).

Rôle (fonctionnel) :
- Définit les modèles d’entrée/sortie utilisés par l’API (request/response).
- Sépare clairement :
  - les modèles ORM (objectifs.models) = persistance DB
  - les schémas Pydantic (objectifs.schemas) = contrat HTTP / validation

Conventions :
- Attributs Python en snake_case, noms JSON repris du front historique via alias
  (businessUnitId, bumId, userid, categorieId, createdAt…).
- Les payloads d’entrée refusent les champs inconnus (extra="forbid").
"""
