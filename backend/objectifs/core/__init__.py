"""
objectifs.core

Briques transverses, sans logique métier propre :

- settings     : configuration (variables d’environnement, .env)
- errors       : format d’erreur API uniforme + AppHTTPException
- logging      : configuration des logs
- request_id   : identifiant de corrélation par requête
- security     : hash des mots de passe, jetons JWT
- permissions  : Identity + règles d’accès par rôle / rattachement BUM
- rate_limit   : limitation des tentatives de login
"""
