"""
objectifs.db

Package base de données : classe Base ORM, engine async et session par requête (Depends(get_db)).
Les migrations (Alembic, côté sync) utilisent DATABASE_URL_SYNC.
"""
