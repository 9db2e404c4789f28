"""
Environnement Alembic (migrations du schéma Objectifs).

Rôle (fonctionnel) :
- Charge la metadata des modèles ORM (objectifs.models) comme cible des autogénérations.
- Utilise l’URL synchrone des settings (DATABASE_URL_SYNC, driver psycopg) :
  Alembic travaille en sync même si l’API utilise asyncpg.
"""

from __future__ import annotations

from logging.config import fileConfig

from sqlalchemy import create_engine, pool

from alembic import context

from objectifs.core.settings import settings
from objectifs.db.base import Base
import objectifs.models  # noqa: F401  (enregistre les tables dans Base.metadata)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Génère le SQL sans connexion (bindings littéraux)."""
    context.configure(
        url=settings.DATABASE_URL_SYNC,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Applique les migrations via une connexion active."""
    connectable = create_engine(settings.DATABASE_URL_SYNC, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
