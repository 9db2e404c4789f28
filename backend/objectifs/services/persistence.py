from __future__ import annotations

import logging
from typing import Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from objectifs.core.errors import conflict, internal_error, not_found

"""
Helpers de persistance partagés par les services.

- commit() : valide la transaction et traduit les erreurs SQLAlchemy en erreurs API
  (IntegrityError -> 400 conflit, autre SQLAlchemyError -> 500 logué, rollback dans les deux cas).
- get_or_404() : lecture par clé primaire ou 404.
"""

log = logging.getLogger("objectifs.db")

T = TypeVar("T")


async def commit(db: AsyncSession, *, conflict_message: str = "conflict: integrity violation") -> None:
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        log.warning("integrity_error: %s", exc.orig)
        raise conflict(conflict_message)
    except SQLAlchemyError:
        await db.rollback()
        log.exception("commit_failed")
        raise internal_error()


async def get_or_404(db: AsyncSession, model: Type[T], pk: int, what: Optional[str] = None) -> T:
    obj = await db.get(model, pk)
    if obj is None:
        raise not_found(what or model.__name__.lower())
    return obj
