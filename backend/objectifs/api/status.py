from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from objectifs.core.settings import settings
from objectifs.db.session import get_db
from objectifs.models import Objectif, User

"""
API System Status.

Rôle (fonctionnel) :
- Expose un endpoint de statut “healthcheck” pour la plateforme.
- Vérifie la disponibilité de la base (requête simple).
- Donne quelques volumes (utilisateurs, objectifs) et la fraîcheur des données
  (dernière mise à jour d’un objectif).
"""

router = APIRouter(prefix="/system", tags=["system"])
log = logging.getLogger("objectifs.status")


@router.get("/status")
async def system_status(db: AsyncSession = Depends(get_db)):
    # 1) DB check (requête minimale)
    db_ok = True
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        log.exception("status_db_check_failed")
        db_ok = False

    # 2) Volumes + fraîcheur (uniquement si la base répond)
    counts = {"users": None, "objectifs": None}
    last_update = None
    if db_ok:
        counts["users"] = int((await db.execute(select(func.count(User.id)))).scalar_one())
        counts["objectifs"] = int((await db.execute(select(func.count(Objectif.id)))).scalar_one())
        last = (await db.execute(select(func.max(Objectif.updated_at)))).scalar_one_or_none()
        last_update = last.isoformat() if last else None

    # Réponse (format constant) pour monitoring / UI
    return {
        "ok": db_ok,
        "db": {"ok": db_ok},
        "env": settings.ENV,
        "counts": counts,
        "last_update": last_update,
        "ts": datetime.now(timezone.utc).isoformat(),
    }
