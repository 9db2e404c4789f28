from fastapi import APIRouter

from .health import router as health_router
from .status import router as status_router

from objectifs.api.auth import router as auth_router
from objectifs.api.users import router as users_router
from objectifs.api.business_units import router as business_units_router
from objectifs.api.objectifs import router as objectifs_router
from objectifs.api.commentaires import router as commentaires_router
from objectifs.api.categories import router as categories_router
from objectifs.api.bum import router as bum_router

"""
Router principal de l’API.

Rôle (fonctionnel) :
- Regroupe les routeurs par domaine (auth, comptes, BU, objectifs, commentaires, catégories, BUM).
- Sert de point d’entrée unique pour l’inclusion dans l’application FastAPI.
"""

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(status_router)
api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(business_units_router)
api_router.include_router(objectifs_router)
api_router.include_router(commentaires_router)
api_router.include_router(categories_router)
api_router.include_router(bum_router)
