from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from objectifs.core.settings import settings

"""
DB Session.

Rôle (fonctionnel) :
- Initialise l’engine SQLAlchemy en mode async (runtime FastAPI), une fois par process.
- Fournit une factory de sessions AsyncSession (AsyncSessionLocal).
- Expose `get_db()` comme dépendance FastAPI : une session par requête, fermée en fin de requête.

Notes :
- expire_on_commit=False : permet de sérialiser les objets après commit sans rechargement implicite
  (le lazy-load est interdit en async).
- L’engine est libéré à l’arrêt de l’application (lifespan dans main.py).
"""

engine = create_async_engine(settings.DATABASE_URL, echo=False)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db():
    """Dépendance FastAPI : yield une session DB et garantit sa fermeture."""
    async with AsyncSessionLocal() as session:
        yield session


async def dispose_engine() -> None:
    await engine.dispose()
