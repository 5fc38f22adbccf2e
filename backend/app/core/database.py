# backend/app/core/database.py
"""
Moteur SQLAlchemy async + fabrique de sessions.

get_db() est injecté via DbDep (shared/deps.py) : une session par requête.
ping() sert au readiness check : la santé de la base est lue à chaque appel,
jamais mise en cache dans un drapeau global.
"""
import logging
from typing import AsyncGenerator

from sqlalchemy import Enum as SAEnum, text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from app.core.config import settings

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    pool_pre_ping=True,
)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)

Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


async def ping(db: AsyncSession) -> bool:
    """True si la base répond à un SELECT 1."""
    try:
        await db.execute(text("SELECT 1"))
        return True
    except Exception as exc:
        logger.warning("Base de données injoignable : %s", exc)
        return False


def pg_enum(enum_cls, name: str) -> SAEnum:
    """Enum SQL stockant les *valeurs* ("AMO", "devis_reçus") et non les noms."""
    return SAEnum(enum_cls, name=name, values_callable=lambda e: [m.value for m in e])
