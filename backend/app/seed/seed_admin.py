# app/seed/seed_admin.py
"""
Compte administrateur par défaut.

Créé si aucun utilisateur ne porte ADMIN_EMAIL ; un compte existant
n'est jamais modifié. Exécuté au démarrage quand ADMIN_PASSWORD est défini.

Usage :
    ADMIN_PASSWORD=... python -m app.seed.seed_admin
"""
import asyncio
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.core.security import hash_password
from app.shared.enums import UserRole
from app.shared.models import User

logger = logging.getLogger(__name__)


async def ensure_admin(
    db: AsyncSession,
    email: Optional[str] = None,
    password: Optional[str] = None,
) -> Optional[User]:
    """Retourne l'admin créé, ou None s'il existait déjà / sans mot de passe."""
    email = (email or settings.ADMIN_EMAIL).strip().lower()
    password = password or settings.ADMIN_PASSWORD
    if not password:
        logger.info("ADMIN_PASSWORD absent : pas de seed administrateur")
        return None

    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        return None

    admin = User(
        first_name="Admin",
        last_name="Experta",
        email=email,
        hashed_password=hash_password(password),
        role=UserRole.ADMIN,
        is_active=True,
    )
    db.add(admin)
    await db.commit()
    await db.refresh(admin)
    logger.info("Administrateur par défaut créé : %s", email)
    return admin


async def main():
    async with AsyncSessionLocal() as db:
        admin = await ensure_admin(db)
    if admin:
        print(f"✅ Administrateur créé : {admin.email}")
    else:
        print("ℹ️  Aucun administrateur créé (déjà présent ou ADMIN_PASSWORD manquant)")


if __name__ == "__main__":
    asyncio.run(main())
