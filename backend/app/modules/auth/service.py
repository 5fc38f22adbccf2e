# app/modules/auth/service.py
import logging
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select

from app.shared.models import User
from app.shared.enums import UserRole
from app.shared.views import user_view
from app.core.security import hash_password, verify_password, create_user_token
from app.modules.auth.schemas import (
    RegisterClientIn, RegisterAmoIn, RegisterPartnerIn, LoginIn,
)

logger = logging.getLogger(__name__)

EMAIL_TAKEN     = "Cette adresse email est déjà utilisée"
BAD_CREDENTIALS = "Email ou mot de passe incorrect"

# comparé quand l'email est inconnu : même coût bcrypt que pour un compte existant
DUMMY_HASH = hash_password("experta-compte-inexistant")


class AuthService:

    # ── Register ─────────────────────────────────────────────

    async def register_client(self, db: AsyncSession, payload: RegisterClientIn) -> dict:
        await self._assert_email_free(db, payload.email)

        user = User(
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            email=payload.email,
            telephone=payload.telephone,
            hashed_password=hash_password(payload.password),
            role=UserRole.CLIENT,
        )
        user = await self._save(db, user)
        logger.info("Client inscrit : %s", user.email)
        return user_view(user)

    async def register_amo(self, db: AsyncSession, payload: RegisterAmoIn) -> dict:
        user = await self._register_professional(db, payload, UserRole.AMO)
        return {
            "message": "Inscription AMO réussie ! Bienvenue dans la communauté des professionnels.",
            "user": user_view(user),
            "token": create_user_token(user),
        }

    async def register_partner(self, db: AsyncSession, payload: RegisterPartnerIn) -> dict:
        user = await self._register_professional(db, payload, UserRole.PARTENAIRE)
        logger.info(
            "Partenaire %s, tags : %s, zones : %s",
            user.email, ", ".join(user.tags_metiers or []), ", ".join(user.zones_intervention or []),
        )
        return {
            "message": "Inscription professionnelle réussie ! Bienvenue dans notre réseau de partenaires du bâtiment.",
            "user": user_view(user),
            "token": create_user_token(user),
        }

    # ── Login ─────────────────────────────────────────────────

    async def login(self, db: AsyncSession, payload: LoginIn) -> dict:
        result = await db.execute(select(User).where(User.email == payload.email.strip().lower()))
        user = result.scalar_one_or_none()

        if user is None:
            verify_password(payload.password, DUMMY_HASH)
        if not user or not verify_password(payload.password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=BAD_CREDENTIALS,
            )
        if not user.is_active:
            raise HTTPException(status_code=403, detail="Compte désactivé")

        user.last_login = datetime.now(timezone.utc)
        await db.commit()
        await db.refresh(user)

        return {
            "message": "Connexion réussie",
            "user": user_view(user),
            "token": create_user_token(user),
        }

    # ── Privé ─────────────────────────────────────────────────

    async def _register_professional(self, db: AsyncSession, payload, role: UserRole) -> User:
        await self._assert_email_free(db, payload.email)

        user = User(
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            email=payload.email,
            telephone=payload.telephone,
            hashed_password=hash_password(payload.password),
            role=role,
            zones_intervention=payload.zones_intervention,
            tags_metiers=payload.tags_metiers,
            nom_entreprise=payload.nom_entreprise.strip() if payload.nom_entreprise else None,
            site_web=payload.site_web,
            siret=payload.siret,
            is_active=True,
        )
        user = await self._save(db, user)
        logger.info("Professionnel inscrit (%s) : %s", role.value, user.email)
        return user

    async def _save(self, db: AsyncSession, user: User) -> User:
        try:
            db.add(user)
            await db.commit()
        except IntegrityError:
            # inscription concurrente sur le même email
            await db.rollback()
            raise HTTPException(status_code=409, detail=EMAIL_TAKEN)
        await db.refresh(user)
        return user

    async def _assert_email_free(self, db: AsyncSession, email: str) -> None:
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        if result.scalar_one_or_none():
            raise HTTPException(status_code=409, detail=EMAIL_TAKEN)
