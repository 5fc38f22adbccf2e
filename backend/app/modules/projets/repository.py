# app/modules/projets/repository.py
"""
Accès DB pour les projets.

accept() est un UPDATE conditionnel : la condition (amo_id NULL, brouillon,
actif) est évaluée par la base au moment de l'écriture, un seul AMO gagne.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select, update, func
from typing import Dict, List, Optional, Tuple

from app.shared.models import Projet, User
from app.shared.enums import ProjetStatut, UserRole


class ProjetRepository:

    # ─────────────────────────────────────────────
    # PROJETS
    # ─────────────────────────────────────────────

    async def get_by_id(
        self,
        db: AsyncSession,
        projet_id: int,
        with_people: bool = False,
        active_only: bool = True,
    ) -> Optional[Projet]:
        stmt = select(Projet).where(Projet.id == projet_id)
        if active_only:
            stmt = stmt.where(Projet.is_active == True)
        if with_people:
            stmt = stmt.options(
                selectinload(Projet.client), selectinload(Projet.amo)
            ).execution_options(populate_existing=True)
        r = await db.execute(stmt)
        return r.scalar_one_or_none()

    async def list(
        self,
        db: AsyncSession,
        offset: int,
        limit: int,
        client_id: Optional[int] = None,
        amo_id: Optional[int] = None,
        statut: Optional[ProjetStatut] = None,
        city: Optional[str] = None,
    ) -> Tuple[List[Projet], int]:
        conditions = [Projet.is_active == True]
        if client_id is not None:
            conditions.append(Projet.client_id == client_id)
        if amo_id is not None:
            conditions.append(Projet.amo_id == amo_id)
        if statut is not None:
            conditions.append(Projet.statut == statut)
        if city:
            conditions.append(Projet.city.ilike(f"%{city}%"))

        total = await db.scalar(select(func.count(Projet.id)).where(*conditions))
        r = await db.execute(
            select(Projet)
            .where(*conditions)
            .options(selectinload(Projet.client), selectinload(Projet.amo))
            .order_by(Projet.date_submission.desc())
            .offset(offset)
            .limit(limit)
        )
        return r.scalars().all(), total or 0

    async def available_drafts(self, db: AsyncSession) -> List[Projet]:
        r = await db.execute(
            select(Projet)
            .where(
                Projet.amo_id.is_(None),
                Projet.statut == ProjetStatut.BROUILLON,
                Projet.is_active == True,
            )
            .options(selectinload(Projet.client))
            .order_by(Projet.date_submission.desc())
        )
        return r.scalars().all()

    async def create(self, db: AsyncSession, projet: Projet) -> Projet:
        db.add(projet)
        await db.commit()
        return await self.get_by_id(db, projet.id, with_people=True)

    async def save(self, db: AsyncSession, projet: Projet) -> Projet:
        await db.commit()
        return await self.get_by_id(db, projet.id, with_people=True, active_only=False)

    async def accept(self, db: AsyncSession, projet_id: int, amo_id: int) -> int:
        """Nombre de lignes modifiées : 1 si l'AMO a obtenu le projet, 0 sinon."""
        r = await db.execute(
            update(Projet)
            .where(
                Projet.id == projet_id,
                Projet.amo_id.is_(None),
                Projet.statut == ProjetStatut.BROUILLON,
                Projet.is_active == True,
            )
            .values(
                amo_id=amo_id,
                statut=ProjetStatut.EN_MISE_EN_RELATION,
                date_modification=func.now(),
            )
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        return r.rowcount

    # ─────────────────────────────────────────────
    # STATISTIQUES
    # ─────────────────────────────────────────────

    async def count_by_status(self, db: AsyncSession, amo_id: Optional[int] = None) -> Dict[str, int]:
        stmt = select(Projet.statut, func.count(Projet.id)).where(Projet.is_active == True)
        if amo_id is not None:
            stmt = stmt.where(Projet.amo_id == amo_id)
        r = await db.execute(stmt.group_by(Projet.statut))
        return {ProjetStatut(statut).value: count for statut, count in r.all()}

    async def stats_by_city(self, db: AsyncSession, limit: int = 20) -> List[Dict]:
        r = await db.execute(
            select(Projet.city, func.count(Projet.id), func.avg(Projet.budget))
            .where(Projet.is_active == True)
            .group_by(Projet.city)
            .order_by(func.count(Projet.id).desc())
            .limit(limit)
        )
        return [
            {"city": city, "count": count, "avg_budget": round(float(avg), 2) if avg is not None else None}
            for city, count, avg in r.all()
        ]

    # ─────────────────────────────────────────────
    # UTILISATEURS LIÉS
    # ─────────────────────────────────────────────

    async def get_user(self, db: AsyncSession, user_id: int) -> Optional[User]:
        r = await db.execute(select(User).where(User.id == user_id))
        return r.scalar_one_or_none()

    async def get_user_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        r = await db.execute(select(User).where(User.email == email.strip().lower()))
        return r.scalar_one_or_none()

    async def active_amos_with_zones(self, db: AsyncSession) -> List[User]:
        r = await db.execute(
            select(User).where(
                User.role == UserRole.AMO,
                User.is_active == True,
                User.zones_intervention.is_not(None),
            )
        )
        return r.scalars().all()
