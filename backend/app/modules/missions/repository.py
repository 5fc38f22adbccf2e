# app/modules/missions/repository.py
"""
Accès DB pour les missions. Toutes les lectures ignorent les missions
désactivées (soft delete).
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.dialects.postgresql import array
from sqlalchemy import select, func
from typing import List, Optional, Sequence, Tuple

from app.shared.models import Mission, Projet
from app.shared.enums import MissionStatut


class MissionRepository:

    async def get_by_id(self, db: AsyncSession, mission_id: int) -> Optional[Mission]:
        r = await db.execute(
            select(Mission).where(Mission.id == mission_id, Mission.is_active == True)
        )
        return r.scalar_one_or_none()

    async def get_projet(self, db: AsyncSession, projet_id: int) -> Optional[Projet]:
        r = await db.execute(
            select(Projet).where(Projet.id == projet_id, Projet.is_active == True)
        )
        return r.scalar_one_or_none()

    async def list(
        self,
        db: AsyncSession,
        offset: int,
        limit: int,
        project_id: Optional[int] = None,
        statut: Optional[MissionStatut] = None,
        tag: Optional[str] = None,
    ) -> Tuple[List[Mission], int]:
        conditions = [Mission.is_active == True]
        if project_id is not None:
            conditions.append(Mission.project_id == project_id)
        if statut is not None:
            conditions.append(Mission.statut == statut)
        if tag:
            conditions.append(Mission.tags_metiers.contains([tag.strip().lower()]))

        total = await db.scalar(select(func.count(Mission.id)).where(*conditions))
        r = await db.execute(
            select(Mission)
            .where(*conditions)
            .order_by(Mission.date_creation.desc())
            .offset(offset)
            .limit(limit)
        )
        return r.scalars().all(), total or 0

    async def tag_lists(self, db: AsyncSession) -> List[List[str]]:
        r = await db.execute(select(Mission.tags_metiers).where(Mission.is_active == True))
        return [tags for tags in r.scalars().all() if tags]

    # ── Par AMO / partenaire ──────────────────────────────────

    def _for_amo(self, amo_id: int):
        return (
            select(Mission)
            .join(Projet, Projet.id == Mission.project_id)
            .where(Projet.amo_id == amo_id, Projet.is_active == True, Mission.is_active == True)
        )

    async def list_for_amo(self, db: AsyncSession, amo_id: int) -> List[Mission]:
        r = await db.execute(self._for_amo(amo_id).order_by(Mission.date_creation.desc()))
        return r.scalars().all()

    async def count_for_amo(self, db: AsyncSession, amo_id: int) -> int:
        return await db.scalar(
            select(func.count()).select_from(self._for_amo(amo_id).subquery())
        ) or 0

    async def pending_matching_tags(self, db: AsyncSession, tags: Sequence[str]) -> List[Mission]:
        """Missions en attente dont au moins un tag figure dans `tags`."""
        if not tags:
            return []
        r = await db.execute(
            select(Mission)
            .join(Projet, Projet.id == Mission.project_id)
            .where(
                Mission.is_active == True,
                Mission.statut == MissionStatut.EN_ATTENTE,
                Projet.is_active == True,
                Mission.tags_metiers.has_any(array(list(tags))),
            )
            .order_by(Mission.date_creation.desc())
        )
        return r.scalars().all()

    # ── Écriture ──────────────────────────────────────────────

    async def create(self, db: AsyncSession, mission: Mission) -> Mission:
        db.add(mission)
        await db.commit()
        await db.refresh(mission)
        return mission

    async def save(self, db: AsyncSession, mission: Mission) -> Mission:
        await db.commit()
        await db.refresh(mission)
        return mission
