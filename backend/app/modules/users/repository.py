# app/modules/users/repository.py
"""
Accès DB pour les comptes utilisateurs et l'annuaire des professionnels.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, cast, String
from typing import Dict, List, Optional, Tuple

from app.shared.models import User
from app.shared.enums import UserRole, PROFESSIONAL_ROLES


class UserRepository:

    # ── Lecture ───────────────────────────────────────────────

    async def get_by_id(self, db: AsyncSession, user_id: int) -> Optional[User]:
        r = await db.execute(select(User).where(User.id == user_id))
        return r.scalar_one_or_none()

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        r = await db.execute(select(User).where(User.email == email.strip().lower()))
        return r.scalar_one_or_none()

    async def list(
        self,
        db: AsyncSession,
        offset: int,
        limit: int,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
    ) -> Tuple[List[User], int]:
        conditions = []
        if role is not None:
            conditions.append(User.role == role)
        if is_active is not None:
            conditions.append(User.is_active == is_active)

        total = await db.scalar(select(func.count(User.id)).where(*conditions))
        r = await db.execute(
            select(User)
            .where(*conditions)
            .order_by(User.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return r.scalars().all(), total or 0

    async def count_by_role(self, db: AsyncSession) -> Dict[str, int]:
        r = await db.execute(select(User.role, func.count(User.id)).group_by(User.role))
        return {UserRole(role).value: count for role, count in r.all()}

    async def count_admins(self, db: AsyncSession) -> int:
        return await db.scalar(
            select(func.count(User.id)).where(User.role == UserRole.ADMIN)
        ) or 0

    # ── Annuaire professionnels ───────────────────────────────

    def _professionals(self):
        return select(User).where(
            User.role.in_(PROFESSIONAL_ROLES),
            User.is_active == True,
        )

    async def professionals_by_tag(self, db: AsyncSession, tag: str) -> List[User]:
        r = await db.execute(
            self._professionals().where(User.tags_metiers.contains([tag.strip().lower()]))
        )
        return r.scalars().all()

    async def professionals_by_zone(self, db: AsyncSession, zone: str) -> List[User]:
        r = await db.execute(
            self._professionals().where(
                cast(User.zones_intervention, String).ilike(f"%{zone.strip()}%")
            )
        )
        return r.scalars().all()

    async def top_professionals(self, db: AsyncSession, limit: int) -> List[User]:
        r = await db.execute(
            self._professionals()
            .where(User.note_fiabilite.is_not(None))
            .order_by(User.note_fiabilite.desc())
            .limit(limit)
        )
        return r.scalars().all()

    async def professional_tag_lists(self, db: AsyncSession) -> List[List[str]]:
        r = await db.execute(
            select(User.tags_metiers).where(
                User.role.in_(PROFESSIONAL_ROLES),
                User.is_active == True,
                User.tags_metiers.is_not(None),
            )
        )
        return [tags for tags in r.scalars().all() if tags]

    # ── Écriture ──────────────────────────────────────────────

    async def save(self, db: AsyncSession, user: User) -> User:
        await db.commit()
        await db.refresh(user)
        return user

    async def delete(self, db: AsyncSession, user: User) -> None:
        await db.delete(user)
        await db.commit()
