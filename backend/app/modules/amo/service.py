# app/modules/amo/service.py
"""
Tableau de bord AMO : agrégats sur les projets assignés et leurs missions.
Les documents passent par DocumentService (mode masqué : 404 au lieu de 403).
"""
from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.missions.repository import MissionRepository
from app.modules.projets.repository import ProjetRepository
from app.modules.projets.service import view as projet_out
from app.shared.enums import UserRole
from app.shared.models import User
from app.shared.views import mission_view

projets = ProjetRepository()
missions = MissionRepository()

MAX_PROJETS = 100


class AmoService:

    async def dashboard(self, db: AsyncSession, amo: User) -> Dict:
        by_status = await projets.count_by_status(db, amo_id=amo.id)
        return {
            "message": "Dashboard AMO accessible",
            "user_id": amo.id,
            "role": UserRole(amo.role),
            "total_projets": sum(by_status.values()),
            "projets_by_status": by_status,
            "missions_count": await missions.count_for_amo(db, amo.id),
            "projets_disponibles": len(await projets.available_drafts(db)),
        }

    async def my_projets(self, db: AsyncSession, amo: User) -> List[Dict]:
        rows, _ = await projets.list(db, 0, MAX_PROJETS, amo_id=amo.id)
        return [projet_out(p) for p in rows]

    async def my_missions(self, db: AsyncSession, amo: User) -> List[Dict]:
        return [mission_view(m) for m in await missions.list_for_amo(db, amo.id)]
