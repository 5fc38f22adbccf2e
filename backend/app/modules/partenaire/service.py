# app/modules/partenaire/service.py
from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.missions.repository import MissionRepository
from app.shared.enums import UserRole
from app.shared.models import User
from app.shared.views import mission_view

missions = MissionRepository()


class PartenaireService:
    """Missions proposées à un artisan : en attente, tags en commun avec les siens."""

    async def dashboard(self, db: AsyncSession, partner: User) -> Dict:
        available = await missions.pending_matching_tags(db, partner.tags_metiers or [])
        return {
            "message": "Dashboard partenaire accessible",
            "user_id": partner.id,
            "role": UserRole(partner.role),
            "tags_metiers": partner.tags_metiers or [],
            "zones_intervention": partner.zones_intervention or [],
            "missions_disponibles": len(available),
        }

    async def available_missions(self, db: AsyncSession, partner: User) -> List[Dict]:
        rows = await missions.pending_matching_tags(db, partner.tags_metiers or [])
        return [mission_view(m) for m in rows]

    async def my_missions(self, partner: User) -> Dict:
        # TODO: lister les missions attribuées une fois le lien mission ↔ partenaire modélisé
        return {
            "message": "Mes missions partenaire",
            "user_id": partner.id,
            "role": UserRole(partner.role),
            "missions": [],
        }
