# app/modules/missions/service.py
import logging
from typing import Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.missions.repository import MissionRepository
from app.modules.missions.schemas import MissionCreateIn, MissionUpdateIn
from app.modules.users.service import popular_tags
from app.shared.enums import MissionStatut, UserRole
from app.shared.models import Mission, Projet, User
from app.shared.schemas import paginate
from app.shared.views import mission_view

logger = logging.getLogger(__name__)

repo = MissionRepository()

MISSION_NOT_FOUND = "Mission non trouvée"
PROJET_NOT_FOUND  = "Projet non trouvé"
NOT_ASSIGNED      = "Accès refusé - Ce projet ne vous est pas assigné"


class MissionService:
    """
    Lecture ouverte aux utilisateurs connectés ; écriture réservée aux AMO
    (sur leurs projets) et aux admins. Ajout / retrait de tag idempotents.
    """

    async def list_missions(
        self,
        db: AsyncSession,
        page: int,
        limit: int,
        project_id: Optional[int] = None,
        statut: Optional[MissionStatut] = None,
        tag: Optional[str] = None,
    ) -> Dict:
        missions, total = await repo.list(
            db, (page - 1) * limit, limit, project_id=project_id, statut=statut, tag=tag,
        )
        return {
            "missions": [mission_view(m) for m in missions],
            "pagination": paginate(total, page, limit),
        }

    async def popular_tags(self, db: AsyncSession, limit: int) -> List[Dict]:
        return popular_tags(await repo.tag_lists(db), limit)

    async def get(self, db: AsyncSession, mission_id: int) -> Dict:
        return mission_view(await self._get_or_404(db, mission_id))

    async def create(self, db: AsyncSession, user: User, payload: MissionCreateIn) -> Dict:
        projet = await repo.get_projet(db, payload.project_id)
        if not projet:
            raise HTTPException(status_code=404, detail=PROJET_NOT_FOUND)
        self._assert_manages(user, projet)

        mission = Mission(
            project_id=projet.id,
            tags_metiers=payload.tags_metiers,
            commentaire_amo=payload.commentaire_amo,
            statut=payload.statut,
        )
        mission = await repo.create(db, mission)
        logger.info("Mission %s créée sur le projet %s", mission.id, projet.id)
        return mission_view(mission)

    async def update(
        self, db: AsyncSession, user: User, mission_id: int, payload: MissionUpdateIn
    ) -> Dict:
        mission = await self._get_managed(db, user, mission_id)
        data = payload.model_dump(exclude_unset=True)
        if data.get("statut") is None:
            data.pop("statut", None)
        if "tags_metiers" in data and data["tags_metiers"] is None:
            data["tags_metiers"] = []
        for key, value in data.items():
            setattr(mission, key, value)
        return mission_view(await repo.save(db, mission))

    async def delete(self, db: AsyncSession, user: User, mission_id: int) -> Dict:
        mission = await self._get_managed(db, user, mission_id)
        mission.is_active = False
        await db.commit()
        logger.info("Mission %s désactivée", mission_id)
        return {"message": "Mission supprimée avec succès"}

    async def add_tag(self, db: AsyncSession, user: User, mission_id: int, tag: str) -> Dict:
        mission = await self._get_managed(db, user, mission_id)
        if mission.add_tag_metier(tag):
            mission = await repo.save(db, mission)
        return mission_view(mission)

    async def remove_tag(self, db: AsyncSession, user: User, mission_id: int, tag: str) -> Dict:
        mission = await self._get_managed(db, user, mission_id)
        if mission.remove_tag_metier(tag):
            mission = await repo.save(db, mission)
        return mission_view(mission)

    # ── Privé ─────────────────────────────────────────────────

    async def _get_or_404(self, db: AsyncSession, mission_id: int) -> Mission:
        mission = await repo.get_by_id(db, mission_id)
        if not mission:
            raise HTTPException(status_code=404, detail=MISSION_NOT_FOUND)
        return mission

    async def _get_managed(self, db: AsyncSession, user: User, mission_id: int) -> Mission:
        mission = await self._get_or_404(db, mission_id)
        if UserRole(user.role) != UserRole.ADMIN:
            projet = await repo.get_projet(db, mission.project_id)
            if not projet:
                raise HTTPException(status_code=404, detail=PROJET_NOT_FOUND)
            self._assert_manages(user, projet)
        return mission

    def _assert_manages(self, user: User, projet: Projet) -> None:
        if UserRole(user.role) == UserRole.AMO and projet.amo_id != user.id:
            raise HTTPException(status_code=403, detail=NOT_ASSIGNED)
