# app/modules/missions/router.py
from fastapi import APIRouter, Query, status
from typing import List, Optional

from app.modules.missions.schemas import (
    MissionCreateIn, MissionUpdateIn, MissionTagIn, MissionOut, MissionListOut,
)
from app.modules.missions.service import MissionService
from app.modules.users.schemas import PopularTagOut
from app.shared.deps import DbDep, UserDep, AmoOrAdminDep
from app.shared.enums import MissionStatut
from app.shared.schemas import MessageOut

router = APIRouter(prefix="/api/missions", tags=["Missions"])
service = MissionService()


@router.get("", response_model=MissionListOut)
async def list_missions(
    db: DbDep,
    current_user: UserDep,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    project_id: Optional[int] = Query(None, alias="projectId"),
    statut: Optional[MissionStatut] = None,
    tag: Optional[str] = None,
):
    return await service.list_missions(db, page, limit, project_id=project_id, statut=statut, tag=tag)


@router.get("/stats/popular-tags", response_model=List[PopularTagOut])
async def popular_mission_tags(db: DbDep, current_user: UserDep, limit: int = Query(10, ge=1, le=50)):
    return await service.popular_tags(db, limit)


@router.get("/{mission_id}", response_model=MissionOut)
async def get_mission(mission_id: int, db: DbDep, current_user: UserDep):
    return await service.get(db, mission_id)


@router.post("", response_model=MissionOut, status_code=status.HTTP_201_CREATED)
async def create_mission(payload: MissionCreateIn, db: DbDep, current_user: AmoOrAdminDep):
    return await service.create(db, current_user, payload)


@router.put("/{mission_id}", response_model=MissionOut)
async def update_mission(mission_id: int, payload: MissionUpdateIn, db: DbDep, current_user: AmoOrAdminDep):
    return await service.update(db, current_user, mission_id, payload)


@router.delete("/{mission_id}", response_model=MessageOut)
async def delete_mission(mission_id: int, db: DbDep, current_user: AmoOrAdminDep):
    return await service.delete(db, current_user, mission_id)


# ── Tags ──────────────────────────────────────────────────

@router.post("/{mission_id}/tags", response_model=MissionOut)
async def add_mission_tag(mission_id: int, payload: MissionTagIn, db: DbDep, current_user: AmoOrAdminDep):
    return await service.add_tag(db, current_user, mission_id, payload.tag)


@router.delete("/{mission_id}/tags", response_model=MissionOut)
async def remove_mission_tag(mission_id: int, payload: MissionTagIn, db: DbDep, current_user: AmoOrAdminDep):
    return await service.remove_tag(db, current_user, mission_id, payload.tag)
