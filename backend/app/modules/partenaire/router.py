# app/modules/partenaire/router.py
from fastapi import APIRouter
from typing import List

from app.modules.auth.schemas import UserOut
from app.modules.missions.schemas import MissionOut
from app.modules.partenaire.schemas import PartenaireDashboardOut, MesMissionsOut
from app.modules.partenaire.service import PartenaireService
from app.shared.deps import DbDep, PartenaireDep
from app.shared.views import user_view

router = APIRouter(prefix="/api/partenaire", tags=["Partenaire"])
service = PartenaireService()


@router.get("/dashboard", response_model=PartenaireDashboardOut)
async def dashboard(db: DbDep, partner: PartenaireDep):
    return await service.dashboard(db, partner)


@router.get("/missions-disponibles", response_model=List[MissionOut])
async def available_missions(db: DbDep, partner: PartenaireDep):
    """Missions en attente dont un tag métier correspond à ceux du partenaire."""
    return await service.available_missions(db, partner)


@router.get("/mes-missions", response_model=MesMissionsOut)
async def my_missions(partner: PartenaireDep):
    return await service.my_missions(partner)


@router.get("/profil", response_model=UserOut)
async def profil(partner: PartenaireDep):
    return user_view(partner)
