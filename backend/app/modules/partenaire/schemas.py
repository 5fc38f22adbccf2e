# app/modules/partenaire/schemas.py
from typing import List

from app.modules.missions.schemas import MissionOut
from app.shared.enums import UserRole
from app.shared.schemas import CamelModel


class PartenaireDashboardOut(CamelModel):
    message:              str
    user_id:              int
    role:                 UserRole
    tags_metiers:         List[str]
    zones_intervention:   List[str]
    missions_disponibles: int


class MesMissionsOut(CamelModel):
    message:  str
    user_id:  int
    role:     UserRole
    missions: List[MissionOut]
