# app/modules/amo/schemas.py
from typing import Dict

from app.shared.enums import UserRole
from app.shared.schemas import CamelModel


class AmoDashboardOut(CamelModel):
    message:             str
    user_id:             int
    role:                UserRole
    total_projets:       int
    projets_by_status:   Dict[str, int]
    missions_count:      int
    projets_disponibles: int
