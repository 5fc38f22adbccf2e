# app/modules/missions/schemas.py
from datetime import datetime
from pydantic import Field
from typing import List, Optional

from app.shared.enums import MissionStatut
from app.shared.schemas import CamelModel, PaginationOut


class MissionCreateIn(CamelModel):
    project_id:      int
    tags_metiers:    List[str] = Field(default_factory=list)
    commentaire_amo: Optional[str] = Field(None, max_length=2000)
    statut:          MissionStatut = MissionStatut.EN_ATTENTE


class MissionUpdateIn(CamelModel):
    tags_metiers:    Optional[List[str]] = None
    commentaire_amo: Optional[str] = Field(None, max_length=2000)
    statut:          Optional[MissionStatut] = None


class MissionTagIn(CamelModel):
    tag: str = Field(..., min_length=1, max_length=50)


class MissionOut(CamelModel):
    id:               int
    project_id:       int
    tags_metiers:     List[str]
    commentaire_amo:  Optional[str] = None
    date_creation:    Optional[datetime] = None
    statut:           MissionStatut
    is_active:        bool = True
    tags_count:       int
    mission_duration: Optional[int] = None


class MissionListOut(CamelModel):
    missions:   List[MissionOut]
    pagination: PaginationOut
