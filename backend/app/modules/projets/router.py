# app/modules/projets/router.py
"""
Endpoints projets. Zéro logique métier ici : tout passe par ProjetService.
Les routes fixes (/disponibles, /stats) précèdent /{projet_id}.
"""
from fastapi import APIRouter, Query, status
from typing import List, Optional

from app.modules.projets.schemas import (
    ProjetCreateIn, ProjetUpdateIn,
    ProjetOut, ProjetCreatedOut, ProjetAcceptedOut, ProjetListOut, ProjetStatsOut,
)
from app.modules.projets.service import ProjetService
from app.shared.deps import (
    DbDep, UserDep, AdminDep, AmoDep, ClientOrAnonymousDep,
)
from app.shared.enums import ProjetStatut
from app.shared.schemas import MessageOut

router = APIRouter(prefix="/api/projets", tags=["Projets"])
service = ProjetService()


@router.post(
    "",
    response_model=ProjetCreatedOut,
    status_code=status.HTTP_201_CREATED,
    summary="Déposer un projet (client connecté ou anonyme)",
)
async def create_projet(payload: ProjetCreateIn, db: DbDep, current_user: ClientOrAnonymousDep):
    return await service.create(db, payload, current_user)


@router.get("", response_model=ProjetListOut, summary="Projets visibles par l'appelant")
async def list_projets(
    db: DbDep,
    current_user: UserDep,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    statut: Optional[ProjetStatut] = None,
    city: Optional[str] = None,
    client_id: Optional[int] = Query(None, alias="clientId"),
    amo_id: Optional[int] = Query(None, alias="amoId"),
):
    return await service.list_projets(
        db, current_user, page, limit,
        statut=statut, city=city, client_id=client_id, amo_id=amo_id,
    )


@router.get("/disponibles", response_model=List[ProjetOut], summary="Brouillons sans AMO")
async def list_available(db: DbDep, amo: AmoDep):
    return await service.list_available(db)


@router.get("/stats", response_model=ProjetStatsOut)
async def projet_stats(db: DbDep, admin: AdminDep):
    return await service.stats(db)


@router.get("/{projet_id}", response_model=ProjetOut)
async def get_projet(projet_id: int, db: DbDep, current_user: UserDep):
    return await service.get(db, current_user, projet_id)


@router.put("/{projet_id}", response_model=ProjetOut)
async def update_projet(projet_id: int, payload: ProjetUpdateIn, db: DbDep, current_user: UserDep):
    return await service.update(db, current_user, projet_id, payload)


@router.delete("/{projet_id}", response_model=MessageOut)
async def delete_projet(projet_id: int, db: DbDep, current_user: UserDep):
    return await service.delete(db, current_user, projet_id)


@router.post("/{projet_id}/accept", response_model=ProjetAcceptedOut, summary="Prise en charge par un AMO")
async def accept_projet(projet_id: int, db: DbDep, amo: AmoDep):
    return await service.accept(db, amo, projet_id)
