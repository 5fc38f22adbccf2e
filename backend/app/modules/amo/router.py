# app/modules/amo/router.py
"""
Espace AMO. Toutes les routes sont masquées (404 "Page non trouvée")
pour les autres rôles, y compris les sous-routes documents.
"""
from fastapi import APIRouter, File, Form, Query, UploadFile, status
from typing import List, Optional

from app.modules.amo.schemas import AmoDashboardOut
from app.modules.amo.service import AmoService
from app.modules.auth.schemas import UserOut
from app.modules.documents.router import file_response
from app.modules.documents.router import service as document_service
from app.modules.documents.schemas import DocumentOut, DocumentListOut, UploadOut
from app.modules.missions.schemas import MissionOut
from app.modules.projets.schemas import ProjetOut
from app.shared.deps import DbDep, HiddenAmoDep
from app.shared.enums import DocumentType, Visibilite
from app.shared.views import user_view

router = APIRouter(prefix="/api/amo", tags=["AMO"])
service = AmoService()


# ─────────────────────────────────────────────
# DASHBOARD
# ─────────────────────────────────────────────

@router.get("/dashboard", response_model=AmoDashboardOut)
async def dashboard(db: DbDep, amo: HiddenAmoDep):
    return await service.dashboard(db, amo)


@router.get("/mes-projets", response_model=List[ProjetOut])
async def my_projets(db: DbDep, amo: HiddenAmoDep):
    return await service.my_projets(db, amo)


@router.get("/gestion-missions", response_model=List[MissionOut])
async def my_missions(db: DbDep, amo: HiddenAmoDep):
    return await service.my_missions(db, amo)


@router.get("/profil", response_model=UserOut)
async def profil(amo: HiddenAmoDep):
    return user_view(amo)


# ─────────────────────────────────────────────
# DOCUMENTS CLIENTS
# ─────────────────────────────────────────────

@router.get("/documents/client", response_model=DocumentListOut)
async def client_documents(
    db: DbDep,
    amo: HiddenAmoDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    mime_type: Optional[str] = Query(None, alias="mimeType"),
):
    return await document_service.list_documents(db, amo, page, limit, mime_type=mime_type)


@router.get("/documents/client/{document_id}/download")
async def download_client_document(document_id: int, db: DbDep, amo: HiddenAmoDep):
    return file_response(await document_service.download(db, amo, document_id, hidden=True))


@router.get("/documents/client/{document_id}", response_model=DocumentOut)
async def client_document(document_id: int, db: DbDep, amo: HiddenAmoDep):
    return await document_service.get(db, amo, document_id, hidden=True)


@router.post("/documents/upload", response_model=UploadOut, status_code=status.HTTP_201_CREATED)
async def upload_amo_documents(
    db: DbDep,
    amo: HiddenAmoDep,
    documents: Optional[List[UploadFile]] = File(None),
    type: Optional[DocumentType] = Form(None),
    projet_id: Optional[int] = Form(None, alias="projetId"),
    visibilite: Optional[Visibilite] = Form(None),
):
    return await document_service.upload(
        db, amo, documents, doc_type=type, projet_id=projet_id, visibilite=visibilite,
    )
