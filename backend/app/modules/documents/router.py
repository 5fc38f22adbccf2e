# app/modules/documents/router.py
"""
Endpoints documents, montés deux fois par main.py :
/api/documents et /api/client-documents (même comportement).
"""
from fastapi import APIRouter, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse
from typing import List, Optional

from app.modules.documents.schemas import (
    DocumentOut, DocumentListOut, UploadOut,
    DocumentCreateIn, DocumentUpdateIn, DocumentCreatedOut,
)
from app.modules.documents.service import DocumentService, DownloadableFile
from app.shared.deps import DbDep, ClientOrAmoDep
from app.shared.enums import DocumentType, Visibilite
from app.shared.schemas import MessageOut

router = APIRouter(tags=["Documents"])
service = DocumentService()


def file_response(file: DownloadableFile) -> FileResponse:
    """Content-Type, Content-Length et Content-Disposition (nom d'origine) posés par Starlette."""
    return FileResponse(file.path, media_type=file.mime_type, filename=file.filename)


@router.post("/upload", response_model=UploadOut, status_code=status.HTTP_201_CREATED)
async def upload_documents(
    db: DbDep,
    current_user: ClientOrAmoDep,
    documents: Optional[List[UploadFile]] = File(None),
    type: Optional[DocumentType] = Form(None),
    projet_id: Optional[int] = Form(None, alias="projetId"),
    visibilite: Optional[Visibilite] = Form(None),
):
    """Jusqu'à 5 fichiers (PDF, DOC, DOCX, JPG, PNG ; 10MB max chacun) sous le champ `documents`."""
    return await service.upload(
        db, current_user, documents, doc_type=type, projet_id=projet_id, visibilite=visibilite,
    )


@router.post("", response_model=DocumentCreatedOut, status_code=status.HTTP_201_CREATED)
async def create_document(payload: DocumentCreateIn, db: DbDep, current_user: ClientOrAmoDep):
    """Document référencé par un lien (`lienFichier`), sans fichier uploadé."""
    return await service.create_reference(db, current_user, payload)


@router.get("", response_model=DocumentListOut)
async def list_documents(
    db: DbDep,
    current_user: ClientOrAmoDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    mime_type: Optional[str] = Query(None, alias="mimeType"),
):
    return await service.list_documents(db, current_user, page, limit, mime_type=mime_type)


@router.get("/user/{user_id}", response_model=List[DocumentOut])
async def list_user_documents(user_id: int, db: DbDep, current_user: ClientOrAmoDep):
    return await service.list_by_user(db, current_user, user_id)


@router.get("/type/{doc_type}", response_model=List[DocumentOut])
async def list_documents_by_type(doc_type: DocumentType, db: DbDep, current_user: ClientOrAmoDep):
    return await service.list_by_type(db, current_user, doc_type)


@router.get("/{document_id}/download")
async def download_document(document_id: int, db: DbDep, current_user: ClientOrAmoDep):
    return file_response(await service.download(db, current_user, document_id))


@router.get("/{document_id}", response_model=DocumentOut)
async def get_document(document_id: int, db: DbDep, current_user: ClientOrAmoDep):
    return await service.get(db, current_user, document_id)


@router.put("/{document_id}", response_model=DocumentOut)
async def update_document(
    document_id: int, payload: DocumentUpdateIn, db: DbDep, current_user: ClientOrAmoDep
):
    return await service.update(db, current_user, document_id, payload)


@router.delete("/{document_id}", response_model=MessageOut)
async def delete_document(document_id: int, db: DbDep, current_user: ClientOrAmoDep):
    return await service.delete(db, current_user, document_id)
