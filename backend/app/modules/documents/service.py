# app/modules/documents/service.py
"""
Documents : upload, documents référencés, liste, consultation, téléchargement,
modification, suppression.

Upload en deux phases :
    1. validation complète du lot (nombre, type MIME, taille, projet)
    2. écriture disque, puis insert groupé en un seul commit
       échec base → rollback + suppression des fichiers écrits (compensation)

Accès à un document (check_document_access) :
    propriétaire → toujours
    AMO          → s'il gère un projet actif du client auteur
    client       → si l'AMO auteur gère un de ses projets actifs
    autres       → jamais

Document référencé : créé à partir d'un simple lien (lienFichier), sans fichier
sur disque ; il n'est donc jamais téléchargeable. Les infos fichier d'un
document uploadé (lien, taille, format) sont figées.

Suppression = soft delete par le propriétaire ; le fichier reste sur disque.
"""
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional

from fastapi import HTTPException, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.infra import storage
from app.modules.documents.repository import DocumentRepository
from app.modules.documents.schemas import DocumentCreateIn, DocumentUpdateIn
from app.shared.enums import AuthorType, DocumentType, UserRole, Visibilite
from app.shared.models import Document, User
from app.shared.schemas import paginate
from app.shared.views import document_view, file_extension, readable_document_type

logger = logging.getLogger(__name__)

repo = DocumentRepository()

ALLOWED_MIME_TYPES = frozenset({
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "image/jpeg",
    "image/png",
})

NO_FILE          = "Aucun fichier fourni"
TOO_MANY_FILES   = "Trop de fichiers (max 5 à la fois)"
FILE_TOO_LARGE   = "Fichier trop volumineux (max 10MB)"
BAD_FILE_TYPE    = "Type de fichier non autorisé. Types acceptés: PDF, DOC, DOCX, JPG, PNG"
DB_WRITE_FAILED  = "Erreur lors de l'enregistrement en base de données"
DISK_WRITE_FAILED = "Erreur lors de l'enregistrement du fichier"
DOC_NOT_FOUND    = "Document non trouvé"
NOT_YOURS        = "Accès refusé - Ce document ne vous appartient pas"
FILE_MISSING     = "Fichier non trouvé sur le serveur"
PROJET_NOT_FOUND = "Projet non trouvé"
PROJET_FORBIDDEN = "Accès refusé - Ce projet ne vous concerne pas"
NO_STORED_FILE   = "Ce document est un lien externe, aucun fichier à télécharger"
UPLOAD_FIELDS_FIXED = "Le lien, la taille et le format d'un fichier uploadé ne sont pas modifiables"

FILE_INFO_FIELDS = {"lien_fichier", "taille_fichier", "format_fichier"}
REQUIRED_FIELDS  = {"nom", "type", "visibilite", "is_active"}


def default_visibilite(projet_id: Optional[int]) -> Visibilite:
    return Visibilite.PARTAGE if projet_id is not None else Visibilite.PRIVE


@dataclass
class DownloadableFile:
    path:      str
    filename:  str
    mime_type: str


@dataclass
class _PendingFile:
    original_name: str
    mime_type:     str
    content:       bytes


class DocumentService:

    # ── Contrôle d'accès ──────────────────────────────────────

    async def check_document_access(self, db: AsyncSession, user: User, document: Document) -> bool:
        if document.user_id == user.id:
            return True
        role = UserRole(user.role)
        if role == UserRole.AMO:
            return await repo.has_shared_project(db, client_id=document.user_id, amo_id=user.id)
        if role == UserRole.CLIENT:
            return await repo.has_shared_project(db, client_id=user.id, amo_id=document.user_id)
        return False

    # ── Upload ────────────────────────────────────────────────

    async def upload(
        self,
        db: AsyncSession,
        user: User,
        files: Optional[List[UploadFile]],
        doc_type: Optional[DocumentType] = None,
        projet_id: Optional[int] = None,
        visibilite: Optional[Visibilite] = None,
    ) -> Dict:
        pending = await self._validate_files(files)
        await self._check_projet(db, user, projet_id)

        if visibilite is None:
            visibilite = default_visibilite(projet_id)
        role = UserRole(user.role)
        author = AuthorType(role.value)

        written: List[storage.StoredFile] = []
        try:
            for item in pending:
                written.append(await run_in_threadpool(
                    storage.save_file, item.content, item.original_name, role.value, user.id,
                ))
        except OSError as exc:
            logger.error("Écriture disque impossible pour l'utilisateur %s : %s", user.id, exc)
            storage.delete_files(f.chemin_fichier for f in written)
            raise HTTPException(status_code=500, detail=DISK_WRITE_FAILED)

        documents = [
            Document(
                user_id=user.id,
                projet_id=projet_id,
                nom=item.original_name,
                type=doc_type or DocumentType.AUTRE,
                lien_fichier=stored.chemin_fichier,
                taille_fichier=stored.taille,
                format_fichier=file_extension(item.original_name)[:10] or None,
                nom_original=item.original_name,
                nom_fichier=stored.nom_fichier,
                mime_type=item.mime_type,
                chemin_fichier=stored.chemin_fichier,
                author_type=author,
                visibilite=visibilite,
            )
            for item, stored in zip(pending, written)
        ]

        try:
            documents = await repo.create_many(db, documents)
        except SQLAlchemyError:
            logger.exception("Insert des documents impossible, nettoyage de %d fichier(s)", len(written))
            await db.rollback()
            storage.delete_files(f.chemin_fichier for f in written)
            raise HTTPException(status_code=500, detail=DB_WRITE_FAILED)

        logger.info("%d document(s) uploadé(s) par l'utilisateur %s", len(documents), user.id)
        return {
            "message": f"{len(documents)} document(s) uploadé(s) avec succès",
            "documents": [document_view(d) for d in documents],
        }

    async def create_reference(self, db: AsyncSession, user: User, payload: DocumentCreateIn) -> Dict:
        await self._check_projet(db, user, payload.projet_id)

        document = Document(
            user_id=user.id,
            projet_id=payload.projet_id,
            nom=payload.nom.strip(),
            type=payload.type,
            lien_fichier=payload.lien_fichier.strip(),
            taille_fichier=payload.taille_fichier,
            format_fichier=payload.format_fichier,
            author_type=AuthorType(UserRole(user.role).value),
            visibilite=payload.visibilite or default_visibilite(payload.projet_id),
        )
        document = await repo.create(db, document)
        logger.info("Document référencé %s créé par l'utilisateur %s", document.id, user.id)
        return {"message": "Document créé avec succès", "document": document_view(document)}

    # ── Lecture ───────────────────────────────────────────────

    async def list_documents(
        self,
        db: AsyncSession,
        user: User,
        page: int = 1,
        limit: int = 20,
        mime_type: Optional[str] = None,
    ) -> Dict:
        role = UserRole(user.role)
        documents, total = await repo.list_accessible(
            db, user.id, role, (page - 1) * limit, limit, mime_type=mime_type,
        )
        breakdown = await repo.accessible_breakdown(db, user.id, role, mime_type=mime_type)

        by_type: Counter = Counter()
        total_size = 0
        for mime, business_type, count, size in breakdown:
            by_type[readable_document_type(mime, business_type)] += count
            total_size += int(size or 0)

        return {
            "documents": [document_view(d) for d in documents],
            "statistics": {"total": total, "total_size": total_size, "by_type": dict(by_type)},
            "pagination": paginate(total, page, limit),
        }

    async def list_by_user(self, db: AsyncSession, user: User, owner_id: int) -> List[Dict]:
        """Documents de `owner_id` que le demandeur peut voir (tous si c'est lui)."""
        documents = await repo.list_accessible_filtered(
            db, user.id, UserRole(user.role), owner_id=owner_id,
        )
        return [document_view(d) for d in documents]

    async def list_by_type(self, db: AsyncSession, user: User, doc_type: DocumentType) -> List[Dict]:
        documents = await repo.list_accessible_filtered(
            db, user.id, UserRole(user.role), doc_type=doc_type,
        )
        return [document_view(d) for d in documents]

    async def get(self, db: AsyncSession, user: User, document_id: int, hidden: bool = False) -> Dict:
        return document_view(await self._get_accessible(db, user, document_id, hidden))

    async def download(
        self, db: AsyncSession, user: User, document_id: int, hidden: bool = False
    ) -> DownloadableFile:
        document = await self._get_accessible(db, user, document_id, hidden)
        relative = document.chemin_fichier
        if not relative:
            raise HTTPException(status_code=404, detail=NO_STORED_FILE)
        if not storage.file_exists(relative):
            logger.error("Document %s : fichier absent du disque (%s)", document.id, relative)
            raise HTTPException(status_code=404, detail=FILE_MISSING)

        logger.info("Téléchargement du document %s par l'utilisateur %s", document.id, user.id)
        return DownloadableFile(
            path=storage.resolve_path(relative),
            filename=document.nom_original or document.nom_fichier or document.nom,
            mime_type=document.mime_type or "application/octet-stream",
        )

    # ── Modification ──────────────────────────────────────────

    async def update(
        self, db: AsyncSession, user: User, document_id: int, payload: DocumentUpdateIn
    ) -> Dict:
        document = await self._get_own(db, user, document_id)
        data = payload.model_dump(exclude_unset=True)

        if document.chemin_fichier and FILE_INFO_FIELDS & data.keys():
            raise HTTPException(status_code=400, detail=UPLOAD_FIELDS_FIXED)

        for key in ("nom", "lien_fichier"):
            if data.get(key):
                data[key] = data[key].strip()

        for key, value in data.items():
            if key in REQUIRED_FIELDS and value is None:
                continue
            setattr(document, key, value)

        document = await repo.save(db, document)
        logger.info("Document %s modifié par l'utilisateur %s", document_id, user.id)
        return document_view(document)

    # ── Suppression ───────────────────────────────────────────

    async def delete(self, db: AsyncSession, user: User, document_id: int) -> Dict:
        document = await self._get_own(db, user, document_id)
        document.is_active = False
        await db.commit()
        logger.info("Document %s désactivé par l'utilisateur %s", document_id, user.id)
        return {"message": "Document supprimé avec succès"}

    # ── Privé ─────────────────────────────────────────────────

    async def _validate_files(self, files: Optional[List[UploadFile]]) -> List[_PendingFile]:
        """Valide tout le lot avant la moindre écriture disque."""
        files = [f for f in files or [] if f is not None and f.filename]
        if not files:
            raise HTTPException(status_code=400, detail=NO_FILE)
        if len(files) > settings.MAX_FILES_PER_UPLOAD:
            raise HTTPException(status_code=400, detail=TOO_MANY_FILES)

        pending = []
        for upload in files:
            if upload.content_type not in ALLOWED_MIME_TYPES:
                logger.info("Type refusé : %s (%s)", upload.filename, upload.content_type)
                raise HTTPException(status_code=400, detail=BAD_FILE_TYPE)
            if upload.size is not None and upload.size > settings.MAX_FILE_SIZE:
                raise HTTPException(status_code=400, detail=FILE_TOO_LARGE)
            content = await upload.read()
            if len(content) > settings.MAX_FILE_SIZE:
                raise HTTPException(status_code=400, detail=FILE_TOO_LARGE)
            pending.append(_PendingFile(upload.filename, upload.content_type, content))
        return pending

    async def _check_projet(self, db: AsyncSession, user: User, projet_id: Optional[int]) -> None:
        if projet_id is None:
            return
        projet = await repo.get_projet(db, projet_id)
        if not projet:
            raise HTTPException(status_code=404, detail=PROJET_NOT_FOUND)
        if user.id not in (projet.client_id, projet.amo_id):
            raise HTTPException(status_code=403, detail=PROJET_FORBIDDEN)

    async def _get_own(self, db: AsyncSession, user: User, document_id: int) -> Document:
        document = await repo.get_by_id(db, document_id)
        if not document or not document.is_active:
            raise HTTPException(status_code=404, detail=DOC_NOT_FOUND)
        if document.user_id != user.id:
            raise HTTPException(status_code=403, detail=NOT_YOURS)
        return document

    async def _get_accessible(
        self, db: AsyncSession, user: User, document_id: int, hidden: bool
    ) -> Document:
        document = await repo.get_by_id(db, document_id)
        if not document or not document.is_active:
            raise HTTPException(status_code=404, detail=DOC_NOT_FOUND)
        if not await self.check_document_access(db, user, document):
            if hidden:
                raise HTTPException(status_code=404, detail=DOC_NOT_FOUND)
            raise HTTPException(status_code=403, detail=NOT_YOURS)
        return document
