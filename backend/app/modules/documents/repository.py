# app/modules/documents/repository.py
"""
Accès DB pour les documents.

Ensemble accessible d'un utilisateur :
    ses propres documents actifs
    + documents "partage" écrits par l'autre rôle (client ↔ AMO),
      rattachés à un projet actif dont il est la contrepartie.
L'appartenance au projet est relue à chaque requête (EXISTS corrélé).
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, exists, and_, or_
from typing import List, Optional, Tuple

from app.shared.models import Document, Projet
from app.shared.enums import AuthorType, DocumentType, UserRole, Visibilite


class DocumentRepository:

    # ─────────────────────────────────────────────
    # LECTURE UNITAIRE
    # ─────────────────────────────────────────────

    async def get_by_id(self, db: AsyncSession, document_id: int) -> Optional[Document]:
        r = await db.execute(select(Document).where(Document.id == document_id))
        return r.scalar_one_or_none()

    async def get_projet(self, db: AsyncSession, projet_id: int) -> Optional[Projet]:
        r = await db.execute(
            select(Projet).where(Projet.id == projet_id, Projet.is_active == True)
        )
        return r.scalar_one_or_none()

    async def has_shared_project(self, db: AsyncSession, client_id: int, amo_id: int) -> bool:
        """Un projet actif lie-t-il ce client à cet AMO ?"""
        return bool(await db.scalar(
            select(
                exists().where(
                    Projet.client_id == client_id,
                    Projet.amo_id == amo_id,
                    Projet.is_active == True,
                )
            )
        ))

    # ─────────────────────────────────────────────
    # ENSEMBLE ACCESSIBLE
    # ─────────────────────────────────────────────

    def accessible_condition(self, user_id: int, role: UserRole):
        own = Document.user_id == user_id

        if role == UserRole.CLIENT:
            counterpart = exists().where(
                Projet.id == Document.projet_id,
                Projet.client_id == user_id,
                Projet.amo_id == Document.user_id,
                Projet.is_active == True,
            )
            other_author = AuthorType.AMO
        elif role == UserRole.AMO:
            counterpart = exists().where(
                Projet.id == Document.projet_id,
                Projet.amo_id == user_id,
                Projet.client_id == Document.user_id,
                Projet.is_active == True,
            )
            other_author = AuthorType.CLIENT
        else:
            return and_(Document.is_active == True, own)

        shared = and_(
            Document.visibilite == Visibilite.PARTAGE,
            Document.author_type == other_author,
            counterpart,
        )
        return and_(Document.is_active == True, or_(own, shared))

    async def list_accessible(
        self,
        db: AsyncSession,
        user_id: int,
        role: UserRole,
        offset: int,
        limit: int,
        mime_type: Optional[str] = None,
    ) -> Tuple[List[Document], int]:
        conditions = [self.accessible_condition(user_id, role)]
        if mime_type:
            conditions.append(Document.mime_type == mime_type)

        total = await db.scalar(select(func.count(Document.id)).where(*conditions))
        r = await db.execute(
            select(Document)
            .where(*conditions)
            .order_by(Document.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return r.scalars().all(), total or 0

    async def accessible_breakdown(
        self,
        db: AsyncSession,
        user_id: int,
        role: UserRole,
        mime_type: Optional[str] = None,
    ) -> List[Tuple]:
        """(mime_type, type, nombre, taille cumulée) sur l'ensemble accessible."""
        conditions = [self.accessible_condition(user_id, role)]
        if mime_type:
            conditions.append(Document.mime_type == mime_type)
        r = await db.execute(
            select(
                Document.mime_type,
                Document.type,
                func.count(Document.id),
                func.coalesce(func.sum(Document.taille_fichier), 0),
            )
            .where(*conditions)
            .group_by(Document.mime_type, Document.type)
        )
        return r.all()

    async def list_accessible_filtered(
        self,
        db: AsyncSession,
        user_id: int,
        role: UserRole,
        owner_id: Optional[int] = None,
        doc_type: Optional[DocumentType] = None,
    ) -> List[Document]:
        """Ensemble accessible restreint à un auteur et / ou à un type métier."""
        conditions = [self.accessible_condition(user_id, role)]
        if owner_id is not None:
            conditions.append(Document.user_id == owner_id)
        if doc_type is not None:
            conditions.append(Document.type == doc_type)
        r = await db.execute(
            select(Document).where(*conditions).order_by(Document.created_at.desc())
        )
        return r.scalars().all()

    # ─────────────────────────────────────────────
    # ÉCRITURE
    # ─────────────────────────────────────────────

    async def create_many(self, db: AsyncSession, documents: List[Document]) -> List[Document]:
        """Insert groupé, un seul commit : tout ou rien."""
        db.add_all(documents)
        await db.commit()
        return documents

    async def create(self, db: AsyncSession, document: Document) -> Document:
        db.add(document)
        await db.commit()
        await db.refresh(document)
        return document

    async def save(self, db: AsyncSession, document: Document) -> Document:
        await db.commit()
        await db.refresh(document)
        return document
