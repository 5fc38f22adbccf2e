# app/modules/documents/schemas.py
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from app.shared.enums import DocumentType, AuthorType, Visibilite
from app.shared.schemas import CamelModel, PaginationOut


class DocumentOut(CamelModel):
    id:             int
    user_id:        int
    projet_id:      Optional[int] = None
    nom:            str
    nom_original:   Optional[str] = None
    nom_fichier:    Optional[str] = None
    type:           DocumentType
    mime_type:      Optional[str] = None
    taille_fichier: int
    format_fichier: Optional[str] = None
    lien_fichier:   Optional[str] = None
    author_type:    AuthorType
    visibilite:     Visibilite
    is_active:      bool = True
    created_at:     Optional[datetime] = None

    file_extension: str
    formatted_size: str
    is_pdf:         bool
    readable_type:  str


class DocumentCreateIn(CamelModel):
    """Document référencé : le fichier vit ailleurs, seul son lien est enregistré."""
    nom:            str = Field(..., min_length=1, max_length=255)
    type:           DocumentType
    lien_fichier:   str = Field(..., min_length=1, max_length=500)
    taille_fichier: int = Field(0, ge=0)
    format_fichier: Optional[str] = Field(None, max_length=10)
    projet_id:      Optional[int] = None
    visibilite:     Optional[Visibilite] = None


class DocumentUpdateIn(CamelModel):
    nom:            Optional[str] = Field(None, min_length=1, max_length=255)
    type:           Optional[DocumentType] = None
    lien_fichier:   Optional[str] = Field(None, min_length=1, max_length=500)
    taille_fichier: Optional[int] = Field(None, ge=0)
    format_fichier: Optional[str] = Field(None, max_length=10)
    visibilite:     Optional[Visibilite] = None
    is_active:      Optional[bool] = None


class DocumentCreatedOut(CamelModel):
    message:  str
    document: DocumentOut


class UploadOut(CamelModel):
    message:   str
    documents: List[DocumentOut]


class DocumentStatsOut(CamelModel):
    total:      int
    total_size: int
    by_type:    Dict[str, int]


class DocumentListOut(CamelModel):
    documents:  List[DocumentOut]
    statistics: DocumentStatsOut
    pagination: PaginationOut
