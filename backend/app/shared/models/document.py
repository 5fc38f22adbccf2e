# app/shared/models/document.py
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base, pg_enum
from app.shared.enums import DocumentType, AuthorType, Visibilite


class Document(Base):
    """
    Fichier uploadé par un client ou un AMO, éventuellement rattaché à un projet.

    Suppression = soft delete (is_active=False) ; le fichier physique
    reste sur disque pour permettre une récupération.
    """
    __tablename__ = "documents"
    __mapper_args__ = {"eager_defaults": True}
    __table_args__ = (
        CheckConstraint("taille_fichier >= 0", name="ck_documents_taille"),
    )

    id        = Column(Integer, primary_key=True, index=True)
    user_id   = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    projet_id = Column(Integer, ForeignKey("projets.id", ondelete="CASCADE"), nullable=True, index=True)

    nom            = Column(String(255), nullable=False)
    type           = Column(pg_enum(DocumentType, "documenttype"), default=DocumentType.AUTRE, nullable=False)
    lien_fichier   = Column(String(500), nullable=True)
    taille_fichier = Column(Integer, default=0, nullable=False)
    format_fichier = Column(String(10), nullable=True)

    nom_original   = Column(String(255), nullable=True)
    nom_fichier    = Column(String(255), nullable=True)
    mime_type      = Column(String(100), nullable=True, index=True)
    chemin_fichier = Column(String(500), nullable=True)

    author_type = Column(pg_enum(AuthorType, "authortype"), default=AuthorType.CLIENT, nullable=False)
    visibilite  = Column(pg_enum(Visibilite, "visibilite"), default=Visibilite.PRIVE, nullable=False)
    is_active   = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user   = relationship("User", back_populates="documents")
    projet = relationship("Projet", back_populates="documents")

    def __repr__(self):
        return f"<Document id={self.id} user={self.user_id} visibilite={self.visibilite}>"
