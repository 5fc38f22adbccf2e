# app/shared/models/mission.py
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func

from app.core.database import Base, pg_enum
from app.shared.enums import MissionStatut
from app.shared.models.user import normalize_tags


class Mission(Base):
    """Unité de travail d'un projet, taguée par corps de métier."""
    __tablename__ = "missions"
    __mapper_args__ = {"eager_defaults": True}

    id         = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projets.id", ondelete="CASCADE"), nullable=False, index=True)

    tags_metiers    = Column(JSONB, nullable=False, default=list)
    commentaire_amo = Column(String(2000), nullable=True)
    date_creation   = Column(DateTime(timezone=True), server_default=func.now())
    statut          = Column(pg_enum(MissionStatut, "missionstatut"), default=MissionStatut.EN_ATTENTE, nullable=False, index=True)
    is_active       = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    projet = relationship("Projet", back_populates="missions")

    @validates("tags_metiers")
    def _normalize_tags(self, key, value):
        return normalize_tags(value) or []

    # ── Tags ─────────────────────────────────────────────────
    def has_tag_metier(self, tag: str) -> bool:
        return tag.strip().lower() in (self.tags_metiers or [])

    def add_tag_metier(self, tag: str) -> bool:
        value = tag.strip().lower()
        if not value or self.has_tag_metier(value):
            return False
        self.tags_metiers = [*(self.tags_metiers or []), value]
        return True

    def remove_tag_metier(self, tag: str) -> bool:
        value = tag.strip().lower()
        if not self.has_tag_metier(value):
            return False
        self.tags_metiers = [t for t in self.tags_metiers if t != value]
        return True

    @property
    def tags_count(self) -> int:
        return len(self.tags_metiers or [])

    def __repr__(self):
        return f"<Mission id={self.id} projet={self.project_id} statut={self.statut}>"
