# app/shared/models/projet.py
from sqlalchemy import (
    Column, Integer, String, Boolean, Text, Numeric,
    DateTime, ForeignKey, CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base, pg_enum
from app.shared.enums import ProjetStatut, HouseType


class Projet(Base):
    """
    Projet de construction / rénovation d'un client.

    amo_id reste NULL jusqu'à l'acceptation par un AMO
    (projets/repository.accept : UPDATE conditionnel, un seul gagnant).
    """
    __tablename__ = "projets"
    __mapper_args__ = {"eager_defaults": True}
    __table_args__ = (
        CheckConstraint("budget IS NULL OR budget >= 0", name="ck_projets_budget"),
        CheckConstraint("surface_m2 IS NULL OR surface_m2 >= 1", name="ck_projets_surface"),
        CheckConstraint("bedrooms IS NULL OR bedrooms >= 0", name="ck_projets_bedrooms"),
    )

    id        = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amo_id    = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    statut = Column(pg_enum(ProjetStatut, "projetstatut"), default=ProjetStatut.BROUILLON, nullable=False, index=True)

    description = Column(Text, nullable=False)
    address     = Column(String(255), nullable=False)
    city        = Column(String(100), nullable=False, index=True)
    postal_code = Column(String(5), nullable=False)

    budget     = Column(Numeric(10, 2), nullable=True)
    surface_m2 = Column(Integer, nullable=True)
    bedrooms   = Column(Integer, nullable=True)
    house_type = Column(pg_enum(HouseType, "housetype"), nullable=True)
    has_land   = Column(Boolean, default=False, nullable=False)

    date_submission   = Column(DateTime(timezone=True), server_default=func.now())
    date_modification = Column(DateTime(timezone=True), onupdate=func.now())
    is_active         = Column(Boolean, default=True, nullable=False)

    # ── Relations ────────────────────────────────────────────
    client = relationship("User", foreign_keys=[client_id], back_populates="projets")
    amo    = relationship("User", foreign_keys=[amo_id])

    missions = relationship(
        "Mission", back_populates="projet",
        cascade="all, delete-orphan",
    )
    documents = relationship(
        "Document", back_populates="projet",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Projet id={self.id} client={self.client_id} amo={self.amo_id} statut={self.statut}>"
