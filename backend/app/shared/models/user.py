# app/shared/models/user.py
"""
Modèle User : identité + profil professionnel optionnel.

Champs pro (zones_intervention, tags_metiers, nom_entreprise, site_web,
siret, note_fiabilite) : uniquement pour AMO / partenaire. Le hook
before_insert / before_update les remet à NULL pour tout autre rôle.

Le mot de passe est haché par les services (core.security.hash_password)
avant toute écriture ; le modèle ne stocke jamais de clair.
"""
from sqlalchemy import (
    Column, Integer, String, Boolean, Float,
    DateTime, CheckConstraint, event,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func

from app.core.database import Base, pg_enum
from app.shared.enums import UserRole

PROFESSIONAL_FIELDS = (
    "zones_intervention", "tags_metiers", "nom_entreprise",
    "site_web", "siret", "note_fiabilite",
)


def normalize_tags(tags):
    """Minuscules, trim, vides retirés, doublons retirés (ordre conservé)."""
    if tags is None:
        return None
    seen = []
    for tag in tags:
        value = str(tag).strip().lower()
        if value and value not in seen:
            seen.append(value)
    return seen


def normalize_zones(zones):
    if zones is None:
        return None
    return [str(z).strip() for z in zones if str(z).strip()]


class User(Base):
    __tablename__ = "users"
    __mapper_args__ = {"eager_defaults": True}
    __table_args__ = (
        CheckConstraint(
            "note_fiabilite IS NULL OR (note_fiabilite >= 0 AND note_fiabilite <= 5)",
            name="ck_users_note_fiabilite",
        ),
    )

    id         = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(50), nullable=False)
    last_name  = Column(String(50), nullable=False)
    email      = Column(String(100), unique=True, index=True, nullable=False)
    telephone  = Column(String(20), nullable=True)

    hashed_password = Column(String(255), nullable=False)

    role       = Column(pg_enum(UserRole, "userrole"), default=UserRole.CLIENT, nullable=False, index=True)
    is_active  = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=True)

    # ── Profil professionnel (AMO / partenaire) ──────────────
    zones_intervention = Column(JSONB, nullable=True)   # ["Paris", "92", ...]
    tags_metiers       = Column(JSONB, nullable=True)   # ["plombier", "maçon"]
    nom_entreprise     = Column(String(100), nullable=True)
    site_web           = Column(String(255), nullable=True)
    siret              = Column(String(14), nullable=True)
    note_fiabilite     = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # ── Relations ────────────────────────────────────────────
    projets = relationship(
        "Projet", back_populates="client",
        foreign_keys="Projet.client_id",
        cascade="all, delete-orphan",
    )
    documents = relationship(
        "Document", back_populates="user",
        cascade="all, delete-orphan",
    )

    # ── Normalisation ────────────────────────────────────────
    @validates("email")
    def _normalize_email(self, key, value):
        return value.strip().lower() if value else value

    @validates("tags_metiers")
    def _normalize_tags(self, key, value):
        return normalize_tags(value)

    @validates("zones_intervention")
    def _normalize_zones(self, key, value):
        return normalize_zones(value)

    # ── Helpers ──────────────────────────────────────────────
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_professional(self) -> bool:
        return UserRole(self.role).is_professional

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

    def __repr__(self):
        return f"<User id={self.id} email={self.email} role={self.role}>"


def clear_professional_fields(target) -> None:
    if target.role is None or UserRole(target.role).is_professional:
        return
    for field in PROFESSIONAL_FIELDS:
        setattr(target, field, None)


@event.listens_for(User, "before_insert")
@event.listens_for(User, "before_update")
def _user_before_write(mapper, connection, target):
    clear_professional_fields(target)
