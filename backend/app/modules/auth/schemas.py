# app/modules/auth/schemas.py
import re
from datetime import datetime
from pydantic import EmailStr, Field, field_validator, model_validator
from typing import List, Optional

from app.shared.enums import UserRole
from app.shared.schemas import CamelModel

PHONE_PATTERN = r"^[\d\s\+\-\(\)\.]{8,20}$"
SIRET_PATTERN = r"^\d{14}$"

PRO_PASSWORD_MESSAGE = "Le mot de passe doit contenir au moins 8 caractères pour les professionnels"
PHONE_MESSAGE        = "Le format du numéro de téléphone n'est pas valide"


# ── Sorties ───────────────────────────────────────────────

class UserOut(CamelModel):
    """Vue publique d'un utilisateur : jamais de mot de passe."""
    id:         int
    first_name: str
    last_name:  str
    full_name:  str
    email:      str
    telephone:  Optional[str] = None
    role:       UserRole
    is_active:  bool = True
    last_login: Optional[datetime] = None

    zones_intervention: Optional[List[str]] = None
    tags_metiers:       Optional[List[str]] = None
    nom_entreprise:     Optional[str] = None
    site_web:           Optional[str] = None
    siret:              Optional[str] = None
    note_fiabilite:     Optional[float] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthOut(CamelModel):
    message: str
    user:    UserOut
    token:   str


# ── Register ──────────────────────────────────────────────

class RegisterClientIn(CamelModel):
    """Inscription publique d'un client."""
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name:  str = Field(..., min_length=2, max_length=50)
    email:      EmailStr
    password:   str = Field(..., min_length=6)
    telephone:  Optional[str] = Field(None, pattern=PHONE_PATTERN)


class _RegisterProIn(CamelModel):
    first_name:       str = Field(..., min_length=2, max_length=50)
    last_name:        str = Field(..., min_length=2, max_length=50)
    email:            EmailStr
    password:         str
    password_confirm: str
    telephone:        str

    zones_intervention: Optional[List[str]] = None
    tags_metiers:       Optional[List[str]] = None
    nom_entreprise:     Optional[str] = Field(None, max_length=100)
    site_web:           Optional[str] = Field(None, max_length=255)
    siret:              Optional[str] = Field(None, pattern=SIRET_PATTERN)

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError(PRO_PASSWORD_MESSAGE)
        return v

    @field_validator("telephone")
    @classmethod
    def phone_format(cls, v: str) -> str:
        v = v.strip()
        if not re.match(PHONE_PATTERN, v):
            raise ValueError(PHONE_MESSAGE)
        return v

    @field_validator("site_web")
    @classmethod
    def website_scheme(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not re.match(r"^https?://.+", v):
            raise ValueError("Le site web doit commencer par http:// ou https://")
        return v

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.password_confirm:
            raise ValueError("Le mot de passe et sa confirmation ne correspondent pas")
        return self


class RegisterAmoIn(_RegisterProIn):
    """Inscription d'un AMO (assistance à maîtrise d'ouvrage)."""


class RegisterPartnerIn(_RegisterProIn):
    """Inscription d'un partenaire / artisan du bâtiment."""
    nom_entreprise:     str = Field(..., min_length=1, max_length=100)
    tags_metiers:       List[str]
    zones_intervention: List[str]

    @field_validator("tags_metiers")
    @classmethod
    def at_least_one_tag(cls, v: List[str]) -> List[str]:
        if not [t for t in v if str(t).strip()]:
            raise ValueError("Au moins un tag métier est requis (ex: plombier, maçon, électricien...)")
        return v

    @field_validator("zones_intervention")
    @classmethod
    def at_least_one_zone(cls, v: List[str]) -> List[str]:
        if not [z for z in v if str(z).strip()]:
            raise ValueError("Au moins une zone d'intervention est requise (villes ou départements)")
        return v


# ── Login ─────────────────────────────────────────────────

class LoginIn(CamelModel):
    email:    EmailStr
    password: str
