# app/modules/projets/schemas.py
import re
from datetime import datetime
from decimal import Decimal
from pydantic import EmailStr, Field, field_validator
from typing import Dict, List, Optional

from app.shared.enums import ProjetStatut, HouseType
from app.shared.schemas import CamelModel, PaginationOut

POSTAL_CODE_PATTERN = r"^[0-9]{5}$"
FRENCH_PHONE_RE     = re.compile(r"^(\+33|0)[1-9]\d{8}$")

# Champs de contact exigés d'un déposant anonyme (clé wire → message)
ANONYMOUS_CONTACT_FIELDS = {
    "client_first_name": ("clientFirstName", "Le prénom est requis"),
    "client_last_name":  ("clientLastName",  "Le nom est requis"),
    "client_email":      ("clientEmail",     "L'email est requis"),
    "client_phone":      ("clientPhone",     "Le téléphone est requis"),
    "client_password":   ("clientPassword",  "Le mot de passe est requis"),
}


# ── Entrées ───────────────────────────────────────────────

class _ProjetFields(CamelModel):
    budget:     Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    surface_m2: Optional[int] = Field(None, ge=1)
    bedrooms:   Optional[int] = Field(None, ge=0)
    house_type: Optional[HouseType] = None


class ProjetCreateIn(_ProjetFields):
    """
    Dépôt de projet. Un client connecté n'envoie que le projet ;
    un déposant anonyme ajoute ses coordonnées (client*), qui servent
    à retrouver ou créer son compte client.
    """
    description: str = Field(..., min_length=10, max_length=5000)
    address:     str = Field(..., min_length=5, max_length=255)
    city:        str = Field(..., min_length=2, max_length=100)
    postal_code: str = Field(..., pattern=POSTAL_CODE_PATTERN)
    has_land:    bool = False

    client_first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    client_last_name:  Optional[str] = Field(None, min_length=2, max_length=50)
    client_email:      Optional[EmailStr] = None
    client_phone:      Optional[str] = None
    client_password:   Optional[str] = None

    @field_validator("client_phone")
    @classmethod
    def french_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = re.sub(r"\s+", "", v)
        if not FRENCH_PHONE_RE.match(v):
            raise ValueError("Numéro de téléphone invalide (format français attendu)")
        return v

    @field_validator("client_password")
    @classmethod
    def strong_password(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if len(v) < 8:
            raise ValueError("Le mot de passe doit contenir au moins 8 caractères")
        if not (re.search(r"[a-z]", v) and re.search(r"[A-Z]", v) and re.search(r"\d", v)):
            raise ValueError("Le mot de passe doit contenir au moins une minuscule, une majuscule et un chiffre")
        return v

    def contact_errors(self) -> List[Dict[str, str]]:
        """Champs de contact manquants pour un dépôt anonyme."""
        errors = []
        for attr, (field, message) in ANONYMOUS_CONTACT_FIELDS.items():
            value = getattr(self, attr)
            if value is None or (isinstance(value, str) and not value.strip()):
                errors.append({"field": field, "message": message})
        return errors


class ProjetUpdateIn(_ProjetFields):
    description: Optional[str] = Field(None, min_length=10, max_length=5000)
    address:     Optional[str] = Field(None, min_length=5, max_length=255)
    city:        Optional[str] = Field(None, min_length=2, max_length=100)
    postal_code: Optional[str] = Field(None, pattern=POSTAL_CODE_PATTERN)
    has_land:    Optional[bool] = None
    statut:      Optional[ProjetStatut] = None
    amo_id:      Optional[int] = None
    is_active:   Optional[bool] = None


# ── Sorties ───────────────────────────────────────────────

class UserSummaryOut(CamelModel):
    id:         int
    first_name: str
    last_name:  str
    full_name:  str
    email:      str
    telephone:  Optional[str] = None


class ProjetOut(CamelModel):
    id:          int
    client_id:   int
    amo_id:      Optional[int] = None
    statut:      ProjetStatut
    description: str
    address:     str
    city:        str
    postal_code: str
    budget:      Optional[float] = None
    surface_m2:  Optional[int] = None
    bedrooms:    Optional[int] = None
    house_type:  Optional[HouseType] = None
    has_land:    bool = False

    date_submission:   Optional[datetime] = None
    date_modification: Optional[datetime] = None
    is_active:         bool = True

    full_address:     str
    formatted_budget: str
    is_in_progress:   bool
    is_completed:     bool
    project_duration: Optional[int] = None

    client: Optional[UserSummaryOut] = None
    amo:    Optional[UserSummaryOut] = None


class ProjetCreatedOut(CamelModel):
    message: str
    projet:  ProjetOut
    token:   Optional[str] = None   # renvoyé au déposant anonyme


class ProjetAcceptedOut(CamelModel):
    message: str
    projet:  ProjetOut


class ProjetListOut(CamelModel):
    projets:    List[ProjetOut]
    pagination: PaginationOut


class CityStatOut(CamelModel):
    city:       str
    count:      int
    avg_budget: Optional[float] = None


class ProjetStatsOut(CamelModel):
    total:     int
    by_status: Dict[str, int]
    by_city:   List[CityStatOut]
