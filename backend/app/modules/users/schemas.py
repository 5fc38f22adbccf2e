# app/modules/users/schemas.py
from pydantic import EmailStr, Field
from typing import Dict, List, Optional

from app.modules.auth.schemas import UserOut, PHONE_PATTERN, SIRET_PATTERN
from app.shared.enums import UserRole
from app.shared.schemas import CamelModel, PaginationOut


class UserUpdateIn(CamelModel):
    """Mise à jour partielle. role / isActive / noteFiabilite : admin uniquement."""
    first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    last_name:  Optional[str] = Field(None, min_length=2, max_length=50)
    email:      Optional[EmailStr] = None
    telephone:  Optional[str] = Field(None, pattern=PHONE_PATTERN)
    password:   Optional[str] = Field(None, min_length=6)
    role:       Optional[UserRole] = None
    is_active:  Optional[bool] = None

    zones_intervention: Optional[List[str]] = None
    tags_metiers:       Optional[List[str]] = None
    nom_entreprise:     Optional[str] = Field(None, max_length=100)
    site_web:           Optional[str] = Field(None, max_length=255, pattern=r"^https?://.+")
    siret:              Optional[str] = Field(None, pattern=SIRET_PATTERN)
    note_fiabilite:     Optional[float] = None


class UserListOut(CamelModel):
    users:      List[UserOut]
    pagination: PaginationOut


class RoleCountOut(CamelModel):
    total:   int
    by_role: Dict[str, int]


class TagIn(CamelModel):
    tag: str = Field(..., min_length=1, max_length=50)


class TagChangeOut(CamelModel):
    message: str
    user:    UserOut


class PopularTagOut(CamelModel):
    tag:   str
    count: int
