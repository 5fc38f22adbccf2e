# app/modules/users/router.py
"""
Comptes utilisateurs et annuaire des professionnels.

Les routes fixes (/stats, /professionals/...) sont déclarées avant /{user_id}.
"""
from fastapi import APIRouter, Query
from typing import List, Optional

from app.modules.auth.schemas import UserOut
from app.modules.users.schemas import (
    UserUpdateIn, UserListOut, RoleCountOut, TagIn, TagChangeOut, PopularTagOut,
)
from app.modules.users.service import UserService
from app.shared.deps import DbDep, UserDep, AdminDep
from app.shared.enums import UserRole
from app.shared.schemas import MessageOut

router = APIRouter(prefix="/api/users", tags=["Users"])
service = UserService()


# ── Admin ─────────────────────────────────────────────────

@router.get("", response_model=UserListOut)
async def list_users(
    db: DbDep,
    admin: AdminDep,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: Optional[UserRole] = None,
    is_active: Optional[bool] = Query(None, alias="isActive"),
):
    return await service.list_users(db, page, limit, role=role, is_active=is_active)


@router.get("/stats", response_model=RoleCountOut)
async def role_stats(db: DbDep, admin: AdminDep):
    return await service.role_stats(db)


# ── Annuaire public ───────────────────────────────────────

@router.get("/professionals/tag/{tag}", response_model=List[UserOut])
async def professionals_by_tag(tag: str, db: DbDep):
    return await service.professionals_by_tag(db, tag)


@router.get("/professionals/zone/{zone}", response_model=List[UserOut])
async def professionals_by_zone(zone: str, db: DbDep):
    return await service.professionals_by_zone(db, zone)


@router.get("/professionals/top", response_model=List[UserOut])
async def top_professionals(db: DbDep, limit: int = Query(10, ge=1, le=50)):
    """Professionnels les mieux notés (noteFiabilite décroissante)."""
    return await service.top_professionals(db, limit)


@router.get("/professionals/stats/popular-tags", response_model=List[PopularTagOut])
async def popular_professional_tags(db: DbDep, limit: int = Query(10, ge=1, le=50)):
    return await service.popular_tags(db, limit)


# ── Compte ────────────────────────────────────────────────

@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: int, db: DbDep, current_user: UserDep):
    return await service.get_user(db, current_user, user_id)


@router.put("/{user_id}", response_model=UserOut)
async def update_user(user_id: int, payload: UserUpdateIn, db: DbDep, current_user: UserDep):
    return await service.update_user(db, current_user, user_id, payload)


@router.delete("/{user_id}", response_model=MessageOut)
async def delete_user(user_id: int, db: DbDep, admin: AdminDep):
    return await service.delete_user(db, user_id)


# ── Tags métiers ──────────────────────────────────────────

@router.post("/{user_id}/tags-metiers", response_model=TagChangeOut)
async def add_tag_metier(user_id: int, payload: TagIn, db: DbDep, current_user: UserDep):
    return await service.add_tag(db, current_user, user_id, payload.tag)


@router.delete("/{user_id}/tags-metiers", response_model=TagChangeOut)
async def remove_tag_metier(user_id: int, payload: TagIn, db: DbDep, current_user: UserDep):
    return await service.remove_tag(db, current_user, user_id, payload.tag)
