# app/modules/auth/router.py
from fastapi import APIRouter
from app.modules.auth.schemas import (
    RegisterClientIn, RegisterAmoIn, RegisterPartnerIn, LoginIn,
    UserOut, AuthOut,
)
from app.modules.auth.service import AuthService
from app.shared.deps import DbDep, UserDep
from app.shared.views import user_view

router = APIRouter(prefix="/api/users", tags=["Auth"])
service = AuthService()


@router.post("", response_model=UserOut, status_code=201)
async def register_client(payload: RegisterClientIn, db: DbDep):
    """Inscription client publique → User(role=client)."""
    return await service.register_client(db, payload)


@router.post("/register-amo", response_model=AuthOut, status_code=201)
async def register_amo(payload: RegisterAmoIn, db: DbDep):
    return await service.register_amo(db, payload)


@router.post("/register-partner", response_model=AuthOut, status_code=201)
async def register_partner(payload: RegisterPartnerIn, db: DbDep):
    """Inscription artisan : nom d'entreprise, au moins un tag métier et une zone."""
    return await service.register_partner(db, payload)


@router.post("/login", response_model=AuthOut)
async def login(payload: LoginIn, db: DbDep):
    return await service.login(db, payload)


@router.get("/me", response_model=UserOut)
async def me(current_user: UserDep):
    return user_view(current_user)
