# app/shared/deps.py
"""
Dépendances FastAPI réutilisables dans tous les routers.
Injectées via Depends() : jamais appelées directement.

Authentification :
    authenticate_token           → jeton requis : 401 si absent, 403 si invalide
    optional_authenticate_token  → jeton facultatif : None si absent ou invalide

Autorisation (à chaîner après l'authentification) :
    authorize_role(*roles)        → 401 sans utilisateur, 403 si rôle hors liste
    authorize_role_hidden(*roles) → même contrôle, 404 "Page non trouvée" en cas d'échec
    authorize_client_or_anonymous → anonyme ou client ; 403 pour tout autre rôle
"""
from typing import Annotated, Iterable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import decode_token
from app.shared.enums import UserRole
from app.shared.models import User

bearer = HTTPBearer(auto_error=False)

TOKEN_REQUIRED    = "Token d'accès requis"
TOKEN_INVALID     = "Token invalide"
NOT_AUTHENTICATED = "Utilisateur non authentifié"
FORBIDDEN_ROLE    = "Accès refusé - Privilèges insuffisants"
HIDDEN_NOT_FOUND  = "Page non trouvée"
CLIENT_ONLY       = "Accès refusé - Seuls les clients peuvent créer des projets"


async def _user_from_token(db: AsyncSession, token: str) -> Optional[User]:
    """Décode le jeton et recharge l'utilisateur. None si quoi que ce soit cloche."""
    try:
        payload = decode_token(token)
        user_id = payload.get("id", payload.get("sub"))
        if user_id is None:
            return None
        user_id = int(user_id)
    except (JWTError, TypeError, ValueError):
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        return None
    return user


# ── Authentification ──────────────────────────────────────

async def authenticate_token(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Utilisateur authentifié (tout rôle)."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=TOKEN_REQUIRED,
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = await _user_from_token(db, credentials.credentials)
    if user is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=TOKEN_INVALID)
    return user


async def optional_authenticate_token(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Optional[User]:
    """Ne rejette jamais : None pour un appel anonyme ou un jeton invalide."""
    if credentials is None or not credentials.credentials:
        return None
    return await _user_from_token(db, credentials.credentials)


# ── Autorisation par rôle ─────────────────────────────────

def _normalize_roles(roles: Iterable) -> frozenset:
    return frozenset(UserRole(r) for r in roles)


def check_role(user: Optional[User], allowed: frozenset, hidden: bool = False) -> User:
    """Contrôle pur, réutilisé par les dépendances ci-dessous."""
    if user is None:
        if hidden:
            raise HTTPException(status_code=404, detail=HIDDEN_NOT_FOUND)
        raise HTTPException(status_code=401, detail=NOT_AUTHENTICATED)
    try:
        role = UserRole(user.role)
    except ValueError:
        role = None
    if role not in allowed:
        if hidden:
            raise HTTPException(status_code=404, detail=HIDDEN_NOT_FOUND)
        raise HTTPException(status_code=403, detail=FORBIDDEN_ROLE)
    return user


def authorize_role(*roles):
    allowed = _normalize_roles(roles)

    async def _dependency(user: Annotated[User, Depends(authenticate_token)]) -> User:
        return check_role(user, allowed)

    return _dependency


def authorize_role_hidden(*roles):
    allowed = _normalize_roles(roles)

    async def _dependency(user: Annotated[User, Depends(authenticate_token)]) -> User:
        return check_role(user, allowed, hidden=True)

    return _dependency


async def authorize_client_or_anonymous(
    user: Annotated[Optional[User], Depends(optional_authenticate_token)],
) -> Optional[User]:
    if user is not None and UserRole(user.role) != UserRole.CLIENT:
        raise HTTPException(status_code=403, detail=CLIENT_ONLY)
    return user


# Instances uniques : les tests les surchargent via app.dependency_overrides
require_admin         = authorize_role(UserRole.ADMIN)
require_amo           = authorize_role(UserRole.AMO)
require_amo_hidden    = authorize_role_hidden(UserRole.AMO)
require_partenaire    = authorize_role(UserRole.PARTENAIRE)
require_client_or_amo = authorize_role(UserRole.CLIENT, UserRole.AMO)
require_amo_or_admin  = authorize_role(UserRole.AMO, UserRole.ADMIN)


# ── Type aliases pour les routers ─────────────────────────
DbDep                = Annotated[AsyncSession, Depends(get_db)]
UserDep              = Annotated[User, Depends(authenticate_token)]
OptionalUserDep      = Annotated[Optional[User], Depends(optional_authenticate_token)]
AdminDep             = Annotated[User, Depends(require_admin)]
AmoDep               = Annotated[User, Depends(require_amo)]
HiddenAmoDep         = Annotated[User, Depends(require_amo_hidden)]
PartenaireDep        = Annotated[User, Depends(require_partenaire)]
ClientOrAmoDep       = Annotated[User, Depends(require_client_or_amo)]
AmoOrAdminDep        = Annotated[User, Depends(require_amo_or_admin)]
ClientOrAnonymousDep = Annotated[Optional[User], Depends(authorize_client_or_anonymous)]
