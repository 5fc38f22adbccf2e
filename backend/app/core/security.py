# backend/app/core/security.py
"""
Hash des mots de passe (bcrypt via passlib) et jetons JWT (python-jose).

Jeton : claims {sub, id, email, role}, signé HS256, expiration fixe 24 h.
decode_token() lève JWTError pour toute signature ou expiration invalide.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(candidate: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return pwd_context.verify(candidate, hashed)
    except ValueError:
        # hash illisible (ancien format, valeur en clair)
        return False


def create_access_token(claims: Dict[str, Any]) -> str:
    to_encode = dict(claims)
    if "id" in to_encode and "sub" not in to_encode:
        to_encode["sub"] = str(to_encode["id"])
    to_encode["exp"] = datetime.now(timezone.utc) + timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_user_token(user) -> str:
    role = user.role.value if hasattr(user.role, "value") else str(user.role)
    return create_access_token({"id": user.id, "email": user.email, "role": role})


def decode_token(token: str) -> Dict[str, Any]:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
