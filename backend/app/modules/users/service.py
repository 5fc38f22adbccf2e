# app/modules/users/service.py
"""
Gestion des comptes (admin ou propriétaire) et annuaire des professionnels.

Règles :
    - lecture / modification : soi-même ou admin
    - role, isActive, noteFiabilite : admin uniquement
    - champs pro ignorés pour les rôles non pro, vidés quand le rôle quitte AMO/partenaire
    - mot de passe : 8 caractères minimum pour un AMO ou un partenaire
    - suppression définitive : admin, jamais le dernier admin
"""
import logging
from collections import Counter
from typing import Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ValidationFailed
from app.core.security import hash_password
from app.modules.auth.schemas import PRO_PASSWORD_MESSAGE
from app.modules.users.repository import UserRepository
from app.modules.users.schemas import UserUpdateIn
from app.shared.enums import UserRole
from app.shared.models import User
from app.shared.models.user import PROFESSIONAL_FIELDS, clear_professional_fields
from app.shared.schemas import paginate
from app.shared.views import user_view

logger = logging.getLogger(__name__)

repo = UserRepository()

ADMIN_ONLY_FIELDS = {"role", "is_active", "note_fiabilite"}
REQUIRED_FIELDS   = {"first_name", "last_name", "email", "role", "is_active"}
USER_NOT_FOUND = "Utilisateur non trouvé"
EMAIL_TAKEN    = "Cette adresse email est déjà utilisée"
PRO_PASSWORD_MIN_LENGTH = 8


def popular_tags(tag_lists: List[List[str]], limit: int = 10) -> List[Dict]:
    counter = Counter(tag for tags in tag_lists for tag in tags)
    return [{"tag": tag, "count": count} for tag, count in counter.most_common(limit)]


class UserService:

    # ── Admin ─────────────────────────────────────────────────

    async def list_users(
        self,
        db: AsyncSession,
        page: int,
        limit: int,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
    ) -> Dict:
        users, total = await repo.list(db, (page - 1) * limit, limit, role=role, is_active=is_active)
        return {
            "users": [user_view(u) for u in users],
            "pagination": paginate(total, page, limit),
        }

    async def role_stats(self, db: AsyncSession) -> Dict:
        by_role = await repo.count_by_role(db)
        return {"total": sum(by_role.values()), "by_role": by_role}

    async def delete_user(self, db: AsyncSession, user_id: int) -> Dict:
        user = await self._get_or_404(db, user_id)
        if UserRole(user.role) == UserRole.ADMIN and await repo.count_admins(db) <= 1:
            raise HTTPException(status_code=403, detail="Impossible de supprimer le dernier administrateur")
        await repo.delete(db, user)
        logger.info("Utilisateur %s supprimé", user_id)
        return {"message": "Utilisateur supprimé avec succès"}

    # ── Propriétaire ou admin ─────────────────────────────────

    async def get_user(self, db: AsyncSession, requester: User, user_id: int) -> Dict:
        self._assert_self_or_admin(requester, user_id)
        return user_view(await self._get_or_404(db, user_id))

    async def update_user(
        self, db: AsyncSession, requester: User, user_id: int, payload: UserUpdateIn
    ) -> Dict:
        self._assert_self_or_admin(requester, user_id)
        user = await self._get_or_404(db, user_id)
        data = payload.model_dump(exclude_unset=True)

        is_admin = UserRole(requester.role) == UserRole.ADMIN
        if not is_admin and ADMIN_ONLY_FIELDS & data.keys():
            raise HTTPException(
                status_code=403,
                detail="Seul un administrateur peut modifier le rôle, le statut ou la note de fiabilité",
            )

        if data.get("email") and data["email"].lower() != user.email:
            if await repo.get_by_email(db, data["email"]):
                raise HTTPException(status_code=409, detail=EMAIL_TAKEN)

        note = data.get("note_fiabilite")
        if note is not None:
            if not 0 <= note <= 5:
                raise HTTPException(status_code=400, detail="La note de fiabilité doit être entre 0 et 5")
            data["note_fiabilite"] = round(note, 2)

        new_role = UserRole(data.get("role") or user.role)

        password = data.pop("password", None)
        if password:
            if new_role.is_professional and len(password) < PRO_PASSWORD_MIN_LENGTH:
                raise ValidationFailed.single("password", PRO_PASSWORD_MESSAGE)
            user.hashed_password = hash_password(password)

        if not new_role.is_professional:
            for field in PROFESSIONAL_FIELDS:
                data.pop(field, None)

        for key, value in data.items():
            if key in REQUIRED_FIELDS and value is None:
                continue
            setattr(user, key, value)
        clear_professional_fields(user)

        try:
            user = await repo.save(db, user)
        except IntegrityError:
            # email pris par un autre compte depuis la vérification
            await db.rollback()
            raise HTTPException(status_code=409, detail=EMAIL_TAKEN)
        return user_view(user)

    # ── Tags métiers ──────────────────────────────────────────

    async def add_tag(self, db: AsyncSession, requester: User, user_id: int, tag: str) -> Dict:
        user = await self._get_professional(db, requester, user_id)
        if not user.add_tag_metier(tag):
            raise HTTPException(status_code=409, detail="Tag métier déjà existant ou invalide")
        user = await repo.save(db, user)
        return {"message": f'Tag métier "{tag.strip().lower()}" ajouté avec succès', "user": user_view(user)}

    async def remove_tag(self, db: AsyncSession, requester: User, user_id: int, tag: str) -> Dict:
        user = await self._get_professional(db, requester, user_id)
        if not user.remove_tag_metier(tag):
            raise HTTPException(status_code=404, detail="Tag métier non trouvé")
        user = await repo.save(db, user)
        return {"message": f'Tag métier "{tag.strip().lower()}" supprimé avec succès', "user": user_view(user)}

    # ── Annuaire public ───────────────────────────────────────

    async def professionals_by_tag(self, db: AsyncSession, tag: str) -> List[Dict]:
        return [user_view(u) for u in await repo.professionals_by_tag(db, tag)]

    async def professionals_by_zone(self, db: AsyncSession, zone: str) -> List[Dict]:
        return [user_view(u) for u in await repo.professionals_by_zone(db, zone)]

    async def top_professionals(self, db: AsyncSession, limit: int) -> List[Dict]:
        return [user_view(u) for u in await repo.top_professionals(db, limit)]

    async def popular_tags(self, db: AsyncSession, limit: int) -> List[Dict]:
        return popular_tags(await repo.professional_tag_lists(db), limit)

    # ── Privé ─────────────────────────────────────────────────

    def _assert_self_or_admin(self, requester: User, user_id: int) -> None:
        if requester.id != user_id and UserRole(requester.role) != UserRole.ADMIN:
            raise HTTPException(status_code=403, detail="Accès refusé - Privilèges insuffisants")

    async def _get_or_404(self, db: AsyncSession, user_id: int) -> User:
        user = await repo.get_by_id(db, user_id)
        if not user:
            raise HTTPException(status_code=404, detail=USER_NOT_FOUND)
        return user

    async def _get_professional(self, db: AsyncSession, requester: User, user_id: int) -> User:
        self._assert_self_or_admin(requester, user_id)
        user = await self._get_or_404(db, user_id)
        if not UserRole(user.role).is_professional:
            raise HTTPException(status_code=400, detail="Seuls les professionnels peuvent avoir des tags métiers")
        return user
