# app/modules/projets/service.py
"""
Cycle de vie des projets.

Dépôt :
    client connecté → projet rattaché à son compte
    anonyme         → compte client retrouvé (mot de passe vérifié) ou créé,
                      puis projet ; les AMO de la zone sont journalisés
Visibilité :
    admin → tout ; client → ses projets ; AMO → projets assignés
    (+ brouillons libres en lecture) ; partenaire → refusé
Acceptation :
    UPDATE conditionnel côté base ; 409 si un autre AMO est passé avant
"""
import logging
from typing import Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ValidationFailed
from app.core.security import hash_password, verify_password, create_user_token
from app.modules.projets.repository import ProjetRepository
from app.modules.projets.schemas import ProjetCreateIn, ProjetUpdateIn
from app.shared.enums import ProjetStatut, UserRole
from app.shared.models import Projet, User
from app.shared.schemas import paginate
from app.shared.views import projet_view

logger = logging.getLogger(__name__)

repo = ProjetRepository()

PROJET_NOT_FOUND = "Projet non trouvé"
ACCESS_DENIED    = "Accès refusé - Ce projet ne vous concerne pas"
ALREADY_TAKEN    = "Ce projet a déjà été accepté ou n'est plus disponible"
EMAIL_TAKEN      = "Cette adresse email est déjà utilisée"

PROJET_FIELDS = (
    "description", "address", "city", "postal_code", "budget",
    "surface_m2", "bedrooms", "house_type", "has_land",
)


def zone_matches(zone: str, postal_code: str, city: str) -> bool:
    """Une zone couvre un projet si elle préfixe le code postal ou nomme la ville."""
    value = (zone or "").strip().lower()
    if not value:
        return False
    return postal_code.startswith(value) or value == (city or "").strip().lower()


def view(projet: Projet) -> Dict:
    """Projection avec les relations déjà chargées par le repository."""
    loaded = projet.__dict__
    return projet_view(projet, client=loaded.get("client"), amo=loaded.get("amo"))


class ProjetService:

    # ── Dépôt ─────────────────────────────────────────────────

    async def create(
        self, db: AsyncSession, payload: ProjetCreateIn, current_user: Optional[User]
    ) -> Dict:
        token = None
        if current_user is None:
            errors = payload.contact_errors()
            if errors:
                raise ValidationFailed(errors)
            client = await self._resolve_anonymous_client(db, payload)
            token = create_user_token(client)
        else:
            client = current_user

        projet = Projet(
            client_id=client.id,
            statut=ProjetStatut.BROUILLON,
            **{f: getattr(payload, f) for f in PROJET_FIELDS},
        )
        projet.description = projet.description.strip()
        projet = await repo.create(db, projet)
        logger.info("Projet %s déposé par le client %s", projet.id, client.id)

        await self._log_matching_amos(db, projet)
        return {"message": "Projet créé avec succès", "projet": view(projet), "token": token}

    # ── Lecture ───────────────────────────────────────────────

    async def list_projets(
        self,
        db: AsyncSession,
        user: User,
        page: int,
        limit: int,
        statut: Optional[ProjetStatut] = None,
        city: Optional[str] = None,
        client_id: Optional[int] = None,
        amo_id: Optional[int] = None,
    ) -> Dict:
        role = UserRole(user.role)
        if role == UserRole.CLIENT:
            client_id, amo_id = user.id, None
        elif role == UserRole.AMO:
            client_id, amo_id = None, user.id
        elif role != UserRole.ADMIN:
            raise HTTPException(status_code=403, detail="Accès refusé - Privilèges insuffisants")

        projets, total = await repo.list(
            db, (page - 1) * limit, limit,
            client_id=client_id, amo_id=amo_id, statut=statut, city=city,
        )
        return {
            "projets": [view(p) for p in projets],
            "pagination": paginate(total, page, limit),
        }

    async def list_available(self, db: AsyncSession) -> List[Dict]:
        return [view(p) for p in await repo.available_drafts(db)]

    async def get(self, db: AsyncSession, user: User, projet_id: int) -> Dict:
        projet = await self._get_or_404(db, projet_id)
        if not self._can_read(user, projet):
            raise HTTPException(status_code=403, detail=ACCESS_DENIED)
        return view(projet)

    async def stats(self, db: AsyncSession) -> Dict:
        by_status = await repo.count_by_status(db)
        return {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "by_city": await repo.stats_by_city(db),
        }

    # ── Écriture ──────────────────────────────────────────────

    async def update(
        self, db: AsyncSession, user: User, projet_id: int, payload: ProjetUpdateIn
    ) -> Dict:
        projet = await self._get_or_404(db, projet_id)
        if not self._can_write(user, projet):
            raise HTTPException(status_code=403, detail=ACCESS_DENIED)

        data = payload.model_dump(exclude_unset=True)
        is_admin = UserRole(user.role) == UserRole.ADMIN

        if ("amo_id" in data or "is_active" in data) and not is_admin:
            raise HTTPException(
                status_code=403,
                detail="Seul un administrateur peut modifier l'AMO ou l'état du projet",
            )
        if data.get("amo_id") is not None:
            amo = await repo.get_user(db, data["amo_id"])
            if not amo or UserRole(amo.role) != UserRole.AMO:
                raise HTTPException(status_code=400, detail="L'AMO doit avoir le rôle AMO")

        for key, value in data.items():
            if key in ("description", "address", "city", "postal_code", "statut", "has_land") and value is None:
                continue
            setattr(projet, key, value)

        projet = await repo.save(db, projet)
        logger.info("Projet %s modifié par l'utilisateur %s", projet_id, user.id)
        return view(projet)

    async def delete(self, db: AsyncSession, user: User, projet_id: int) -> Dict:
        projet = await self._get_or_404(db, projet_id)
        if projet.client_id != user.id and UserRole(user.role) != UserRole.ADMIN:
            raise HTTPException(status_code=403, detail=ACCESS_DENIED)
        projet.is_active = False
        await db.commit()
        logger.info("Projet %s désactivé", projet_id)
        return {"message": "Projet supprimé avec succès"}

    async def accept(self, db: AsyncSession, amo: User, projet_id: int) -> Dict:
        if not await repo.accept(db, projet_id, amo.id):
            if not await repo.get_by_id(db, projet_id):
                raise HTTPException(status_code=404, detail=PROJET_NOT_FOUND)
            raise HTTPException(status_code=409, detail=ALREADY_TAKEN)

        projet = await repo.get_by_id(db, projet_id, with_people=True)
        logger.info("Projet %s accepté par l'AMO %s", projet_id, amo.id)
        return {"message": "Projet accepté avec succès", "projet": view(projet)}

    # ── Privé ─────────────────────────────────────────────────

    async def _get_or_404(self, db: AsyncSession, projet_id: int) -> Projet:
        projet = await repo.get_by_id(db, projet_id, with_people=True)
        if not projet:
            raise HTTPException(status_code=404, detail=PROJET_NOT_FOUND)
        return projet

    def _can_write(self, user: User, projet: Projet) -> bool:
        role = UserRole(user.role)
        if role == UserRole.ADMIN:
            return True
        if role == UserRole.CLIENT:
            return projet.client_id == user.id
        if role == UserRole.AMO:
            return projet.amo_id == user.id
        return False

    def _can_read(self, user: User, projet: Projet) -> bool:
        if self._can_write(user, projet):
            return True
        return (
            UserRole(user.role) == UserRole.AMO
            and projet.amo_id is None
            and ProjetStatut(projet.statut) == ProjetStatut.BROUILLON
        )

    async def _resolve_anonymous_client(self, db: AsyncSession, payload: ProjetCreateIn) -> User:
        existing = await repo.get_user_by_email(db, payload.client_email)
        if existing:
            if UserRole(existing.role) != UserRole.CLIENT:
                raise HTTPException(
                    status_code=409,
                    detail="Cette adresse email est associée à un compte professionnel",
                )
            if not verify_password(payload.client_password, existing.hashed_password):
                raise HTTPException(status_code=401, detail="Email ou mot de passe incorrect")
            if not existing.is_active:
                raise HTTPException(status_code=403, detail="Compte désactivé")
            return existing

        client = User(
            first_name=payload.client_first_name.strip(),
            last_name=payload.client_last_name.strip(),
            email=payload.client_email,
            telephone=payload.client_phone,
            hashed_password=hash_password(payload.client_password),
            role=UserRole.CLIENT,
        )
        try:
            db.add(client)
            await db.flush()
        except IntegrityError:
            # compte créé entre-temps par une autre requête
            await db.rollback()
            raise HTTPException(status_code=409, detail=EMAIL_TAKEN)
        logger.info("Compte client créé lors d'un dépôt anonyme : %s", client.email)
        return client

    async def _log_matching_amos(self, db: AsyncSession, projet: Projet) -> None:
        """Journalise les AMO candidats ; aucun envoi."""
        try:
            amos = await repo.active_amos_with_zones(db)
        except SQLAlchemyError as exc:
            logger.warning("Recherche des AMO impossible pour le projet %s : %s", projet.id, exc)
            return
        matching = [
            a for a in amos
            if any(zone_matches(z, projet.postal_code, projet.city) for z in a.zones_intervention or [])
        ]
        if matching:
            logger.info(
                "Projet %s (%s %s) : AMO à notifier → %s",
                projet.id, projet.postal_code, projet.city,
                ", ".join(a.email for a in matching),
            )
        else:
            logger.info("Projet %s : aucun AMO sur la zone %s", projet.id, projet.postal_code)
