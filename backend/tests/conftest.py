# tests/conftest.py
"""
Fixtures et factories partagées sur l'ensemble de la suite de tests.

Trois couches :
    1. Pur     : sanitize, vues, sécurité, stockage : aucun mock nécessaire
    2. Service : mocks AsyncSession + repos via pytest-mock
    3. Router  : httpx.AsyncClient + dependency_overrides FastAPI
"""
import pytest
from types import SimpleNamespace
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from app.main import app
from app.core.database import get_db
from app.shared.deps import authenticate_token, optional_authenticate_token
from app.shared.enums import (
    UserRole, ProjetStatut, HouseType, MissionStatut,
    DocumentType, AuthorType, Visibilite,
)


# ── Factories de modèles ORM (SimpleNamespace : léger, sans ORM) ──────────────

def make_user(**kwargs) -> SimpleNamespace:
    defaults = {
        "id": 1,
        "first_name": "Jean",
        "last_name": "Dupont",
        "email": "client@test.com",
        "telephone": None,
        "hashed_password": "hashed_password",
        "role": UserRole.CLIENT,
        "is_active": True,
        "last_login": None,
        "zones_intervention": None,
        "tags_metiers": None,
        "nom_entreprise": None,
        "site_web": None,
        "siret": None,
        "note_fiabilite": None,
        "created_at": datetime(2025, 1, 1, tzinfo=timezone.utc),
        "updated_at": None,
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def make_amo(**kwargs) -> SimpleNamespace:
    defaults = {
        "id": 2,
        "first_name": "Alice",
        "last_name": "Martin",
        "email": "amo@test.com",
        "role": UserRole.AMO,
        "zones_intervention": ["75", "Paris"],
        "tags_metiers": [],
        "nom_entreprise": "Martin AMO",
    }
    defaults.update(kwargs)
    return make_user(**defaults)


def make_partner(**kwargs) -> SimpleNamespace:
    defaults = {
        "id": 3,
        "first_name": "Paul",
        "last_name": "Leroy",
        "email": "artisan@test.com",
        "role": UserRole.PARTENAIRE,
        "zones_intervention": ["92"],
        "tags_metiers": ["plombier", "chauffagiste"],
        "nom_entreprise": "Leroy Plomberie",
        "note_fiabilite": 4.5,
    }
    defaults.update(kwargs)
    return make_user(**defaults)


def make_admin(**kwargs) -> SimpleNamespace:
    defaults = {
        "id": 99,
        "first_name": "Admin",
        "last_name": "Experta",
        "email": "admin@experta.com",
        "role": UserRole.ADMIN,
    }
    defaults.update(kwargs)
    return make_user(**defaults)


def make_projet(**kwargs) -> SimpleNamespace:
    defaults = {
        "id": 1,
        "client_id": 1,
        "amo_id": None,
        "statut": ProjetStatut.BROUILLON,
        "description": "Rénovation complète d'une maison de ville",
        "address": "12 rue des Lilas",
        "city": "Paris",
        "postal_code": "75011",
        "budget": Decimal("150000.00"),
        "surface_m2": 120,
        "bedrooms": 3,
        "house_type": HouseType.ETAGE,
        "has_land": False,
        "date_submission": datetime(2025, 1, 1, tzinfo=timezone.utc),
        "date_modification": None,
        "is_active": True,
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def make_mission(**kwargs) -> SimpleNamespace:
    defaults = {
        "id": 1,
        "project_id": 1,
        "tags_metiers": ["plombier"],
        "commentaire_amo": None,
        "date_creation": datetime(2025, 1, 1, tzinfo=timezone.utc),
        "statut": MissionStatut.EN_ATTENTE,
        "is_active": True,
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def make_document(**kwargs) -> SimpleNamespace:
    defaults = {
        "id": 1,
        "user_id": 1,
        "projet_id": None,
        "nom": "plan.pdf",
        "nom_original": "plan.pdf",
        "nom_fichier": "document-1700000000000-123.pdf",
        "type": DocumentType.AUTRE,
        "lien_fichier": "client_1/document-1700000000000-123.pdf",
        "chemin_fichier": "client_1/document-1700000000000-123.pdf",
        "mime_type": "application/pdf",
        "taille_fichier": 2048,
        "format_fichier": "pdf",
        "author_type": AuthorType.CLIENT,
        "visibilite": Visibilite.PRIVE,
        "is_active": True,
        "created_at": datetime(2025, 1, 1, tzinfo=timezone.utc),
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def scalar_result(value) -> MagicMock:
    """Résultat de db.execute() dont scalar_one_or_none() renvoie `value`."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


# ── DB mock factory ───────────────────────────────────────────────────────────

def make_async_db() -> AsyncMock:
    """
    AsyncMock simulant une AsyncSession SQLAlchemy.
    flush() / refresh() posent un id sur les objets ajoutés, comme la base.
    """
    db = AsyncMock(spec=AsyncSession)
    added_objects: list = []

    def capture_add(obj):
        added_objects.append(obj)

    def capture_add_all(objs):
        added_objects.extend(objs)

    db.add = MagicMock(side_effect=capture_add)
    db.add_all = MagicMock(side_effect=capture_add_all)
    db.added = added_objects

    async def flush_side_effect():
        for i, obj in enumerate(added_objects):
            if not getattr(obj, "id", None):
                obj.id = i + 1

    db.flush = AsyncMock(side_effect=flush_side_effect)

    async def refresh_side_effect(obj, *args, **kwargs):
        if not getattr(obj, "id", None):
            obj.id = 1

    db.refresh = AsyncMock(side_effect=refresh_side_effect)
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.close = AsyncMock()

    return db


# ── Fixtures HTTP (httpx.AsyncClient + dependency_overrides) ─────────────────

def _authenticated_client(user):
    mock_db = AsyncMock(spec=AsyncSession)
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[authenticate_token] = lambda: user
    app.dependency_overrides[optional_authenticate_token] = lambda: user
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
async def client():
    """Client sans auth : endpoints publics, ou service entièrement mocké."""
    mock_db = AsyncMock(spec=AsyncSession)
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[optional_authenticate_token] = lambda: None
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def client_client():
    """Client authentifié comme client (id=1)."""
    async with _authenticated_client(make_user()) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def amo_client():
    """Client authentifié comme AMO (id=2)."""
    async with _authenticated_client(make_amo()) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def partner_client():
    """Client authentifié comme partenaire (id=3)."""
    async with _authenticated_client(make_partner()) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def admin_client():
    """Client authentifié comme admin (id=99)."""
    async with _authenticated_client(make_admin()) as c:
        yield c
    app.dependency_overrides.clear()
