# tests/modules/partenaire/test_router.py
import pytest
from unittest.mock import AsyncMock

from app.shared.views import mission_view
from tests.conftest import make_mission

pytestmark = pytest.mark.router


@pytest.mark.asyncio
async def test_dashboard_partenaire(partner_client, mocker):
    mocker.patch(
        "app.modules.partenaire.service.missions.pending_matching_tags",
        AsyncMock(return_value=[make_mission(), make_mission(id=2)]),
    )
    response = await partner_client.get("/api/partenaire/dashboard")

    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "partenaire"
    assert body["tagsMetiers"] == ["plombier", "chauffagiste"]
    assert body["missionsDisponibles"] == 2


@pytest.mark.asyncio
async def test_missions_disponibles(partner_client, mocker):
    mocker.patch(
        "app.modules.partenaire.router.service.available_missions",
        AsyncMock(return_value=[mission_view(make_mission())]),
    )
    response = await partner_client.get("/api/partenaire/missions-disponibles")
    assert response.status_code == 200
    assert response.json()[0]["statut"] == "en_attente"


@pytest.mark.asyncio
async def test_mes_missions(partner_client):
    response = await partner_client.get("/api/partenaire/mes-missions")
    assert response.status_code == 200
    assert response.json()["missions"] == []


@pytest.mark.asyncio
async def test_profil_partenaire(partner_client):
    response = await partner_client.get("/api/partenaire/profil")
    assert response.status_code == 200
    assert response.json()["noteFiabilite"] == 4.5


@pytest.mark.asyncio
async def test_client_refuse(client_client):
    response = await client_client.get("/api/partenaire/dashboard")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_amo_refuse(amo_client):
    response = await amo_client.get("/api/partenaire/missions-disponibles")
    assert response.status_code == 403
