# tests/modules/amo/test_router.py
"""
Tests d'intégration HTTP pour /api/amo.
Les autres rôles reçoivent 404 "Page non trouvée", jamais 403.
"""
import pytest
from unittest.mock import AsyncMock

from app.core.config import settings
from app.modules.documents.service import DOC_NOT_FOUND
from app.modules.projets.service import view
from app.shared.deps import HIDDEN_NOT_FOUND
from tests.conftest import make_document, make_projet

pytestmark = pytest.mark.router


class TestHiddenSpace:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", [
        "/api/amo/dashboard",
        "/api/amo/mes-projets",
        "/api/amo/gestion-missions",
        "/api/amo/profil",
        "/api/amo/documents/client",
        "/api/amo/documents/client/1",
    ])
    async def test_client_recoit_404(self, client_client, path):
        response = await client_client.get(path)
        assert response.status_code == 404
        assert response.json()["detail"] == HIDDEN_NOT_FOUND

    @pytest.mark.asyncio
    async def test_partenaire_recoit_404(self, partner_client):
        response = await partner_client.get("/api/amo/dashboard")
        assert response.status_code == 404


class TestAmo:
    @pytest.mark.asyncio
    async def test_dashboard(self, amo_client, mocker):
        mocker.patch(
            "app.modules.amo.router.service.dashboard",
            AsyncMock(return_value={
                "message": "Dashboard AMO accessible",
                "user_id": 2,
                "role": "AMO",
                "total_projets": 3,
                "projets_by_status": {"en_mise_en_relation": 3},
                "missions_count": 1,
                "projets_disponibles": 5,
            }),
        )
        response = await amo_client.get("/api/amo/dashboard")
        assert response.status_code == 200
        assert response.json()["projetsDisponibles"] == 5

    @pytest.mark.asyncio
    async def test_mes_projets(self, amo_client, mocker):
        mocker.patch(
            "app.modules.amo.router.service.my_projets",
            AsyncMock(return_value=[view(make_projet(amo_id=2))]),
        )
        response = await amo_client.get("/api/amo/mes-projets")
        assert response.status_code == 200
        assert response.json()[0]["amoId"] == 2

    @pytest.mark.asyncio
    async def test_profil(self, amo_client):
        response = await amo_client.get("/api/amo/profil")
        body = response.json()
        assert response.status_code == 200
        assert body["role"] == "AMO"
        assert body["zonesIntervention"] == ["75", "Paris"]
        assert "hashedPassword" not in body

    @pytest.mark.asyncio
    async def test_document_client_sans_projet_commun_404(self, amo_client, mocker):
        mocker.patch(
            "app.modules.documents.service.repo.get_by_id",
            AsyncMock(return_value=make_document(user_id=1)),
        )
        mocker.patch(
            "app.modules.documents.service.repo.has_shared_project",
            AsyncMock(return_value=False),
        )
        response = await amo_client.get("/api/amo/documents/client/1")
        assert response.status_code == 404
        assert response.json()["detail"] == DOC_NOT_FOUND

    @pytest.mark.asyncio
    async def test_telechargement_document_client(self, amo_client, mocker, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
        (tmp_path / "client_1").mkdir()
        (tmp_path / "client_1" / "document-1-1.pdf").write_bytes(b"%PDF-1.4")
        mocker.patch(
            "app.modules.documents.service.repo.get_by_id",
            AsyncMock(return_value=make_document(
                user_id=1, chemin_fichier="client_1/document-1-1.pdf", nom_original="devis.pdf",
            )),
        )
        mocker.patch(
            "app.modules.documents.service.repo.has_shared_project",
            AsyncMock(return_value=True),
        )
        response = await amo_client.get("/api/amo/documents/client/1/download")

        assert response.status_code == 200
        assert response.content == b"%PDF-1.4"
        assert 'filename="devis.pdf"' in response.headers["content-disposition"]
