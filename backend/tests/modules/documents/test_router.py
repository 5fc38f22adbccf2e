# tests/modules/documents/test_router.py
"""
Tests d'intégration HTTP pour /api/documents et /api/client-documents.
Le disque est réel (tmp_path) ; seules les requêtes SQL sont mockées.
"""
import pytest
from unittest.mock import AsyncMock

from app.core.config import settings
from app.modules.documents.service import NO_FILE, BAD_FILE_TYPE, NOT_YOURS
from app.shared.enums import DocumentType
from app.shared.views import document_view
from tests.conftest import make_document

pytestmark = pytest.mark.router

PDF = b"%PDF-1.4\n1 0 obj <<>> endobj\n%%EOF"


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture
def create_many(mocker):
    def _persist(db, documents):
        for i, doc in enumerate(documents, start=1):
            doc.id = i
            doc.is_active = True
        return documents

    return mocker.patch(
        "app.modules.documents.service.repo.create_many",
        AsyncMock(side_effect=_persist),
    )


class TestUpload:
    @pytest.mark.asyncio
    async def test_upload_puis_telechargement_identique(self, client_client, upload_dir, create_many, mocker):
        response = await client_client.post(
            "/api/documents/upload",
            files=[("documents", ("Plan_RDC.pdf", PDF, "application/pdf"))],
            data={"type": "devis"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "1 document(s) uploadé(s) avec succès"
        uploaded = body["documents"][0]
        assert uploaded["nomOriginal"] == "Plan_RDC.pdf"
        assert uploaded["type"] == "devis"
        assert uploaded["visibilite"] == "prive"
        assert uploaded["isPdf"] is True

        stored = create_many.call_args.args[1][0]
        mocker.patch("app.modules.documents.service.repo.get_by_id", AsyncMock(return_value=stored))

        download = await client_client.get("/api/documents/1/download")

        assert download.status_code == 200
        assert download.content == PDF
        assert download.headers["content-type"] == "application/pdf"
        assert 'filename="Plan_RDC.pdf"' in download.headers["content-disposition"]

    @pytest.mark.asyncio
    async def test_sans_fichier_400(self, client_client, upload_dir):
        response = await client_client.post("/api/documents/upload", data={"type": "autre"})
        assert response.status_code == 400
        assert response.json()["detail"] == NO_FILE

    @pytest.mark.asyncio
    async def test_type_refuse_400(self, amo_client, upload_dir):
        response = await amo_client.post(
            "/api/client-documents/upload",
            files=[("documents", ("setup.exe", b"MZ", "application/x-msdownload"))],
        )
        assert response.status_code == 400
        assert response.json()["detail"] == BAD_FILE_TYPE

    @pytest.mark.asyncio
    async def test_partenaire_refuse(self, partner_client, upload_dir):
        response = await partner_client.post(
            "/api/documents/upload",
            files=[("documents", ("plan.pdf", PDF, "application/pdf"))],
        )
        assert response.status_code == 403


class TestReadDelete:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("prefix", ["/api/documents", "/api/client-documents"])
    async def test_liste_sur_les_deux_montages(self, client_client, mocker, prefix):
        mock_list = mocker.patch(
            "app.modules.documents.router.service.list_documents",
            AsyncMock(return_value={
                "documents": [document_view(make_document())],
                "statistics": {"total": 1, "total_size": 2048, "by_type": {"PDF": 1}},
                "pagination": {"total": 1, "page": 1, "limit": 20, "total_pages": 1},
            }),
        )
        response = await client_client.get(f"{prefix}?mimeType=application/pdf")

        assert response.status_code == 200
        body = response.json()
        assert body["statistics"]["totalSize"] == 2048
        assert body["documents"][0]["formattedSize"] == "2 KB"
        assert mock_list.call_args.kwargs["mime_type"] == "application/pdf"

    @pytest.mark.asyncio
    async def test_document_d_un_autre_403(self, amo_client, mocker):
        mocker.patch(
            "app.modules.documents.service.repo.get_by_id",
            AsyncMock(return_value=make_document(user_id=1)),
        )
        mocker.patch(
            "app.modules.documents.service.repo.has_shared_project",
            AsyncMock(return_value=False),
        )
        response = await amo_client.get("/api/documents/1")
        assert response.status_code == 403
        assert response.json()["detail"] == NOT_YOURS

    @pytest.mark.asyncio
    async def test_document_partage_visible(self, amo_client, mocker):
        mocker.patch(
            "app.modules.documents.service.repo.get_by_id",
            AsyncMock(return_value=make_document(user_id=1, type=DocumentType.RAPPORT)),
        )
        mocker.patch(
            "app.modules.documents.service.repo.has_shared_project",
            AsyncMock(return_value=True),
        )
        response = await amo_client.get("/api/client-documents/1")
        assert response.status_code == 200
        assert response.json()["userId"] == 1

    @pytest.mark.asyncio
    async def test_suppression(self, client_client, mocker):
        mocker.patch(
            "app.modules.documents.router.service.delete",
            AsyncMock(return_value={"message": "Document supprimé avec succès"}),
        )
        response = await client_client.delete("/api/documents/1")
        assert response.status_code == 200
        assert response.json()["message"] == "Document supprimé avec succès"


class TestReferencedAndFiltered:
    @pytest.mark.asyncio
    async def test_creation_par_lien(self, client_client, mocker):
        async def _persist(db, document):
            document.id = 4
            document.is_active = True
            return document

        mocker.patch("app.modules.documents.service.repo.create", AsyncMock(side_effect=_persist))
        response = await client_client.post("/api/documents", json={
            "nom": "Devis",
            "type": "devis",
            "lienFichier": "https://drive.example.com/devis",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Document créé avec succès"
        assert body["document"]["id"] == 4
        assert body["document"]["lienFichier"] == "https://drive.example.com/devis"
        assert body["document"]["visibilite"] == "prive"

    @pytest.mark.asyncio
    async def test_creation_sans_lien_400(self, client_client):
        response = await client_client.post("/api/documents", json={"nom": "Devis", "type": "devis"})
        assert response.status_code == 400
        assert "lienFichier" in {e["field"] for e in response.json()["errors"]}

    @pytest.mark.asyncio
    async def test_modification(self, client_client, mocker):
        mock_update = mocker.patch(
            "app.modules.documents.router.service.update",
            AsyncMock(return_value=document_view(make_document(nom="Plan v2"))),
        )
        response = await client_client.put("/api/client-documents/1", json={"nom": "Plan v2"})

        assert response.status_code == 200
        assert response.json()["nom"] == "Plan v2"
        assert mock_update.call_args.args[3].nom == "Plan v2"

    @pytest.mark.asyncio
    async def test_par_utilisateur(self, amo_client, mocker):
        mock_list = mocker.patch(
            "app.modules.documents.router.service.list_by_user",
            AsyncMock(return_value=[document_view(make_document(user_id=1))]),
        )
        response = await amo_client.get("/api/documents/user/1")

        assert response.status_code == 200
        assert response.json()[0]["userId"] == 1
        assert mock_list.call_args.args[2] == 1

    @pytest.mark.asyncio
    async def test_par_type(self, client_client, mocker):
        mock_list = mocker.patch(
            "app.modules.documents.router.service.list_by_type",
            AsyncMock(return_value=[]),
        )
        response = await client_client.get("/api/documents/type/facture")

        assert response.status_code == 200
        assert response.json() == []
        assert mock_list.call_args.args[2] == DocumentType.FACTURE

    @pytest.mark.asyncio
    async def test_type_inconnu_400(self, client_client):
        response = await client_client.get("/api/documents/type/inconnu")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_partenaire_refuse(self, partner_client):
        response = await partner_client.get("/api/documents/type/devis")
        assert response.status_code == 403
