# tests/modules/missions/test_service.py
"""
Tests unitaires pour modules.missions.service.MissionService

Couverture :
    create()      : projet inconnu → 404, AMO non assigné → 403, tags normalisés
    update()      : statut null ignoré, tags null → liste vide
    delete()      : soft delete
    add_tag()     : idempotent (pas de sauvegarde si déjà présent)
    remove_tag()  : idempotent
    popular_tags(): agrégation des listes de tags
"""
import pytest
from unittest.mock import AsyncMock
from fastapi import HTTPException

from app.modules.missions.schemas import MissionCreateIn, MissionUpdateIn
from app.modules.missions.service import MissionService, NOT_ASSIGNED, MISSION_NOT_FOUND
from app.shared.enums import MissionStatut
from app.shared.models import Mission
from tests.conftest import make_amo, make_admin, make_projet, make_async_db

pytestmark = pytest.mark.service

service = MissionService()


def _mission(**kwargs) -> Mission:
    fields = dict(id=1, project_id=1, tags_metiers=["plombier"], statut=MissionStatut.EN_ATTENTE, is_active=True)
    fields.update(kwargs)
    return Mission(**fields)


@pytest.fixture
def saved(mocker):
    return mocker.patch(
        "app.modules.missions.service.repo.save",
        AsyncMock(side_effect=lambda db, m: m),
    )


class TestCreate:
    @pytest.mark.asyncio
    async def test_projet_inconnu_404(self, mocker):
        mocker.patch("app.modules.missions.service.repo.get_projet", AsyncMock(return_value=None))
        with pytest.raises(HTTPException) as exc_info:
            await service.create(make_async_db(), make_amo(), MissionCreateIn(project_id=9))
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_amo_non_assigne_403(self, mocker):
        mocker.patch(
            "app.modules.missions.service.repo.get_projet",
            AsyncMock(return_value=make_projet(amo_id=7)),
        )
        with pytest.raises(HTTPException) as exc_info:
            await service.create(make_async_db(), make_amo(id=2), MissionCreateIn(project_id=1))
        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == NOT_ASSIGNED

    @pytest.mark.asyncio
    async def test_amo_assigne_tags_normalises(self, mocker):
        mocker.patch(
            "app.modules.missions.service.repo.get_projet",
            AsyncMock(return_value=make_projet(amo_id=2)),
        )
        mock_create = mocker.patch(
            "app.modules.missions.service.repo.create",
            AsyncMock(side_effect=lambda db, m: m),
        )
        payload = MissionCreateIn(project_id=1, tags_metiers=[" Plombier", "plombier", "Électricien"])

        result = await service.create(make_async_db(), make_amo(id=2), payload)

        mission = mock_create.call_args.args[1]
        assert mission.project_id == 1
        assert result["tags_metiers"] == ["plombier", "électricien"]
        assert result["tags_count"] == 2

    @pytest.mark.asyncio
    async def test_admin_sur_projet_quelconque(self, mocker):
        mocker.patch(
            "app.modules.missions.service.repo.get_projet",
            AsyncMock(return_value=make_projet(amo_id=None)),
        )
        mocker.patch("app.modules.missions.service.repo.create", AsyncMock(side_effect=lambda db, m: m))
        result = await service.create(make_async_db(), make_admin(), MissionCreateIn(project_id=1))
        assert result["statut"] == MissionStatut.EN_ATTENTE


class TestUpdateDelete:
    @pytest.mark.asyncio
    async def test_mission_inconnue_404(self, mocker):
        mocker.patch("app.modules.missions.service.repo.get_by_id", AsyncMock(return_value=None))
        with pytest.raises(HTTPException) as exc_info:
            await service.update(make_async_db(), make_admin(), 1, MissionUpdateIn())
        assert exc_info.value.detail == MISSION_NOT_FOUND

    @pytest.mark.asyncio
    async def test_statut_null_ignore_tags_null_vides(self, mocker, saved):
        mission = _mission()
        mocker.patch("app.modules.missions.service.repo.get_by_id", AsyncMock(return_value=mission))

        payload = MissionUpdateIn.model_validate({"statut": None, "tagsMetiers": None, "commentaireAmo": "RAS"})
        result = await service.update(make_async_db(), make_admin(), 1, payload)

        assert mission.statut == MissionStatut.EN_ATTENTE
        assert result["tags_metiers"] == []
        assert result["commentaire_amo"] == "RAS"

    @pytest.mark.asyncio
    async def test_amo_verifie_sur_le_projet(self, mocker):
        mocker.patch("app.modules.missions.service.repo.get_by_id", AsyncMock(return_value=_mission()))
        mocker.patch(
            "app.modules.missions.service.repo.get_projet",
            AsyncMock(return_value=make_projet(amo_id=7)),
        )
        with pytest.raises(HTTPException) as exc_info:
            await service.update(make_async_db(), make_amo(id=2), 1, MissionUpdateIn(commentaire_amo="x"))
        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_suppression_douce(self, mocker):
        mission = _mission()
        db = make_async_db()
        mocker.patch("app.modules.missions.service.repo.get_by_id", AsyncMock(return_value=mission))

        result = await service.delete(db, make_admin(), 1)

        assert mission.is_active is False
        assert result["message"] == "Mission supprimée avec succès"
        db.commit.assert_called_once()


class TestTags:
    @pytest.mark.asyncio
    async def test_ajout(self, mocker, saved):
        mocker.patch("app.modules.missions.service.repo.get_by_id", AsyncMock(return_value=_mission()))
        result = await service.add_tag(make_async_db(), make_admin(), 1, " Carreleur ")
        assert result["tags_metiers"] == ["plombier", "carreleur"]
        saved.assert_called_once()

    @pytest.mark.asyncio
    async def test_ajout_doublon_sans_effet(self, mocker, saved):
        mocker.patch("app.modules.missions.service.repo.get_by_id", AsyncMock(return_value=_mission()))
        result = await service.add_tag(make_async_db(), make_admin(), 1, "PLOMBIER")
        assert result["tags_metiers"] == ["plombier"]
        saved.assert_not_called()

    @pytest.mark.asyncio
    async def test_retrait_absent_sans_effet(self, mocker, saved):
        mocker.patch("app.modules.missions.service.repo.get_by_id", AsyncMock(return_value=_mission()))
        result = await service.remove_tag(make_async_db(), make_admin(), 1, "maçon")
        assert result["tags_metiers"] == ["plombier"]
        saved.assert_not_called()

    @pytest.mark.asyncio
    async def test_retrait(self, mocker, saved):
        mocker.patch("app.modules.missions.service.repo.get_by_id", AsyncMock(return_value=_mission()))
        result = await service.remove_tag(make_async_db(), make_admin(), 1, "plombier")
        assert result["tags_metiers"] == []
        assert result["tags_count"] == 0

    @pytest.mark.asyncio
    async def test_tags_populaires(self, mocker):
        mocker.patch(
            "app.modules.missions.service.repo.tag_lists",
            AsyncMock(return_value=[["plombier", "maçon"], ["plombier"], ["électricien"]]),
        )
        result = await service.popular_tags(make_async_db(), 2)
        assert result[0] == {"tag": "plombier", "count": 2}
        assert len(result) == 2
