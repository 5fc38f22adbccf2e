# tests/modules/amo/test_service.py
import pytest
from unittest.mock import AsyncMock

from app.modules.amo.service import AmoService, MAX_PROJETS
from app.shared.enums import UserRole
from tests.conftest import make_amo, make_projet, make_mission, make_async_db

pytestmark = pytest.mark.service

service = AmoService()


@pytest.mark.asyncio
async def test_dashboard_agrege_projets_et_missions(mocker):
    count = mocker.patch(
        "app.modules.amo.service.projets.count_by_status",
        AsyncMock(return_value={"en_mise_en_relation": 2, "devis_recus": 1}),
    )
    mocker.patch("app.modules.amo.service.missions.count_for_amo", AsyncMock(return_value=4))
    mocker.patch(
        "app.modules.amo.service.projets.available_drafts",
        AsyncMock(return_value=[make_projet(id=7), make_projet(id=8)]),
    )

    result = await service.dashboard(make_async_db(), make_amo(id=2))

    assert count.call_args.kwargs == {"amo_id": 2}
    assert result["role"] == UserRole.AMO
    assert result["total_projets"] == 3
    assert result["missions_count"] == 4
    assert result["projets_disponibles"] == 2


@pytest.mark.asyncio
async def test_mes_projets_filtres_sur_l_amo(mocker):
    mock_list = mocker.patch(
        "app.modules.amo.service.projets.list",
        AsyncMock(return_value=([make_projet(amo_id=2)], 1)),
    )
    result = await service.my_projets(make_async_db(), make_amo(id=2))

    assert mock_list.call_args.args[1:] == (0, MAX_PROJETS)
    assert mock_list.call_args.kwargs == {"amo_id": 2}
    assert result[0]["amo_id"] == 2


@pytest.mark.asyncio
async def test_missions_des_projets_geres(mocker):
    mocker.patch(
        "app.modules.amo.service.missions.list_for_amo",
        AsyncMock(return_value=[make_mission(), make_mission(id=2, tags_metiers=[])]),
    )
    result = await service.my_missions(make_async_db(), make_amo())
    assert [m["tags_count"] for m in result] == [1, 0]
