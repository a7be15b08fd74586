"""
Tests unitarios de los endpoints de sincronizacion con Airwallex.

Verifica el contrato HTTP:
- El resultado se serializa en camelCase.
- Categoria invalida responde 404 con el cuerpo de error uniforme.
- Entidad inexistente / no vinculada en resync individual responde 404 / 400.
"""
from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from akemisflow.api.v1.dependencies.use_case_deps import get_sync_use_cases
from akemisflow.application.dto.sync_dto import LinkedEntityDTO, SyncSummaryDTO
from akemisflow.application.use_cases.sync_use_cases import AirwallexSyncUseCases, to_result_dto
from akemisflow.infrastructure.external.airwallex_sync.types import SyncResult
from akemisflow.shared.constants.sync_constants import EntityCategory
from akemisflow.shared.exceptions.domain import EntityNotFoundException, ValidationException


NOW = datetime(2025, 12, 16, 10, 15, 0, tzinfo=timezone.utc)


class _FakeService:
    """Motor falso: devuelve un resultado fijo y registra la configuracion recibida."""

    def __init__(self, result: SyncResult) -> None:
        self.result = result
        self.configs = []

    def run_once(self, *, config, **_):
        self.configs.append(config)
        return self.result


def _result(category: EntityCategory = EntityCategory.CONTRACTORS) -> SyncResult:
    result = SyncResult(category=category, started_at=NOW, finished_at=NOW)
    result.total_fetched = 3
    result.new_count = 2
    result.updated_count = 1
    return result


def _app_with(use_cases):
    from main import create_application
    app = create_application()
    app.dependency_overrides[get_sync_use_cases] = lambda: use_cases
    return app


async def _post(app, url: str):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.post(url)


async def _get(app, url: str):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.get(url)


@pytest.mark.asyncio
async def test_sync_category_runs_engine_and_returns_camel_case_result() -> None:
    service = _FakeService(_result())
    use_cases = AirwallexSyncUseCases(db=None, service_factory=lambda: service)

    response = await _post(_app_with(use_cases), "/api/v1/sync/airwallex/contractors")

    assert response.status_code == 200
    data = response.json()
    assert data["category"] == "contractors"
    assert data["totalFetched"] == 3
    assert data["newCount"] == 2
    assert data["updatedCount"] == 1
    assert data["success"] is True
    assert data["fatalError"] is None
    assert service.configs[0].target_table == "contractors"


@pytest.mark.asyncio
async def test_partial_run_is_reported_with_success_false() -> None:
    result = _result()
    result.fatal_error = "Airwallex GET /api/v1/beneficiaries fallo 500"
    result.add_error(None, "Sync failed: Airwallex GET /api/v1/beneficiaries fallo 500")
    use_cases = AirwallexSyncUseCases(db=None, service_factory=lambda: _FakeService(result))

    response = await _post(_app_with(use_cases), "/api/v1/sync/airwallex/contractors")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is False
    assert data["errors"] == [{"externalId": None, "message": "Sync failed: Airwallex GET /api/v1/beneficiaries fallo 500"}]
    assert "interrumpida" in data["message"]


@pytest.mark.asyncio
async def test_unknown_category_returns_404() -> None:
    use_cases = AirwallexSyncUseCases(db=None, service_factory=lambda: pytest.fail("no debe construir el motor"))

    response = await _post(_app_with(use_cases), "/api/v1/sync/airwallex/vendors")

    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "UNKNOWN_CATEGORY"
    assert "contractors" in body["details"]["valid_categories"]


@pytest.mark.asyncio
async def test_single_entity_resync_errors_map_to_http_status() -> None:
    use_cases = AsyncMock()
    use_cases.sync_entity = AsyncMock(side_effect=EntityNotFoundException("Contractor", "nope"))
    app = _app_with(use_cases)

    not_found = await _post(app, "/api/v1/sync/airwallex/contractors/nope")

    use_cases.sync_entity = AsyncMock(
        side_effect=ValidationException("Contractor c-1 no esta vinculado a Airwallex", field="airwallex_beneficiary_id")
    )
    unlinked = await _post(app, "/api/v1/sync/airwallex/contractors/c-1")

    assert not_found.status_code == 404
    assert not_found.json()["error"] == "ENTITY_NOT_FOUND"
    assert unlinked.status_code == 400
    assert unlinked.json()["details"] == {"field": "airwallex_beneficiary_id"}


@pytest.mark.asyncio
async def test_single_entity_resync_returns_result() -> None:
    use_cases = AsyncMock()
    use_cases.sync_entity = AsyncMock(return_value=to_result_dto(_result()))

    response = await _post(_app_with(use_cases), "/api/v1/sync/airwallex/suppliers/s-1")

    assert response.status_code == 200
    use_cases.sync_entity.assert_awaited_once_with("suppliers", "s-1")


@pytest.mark.asyncio
async def test_summary_endpoint() -> None:
    use_cases = AsyncMock()
    use_cases.get_summary = AsyncMock(
        return_value=SyncSummaryDTO(
            category="clients", total=4, linked=3, synced=2, pending=0, errors=1, never_synced=1
        )
    )

    response = await _get(_app_with(use_cases), "/api/v1/sync/airwallex/clients/summary")

    assert response.status_code == 200
    assert response.json() == {
        "category": "clients",
        "total": 4,
        "linked": 3,
        "synced": 2,
        "pending": 0,
        "errors": 1,
        "neverSynced": 1,
    }


@pytest.mark.asyncio
async def test_linked_endpoint_passes_pagination() -> None:
    use_cases = AsyncMock()
    use_cases.list_linked = AsyncMock(
        return_value=[
            LinkedEntityDTO(
                id="c-1",
                first_name="Jane",
                last_name="Doe",
                email="jane@example.com",
                external_id="ben-1",
                sync_status="SYNCED",
            )
        ]
    )

    response = await _get(_app_with(use_cases), "/api/v1/sync/airwallex/contractors/linked?limit=10&offset=5")

    assert response.status_code == 200
    assert response.json()[0]["externalId"] == "ben-1"
    use_cases.list_linked.assert_awaited_once_with("contractors", limit=10, offset=5)


@pytest.mark.asyncio
async def test_health() -> None:
    response = await _get(_app_with(AsyncMock()), "/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
