"""
Tests del repositorio de lectura (resumen y entidades vinculadas) sobre SQLite en memoria.
"""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from akemisflow.infrastructure.database.models import ContactModel, ContractorModel
from akemisflow.infrastructure.external.airwallex_sync.entity_mappings import get_entity_sync_config
from akemisflow.infrastructure.repositories.entity_repository import EntitySyncRepository


def _contractor(idx: int, **overrides) -> ContractorModel:
    values = {
        "id": f"c-{idx}",
        "first_name": "Jane",
        "last_name": f"Doe {idx}",
        "email": f"jane{idx}@example.com",
    }
    values.update(overrides)
    return ContractorModel(**values)


@pytest.mark.asyncio
async def test_summary_counts_entities_by_sync_status(db_session) -> None:
    db_session.add_all(
        [
            _contractor(1, airwallex_beneficiary_id="ben-1", airwallex_sync_status="SYNCED"),
            _contractor(2, airwallex_beneficiary_id="ben-2", airwallex_sync_status="SYNCED"),
            _contractor(3, airwallex_beneficiary_id="ben-3", airwallex_sync_status="ERROR"),
            _contractor(4, airwallex_sync_status="PENDING"),
            _contractor(5),
        ]
    )
    await db_session.flush()

    summary = await EntitySyncRepository(db_session).get_sync_summary(get_entity_sync_config("contractors"))

    assert summary == {
        "total": 5,
        "linked": 3,
        "synced": 2,
        "pending": 1,
        "errors": 1,
        "never_synced": 1,
    }


@pytest.mark.asyncio
async def test_clients_summary_only_counts_client_contacts(db_session) -> None:
    db_session.add_all(
        [
            ContactModel(
                id="k-1",
                first_name="Company",
                last_name="Globex",
                email="billing@globex.com",
                contact_type="CLIENT_COMPANY",
                airwallex_payer_account_id="cp-1",
                airwallex_sync_status="SYNCED",
            ),
            ContactModel(
                id="k-2",
                first_name="Ana",
                last_name="Lopez",
                email="ana@example.com",
                airwallex_beneficiary_id="ben-9",
                airwallex_sync_status="SYNCED",
            ),
        ]
    )
    await db_session.flush()

    summary = await EntitySyncRepository(db_session).get_sync_summary(get_entity_sync_config("clients"))

    assert summary["total"] == 1
    assert summary["linked"] == 1


@pytest.mark.asyncio
async def test_contacts_summary_leaves_out_client_contacts(db_session) -> None:
    db_session.add_all(
        [
            ContactModel(
                id="k-1",
                first_name="Company",
                last_name="Globex",
                email="billing@globex.com",
                contact_type="CLIENT_COMPANY",
                airwallex_payer_account_id="cp-1",
            ),
            ContactModel(
                id="k-2",
                first_name="Ana",
                last_name="Lopez",
                email="ana@example.com",
                contact_type="CONSULTANT",
                airwallex_beneficiary_id="ben-9",
                airwallex_sync_status="SYNCED",
            ),
            ContactModel(id="k-3", first_name="Luis", last_name="Gil", email="luis@example.com"),
        ]
    )
    await db_session.flush()

    summary = await EntitySyncRepository(db_session).get_sync_summary(get_entity_sync_config("contacts"))

    assert summary["total"] == 2
    assert summary["linked"] == 1
    assert summary["synced"] == 1


@pytest.mark.asyncio
async def test_list_linked_returns_most_recently_synced_first(db_session) -> None:
    db_session.add_all(
        [
            _contractor(
                1,
                airwallex_beneficiary_id="ben-1",
                airwallex_last_sync_at=datetime(2025, 12, 1, tzinfo=timezone.utc),
            ),
            _contractor(
                2,
                airwallex_beneficiary_id="ben-2",
                airwallex_last_sync_at=datetime(2025, 12, 15, tzinfo=timezone.utc),
            ),
            _contractor(3),
        ]
    )
    await db_session.flush()

    rows = await EntitySyncRepository(db_session).list_linked(get_entity_sync_config("contractors"))

    assert [r.id for r in rows] == ["c-2", "c-1"]
