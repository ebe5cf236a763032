"""
Integration tests for POST /api/v1/contracts/calculate-dates

Runs the recalculation batch against an in-memory SQLite database and
checks the stored dates.
"""

from datetime import date

import pytest
from dateutil.relativedelta import relativedelta
from httpx import AsyncClient

from vertragsdb.services.scheduling import compute_cancellation_schedule

URL = "/api/v1/contracts/calculate-dates"


@pytest.mark.asyncio
async def test_dates_are_computed_for_active_contracts(
    client: AsyncClient, auth_headers, seed_contract, fetch_contract
):
    contract_id = await seed_contract(
        valid_from=date(2024, 1, 1),
        term_months=12,
        minimum_term=date(2025, 1, 1),
        notice_period=3,
    )

    response = await client.post(URL, headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["updated"] == 1
    assert data["failed"] == 0
    assert data["message"] == "Cancellation dates calculated for 1 contracts"

    stored = await fetch_contract(contract_id)
    expected = compute_cancellation_schedule(
        date(2024, 1, 1), 12, date(2025, 1, 1), 3, date.today()
    )
    assert stored.cancellation_date == expected.cancellation_date
    assert stored.cancellation_action_date == expected.action_date
    assert stored.cancellation_action_date == stored.cancellation_date - relativedelta(months=3)
    assert stored.cancellation_date >= date(2025, 1, 1)
    assert stored.cancellation_action_date >= date.today()


@pytest.mark.asyncio
async def test_incomplete_contracts_are_cleared(
    client: AsyncClient, auth_headers, seed_contract, fetch_contract
):
    contract_id = await seed_contract(
        term_months=None,
        minimum_term=date(2025, 1, 1),
        notice_period=3,
        cancellation_date=date(2025, 1, 1),
        cancellation_action_date=date(2024, 10, 1),
    )

    response = await client.post(URL, headers=auth_headers)

    data = response.json()
    assert data["cleared"] == 1
    assert data["updated"] == 0

    stored = await fetch_contract(contract_id)
    assert stored.cancellation_date is None
    assert stored.cancellation_action_date is None


@pytest.mark.asyncio
async def test_terminated_contracts_are_left_untouched(
    client: AsyncClient, auth_headers, seed_contract, fetch_contract
):
    contract_id = await seed_contract(
        term_months=12,
        minimum_term=date(2025, 1, 1),
        notice_period=3,
        is_terminated=True,
        cancellation_date=date(2020, 1, 1),
        cancellation_action_date=date(2019, 10, 1),
    )

    response = await client.post(URL, headers=auth_headers)

    assert response.json()["total"] == 0
    stored = await fetch_contract(contract_id)
    assert stored.cancellation_date == date(2020, 1, 1)
    assert stored.cancellation_action_date == date(2019, 10, 1)


@pytest.mark.asyncio
async def test_rerun_is_idempotent(
    client: AsyncClient, auth_headers, seed_contract, fetch_contract
):
    contract_id = await seed_contract(
        term_months=6, minimum_term=date(2024, 7, 1), notice_period=1
    )

    await client.post(URL, headers=auth_headers)
    first = await fetch_contract(contract_id)
    await client.post(URL, headers=auth_headers)
    second = await fetch_contract(contract_id)

    assert first.cancellation_date == second.cancellation_date
    assert first.cancellation_action_date == second.cancellation_action_date


@pytest.mark.asyncio
async def test_counts_cover_mixed_batch(client: AsyncClient, auth_headers, seed_contract):
    await seed_contract(term_months=12, minimum_term=date(2025, 1, 1), notice_period=3)
    await seed_contract(term_months=24, minimum_term=date(2026, 1, 1), notice_period=6)
    await seed_contract(term_months=0, minimum_term=date(2025, 1, 1), notice_period=3)
    await seed_contract(is_terminated=True)

    data = (await client.post(URL, headers=auth_headers)).json()

    assert data == {
        "message": "Cancellation dates calculated for 2 contracts",
        "total": 3,
        "updated": 2,
        "cleared": 1,
        "failed": 0,
    }


@pytest.mark.asyncio
async def test_viewer_cannot_trigger(client: AsyncClient, viewer_headers):
    response = await client.post(URL, headers=viewer_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_trigger_requires_authentication(client: AsyncClient):
    response = await client.post(URL)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_out_of_range_schedule_does_not_block_other_contracts(
    client: AsyncClient, auth_headers, seed_contract, fetch_contract
):
    broken_id = await seed_contract(
        term_months=600, minimum_term=date(9999, 6, 1), notice_period=3
    )
    healthy_id = await seed_contract(
        term_months=12, minimum_term=date(2025, 1, 1), notice_period=3
    )

    response = await client.post(URL, headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["failed"] == 1
    assert data["updated"] == 1

    assert (await fetch_contract(broken_id)).cancellation_date is None
    assert (await fetch_contract(healthy_id)).cancellation_date is not None
