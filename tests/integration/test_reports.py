"""
Integration tests for GET /api/v1/reports/expiring
"""

from datetime import date, timedelta

import pytest
from httpx import AsyncClient

URL = "/api/v1/reports/expiring"


@pytest.fixture
async def expiring_set(seed_contract):
    today = date.today()
    return {
        "soon": await seed_contract(
            title="soon", cancellation_action_date=today + timedelta(days=10)
        ),
        "later": await seed_contract(
            title="later", cancellation_action_date=today + timedelta(days=40)
        ),
        "terminated": await seed_contract(
            title="terminated",
            is_terminated=True,
            cancellation_action_date=today + timedelta(days=5),
        ),
        "past": await seed_contract(
            title="past", cancellation_action_date=today - timedelta(days=5)
        ),
        "unscheduled": await seed_contract(title="unscheduled"),
    }


@pytest.mark.asyncio
async def test_window_filters_by_action_date(client: AsyncClient, viewer_headers, expiring_set):
    response = await client.get(URL, params={"days": "30"}, headers=viewer_headers)

    assert response.status_code == 200
    assert [c["title"] for c in response.json()] == ["soon"]


@pytest.mark.asyncio
async def test_results_are_ordered_by_urgency(client: AsyncClient, viewer_headers, expiring_set):
    response = await client.get(URL, params={"days": "60"}, headers=viewer_headers)

    assert [c["title"] for c in response.json()] == ["soon", "later"]


@pytest.mark.asyncio
async def test_window_bounds_are_inclusive(client: AsyncClient, auth_headers, seed_contract):
    today = date.today()
    await seed_contract(title="today", cancellation_action_date=today)
    await seed_contract(title="edge", cancellation_action_date=today + timedelta(days=30))
    await seed_contract(title="outside", cancellation_action_date=today + timedelta(days=31))

    response = await client.get(URL, params={"days": "30"}, headers=auth_headers)

    assert [c["title"] for c in response.json()] == ["today", "edge"]


@pytest.mark.asyncio
@pytest.mark.parametrize("days", [None, "abc", "0", "-5"])
async def test_invalid_lookahead_falls_back_to_ninety_days(
    client: AsyncClient, auth_headers, seed_contract, days
):
    today = date.today()
    await seed_contract(title="in-default", cancellation_action_date=today + timedelta(days=89))
    await seed_contract(title="beyond", cancellation_action_date=today + timedelta(days=91))

    params = {} if days is None else {"days": days}
    response = await client.get(URL, params=params, headers=auth_headers)

    assert response.status_code == 200
    assert [c["title"] for c in response.json()] == ["in-default"]


@pytest.mark.asyncio
async def test_report_requires_authentication(client: AsyncClient):
    response = await client.get(URL)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_huge_lookahead_reaches_far_future(client: AsyncClient, auth_headers, seed_contract):
    today = date.today()
    await seed_contract(title="next-year", cancellation_action_date=today + timedelta(days=400))
    await seed_contract(title="far", cancellation_action_date=date(9999, 12, 31))

    response = await client.get(URL, params={"days": "100000000"}, headers=auth_headers)

    assert response.status_code == 200
    assert [c["title"] for c in response.json()] == ["next-year", "far"]
