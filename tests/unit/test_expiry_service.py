"""
Unit tests for vertragsdb/services/expiry_service.py

Tests: normalize_lookahead (fallback rules for the ``days`` parameter),
       list_expiring_contracts window bounds (mocked session).
Result filtering is covered in tests/integration/test_reports.py.
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from vertragsdb.services.expiry_service import (
    DEFAULT_LOOKAHEAD_DAYS,
    list_expiring_contracts,
    normalize_lookahead,
)


def test_default_lookahead_is_ninety_days():
    assert DEFAULT_LOOKAHEAD_DAYS == 90


@pytest.mark.parametrize(
    "value,expected",
    [
        (30, 30),
        ("30", 30),
        (" 7 ", 7),
        (1, 1),
        (365, 365),
    ],
)
def test_positive_integers_are_accepted(value, expected):
    assert normalize_lookahead(value) == expected


@pytest.mark.parametrize("value", [None, "", "abc", "3.5", "0", 0, "-5", -5, True, False])
def test_invalid_values_fall_back_to_default(value):
    assert normalize_lookahead(value) == DEFAULT_LOOKAHEAD_DAYS


# ---------------------------------------------------------------------------
# list_expiring_contracts: horizon bounds
# ---------------------------------------------------------------------------


def _mock_session(contracts=()) -> AsyncMock:
    session = AsyncMock()
    result = MagicMock()
    result.scalars.return_value.all.return_value = list(contracts)
    session.execute = AsyncMock(return_value=result)
    return session


def _window(session) -> list:
    stmt = session.execute.call_args.args[0]
    return [v for v in stmt.compile().params.values() if isinstance(v, date)]


@pytest.mark.asyncio
async def test_window_spans_lookahead_days():
    session = _mock_session()

    await list_expiring_contracts(session, lookahead_days="30", today=date(2024, 6, 1))

    assert _window(session) == [date(2024, 6, 1), date(2024, 7, 1)]


@pytest.mark.asyncio
@pytest.mark.parametrize("days", ["100000000", "99999999999999999999", 10**12])
async def test_huge_lookahead_is_capped_at_calendar_end(days):
    session = _mock_session()

    contracts = await list_expiring_contracts(session, lookahead_days=days, today=date(2024, 6, 1))

    assert contracts == []
    assert _window(session) == [date(2024, 6, 1), date.max]


@pytest.mark.asyncio
async def test_lookahead_on_last_calendar_day():
    session = _mock_session()

    await list_expiring_contracts(session, lookahead_days=None, today=date.max)

    assert _window(session) == [date.max, date.max]
