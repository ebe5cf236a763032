"""Expiry report: contracts whose cancellation notice is due soon."""

from datetime import date, timedelta
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vertragsdb.config import settings
from vertragsdb.models.contract import Contract

DEFAULT_LOOKAHEAD_DAYS = settings.EXPIRING_LOOKAHEAD_DAYS


def normalize_lookahead(value: Any) -> int:
    """Positive integer lookahead; anything else falls back to the default."""
    if value is None or isinstance(value, bool):
        return DEFAULT_LOOKAHEAD_DAYS
    try:
        days = int(str(value).strip())
    except ValueError:
        return DEFAULT_LOOKAHEAD_DAYS
    return days if days > 0 else DEFAULT_LOOKAHEAD_DAYS


async def list_expiring_contracts(
    session: AsyncSession,
    lookahead_days: Any = None,
    today: Optional[date] = None,
) -> list[Contract]:
    """
    Active contracts with an action date in [today, today + lookahead],
    both ends inclusive, most urgent first.
    """
    today = today or date.today()
    # Very large lookaheads run to the end of the calendar
    days = min(normalize_lookahead(lookahead_days), (date.max - today).days)
    horizon = today + timedelta(days=days)

    result = await session.execute(
        select(Contract)
        .where(
            Contract.is_terminated == False,  # noqa: E712
            Contract.cancellation_action_date.is_not(None),
            Contract.cancellation_action_date.between(today, horizon),
        )
        .order_by(Contract.cancellation_action_date.asc(), Contract.id.asc())
    )
    return list(result.scalars().all())
