"""
Recalculation batch: refresh cancellation dates of every active contract.

Uses the caller's session (no commit); get_db() commits at request end.
Each contract is written inside its own SAVEPOINT so a failing row is
rolled back on its own and the rest of the batch carries on.
"""

from dataclasses import asdict, dataclass
from datetime import date
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from vertragsdb.models.contract import Contract
from vertragsdb.services.scheduling import schedule_for_contract

logger = structlog.get_logger()


@dataclass
class RecalculationResult:
    total: int = 0
    updated: int = 0
    cleared: int = 0
    failed: int = 0


async def recalculate_cancellation_dates(
    session: AsyncSession,
    today: Optional[date] = None,
) -> RecalculationResult:
    """
    Recompute and persist cancellation_date / cancellation_action_date.

    Terminated contracts are never touched. Contracts lacking a scheduling
    input get both dates nulled and count as ``cleared``; only computed
    schedules count as ``updated``; a contract whose schedule cannot be
    computed or stored counts as ``failed``. Running twice on the same day yields
    identical rows.
    """
    today = today or date.today()

    result = await session.execute(
        select(
            Contract.id,
            Contract.valid_from,
            Contract.notice_period,
            Contract.minimum_term,
            Contract.term_months,
        ).where(Contract.is_terminated == False)  # noqa: E712
    )
    rows = result.all()

    outcome = RecalculationResult(total=len(rows))
    for row in rows:
        try:
            # Boundaries past the calendar range raise ValueError/OverflowError
            schedule = schedule_for_contract(row, today)
            if schedule is None:
                values = {"cancellation_date": None, "cancellation_action_date": None}
            else:
                values = {
                    "cancellation_date": schedule.cancellation_date,
                    "cancellation_action_date": schedule.action_date,
                }

            async with session.begin_nested():
                await session.execute(
                    update(Contract).where(Contract.id == row.id).values(**values)
                )
        except (SQLAlchemyError, ValueError, OverflowError) as e:
            logger.error(
                "contract_recalculation_failed", contract_id=row.id, error=str(e)
            )
            outcome.failed += 1
            continue

        if schedule is None:
            outcome.cleared += 1
        else:
            outcome.updated += 1

    logger.info(
        "cancellation_dates_recalculated", today=today.isoformat(), **asdict(outcome)
    )
    return outcome
