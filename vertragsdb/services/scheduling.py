"""
Cancellation scheduling: next renewal boundary and notice deadline.

Pure, synchronous computation with no I/O; safe to call from any thread.

A contract renews every ``term_months`` months starting at ``valid_from``.
It cannot end before ``minimum_term``, and notice has to be given
``notice_period`` months ahead of the boundary it should take effect at:

    boundary_0   = valid_from
    boundary_k+1 = boundary_k + term_months
    action(b)    = b - notice_period

The schedule is the first boundary that is on or after the minimum term
AND whose action date is not in the past.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta


@dataclass(frozen=True)
class CancellationSchedule:
    cancellation_date: date
    action_date: date


def add_months(value: date, months: int) -> date:
    """Calendar-month addition; the day is clamped to the end of short months."""
    return value + relativedelta(months=months)


def has_schedule_inputs(
    term_months: Optional[int],
    minimum_term: Optional[date],
    notice_period: Optional[int],
) -> bool:
    """True when a schedule can be computed from these contract fields."""
    return (
        notice_period is not None
        and minimum_term is not None
        and term_months is not None
        and term_months > 0
    )


def compute_cancellation_schedule(
    valid_from: date,
    term_months: int,
    minimum_term: date,
    notice_period_months: int,
    today: date,
) -> CancellationSchedule:
    """
    Find the next actionable renewal boundary.

    1. Walk boundaries from ``valid_from`` until one is not before
       ``minimum_term`` (strict comparison: a boundary equal to the
       minimum term is eligible).
    2. Keep walking while that boundary's action date lies before ``today``;
       renewal windows whose notice deadline already lapsed are skipped.

    Each boundary is stepped from the previous one, so month-end clamping
    carries forward: Jan 31 -> Feb 29 -> Mar 29.

    Raises ValueError when the inputs cannot produce a schedule; callers
    are expected to check ``has_schedule_inputs`` first.
    Boundaries past ``date.max`` raise ValueError from the month arithmetic.
    """
    if valid_from is None or minimum_term is None or notice_period_months is None:
        raise ValueError("valid_from, minimum_term and notice period are required")
    if term_months is None or term_months <= 0:
        raise ValueError(f"term_months must be positive, got {term_months!r}")

    boundary = valid_from
    while boundary < minimum_term:
        boundary = add_months(boundary, term_months)

    action_date = add_months(boundary, -notice_period_months)
    while action_date < today:
        boundary = add_months(boundary, term_months)
        action_date = add_months(boundary, -notice_period_months)

    return CancellationSchedule(cancellation_date=boundary, action_date=action_date)


def schedule_for_contract(contract, today: date) -> Optional[CancellationSchedule]:
    """Schedule for a Contract-like object, or None when inputs are incomplete."""
    if not has_schedule_inputs(
        contract.term_months, contract.minimum_term, contract.notice_period
    ):
        return None
    return compute_cancellation_schedule(
        valid_from=contract.valid_from,
        term_months=contract.term_months,
        minimum_term=contract.minimum_term,
        notice_period_months=contract.notice_period,
        today=today,
    )
