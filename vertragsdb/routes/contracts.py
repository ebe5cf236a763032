"""
Contract management: /api/v1/contracts

CRUD for contracts with lifecycle management:
  active → terminated (one-way)

Cancellation dates are never written here except through the
recalculation trigger (POST /calculate-dates).
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from vertragsdb.config import settings
from vertragsdb.database import get_db, utcnow
from vertragsdb.middleware.auth import get_current_user
from vertragsdb.middleware.authorization import require_admin
from vertragsdb.models.contract import Contract
from vertragsdb.schemas.contract import (
    ContractCreate,
    ContractResponse,
    ContractUpdate,
    RecalculationResponse,
)
from vertragsdb.services.recalculation_service import recalculate_cancellation_dates

logger = structlog.get_logger()
router = APIRouter()

# Fields a plain edit may change; derived dates and lifecycle are excluded.
_EDITABLE_FIELDS = (
    "title",
    "content",
    "conditions",
    "notice_period",
    "minimum_term",
    "term_months",
    "valid_from",
    "valid_until",
    "partner",
    "category",
    "contract_type",
    "framework_contract_id",
)


async def _get_contract_or_404(db: AsyncSession, contract_id: int) -> Contract:
    result = await db.execute(select(Contract).where(Contract.id == contract_id))
    contract = result.scalar_one_or_none()
    if not contract:
        raise HTTPException(status_code=404, detail="Contract not found")
    return contract


async def _next_contract_number(db: AsyncSession) -> str:
    """Highest existing <prefix>NNNNNN number plus one."""
    prefix = settings.CONTRACT_NUMBER_PREFIX
    result = await db.execute(
        select(Contract.contract_number).where(Contract.contract_number.like(f"{prefix}%"))
    )
    highest = 0
    for (number,) in result.all():
        suffix = number[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}{highest + 1:06d}"


async def _validate_framework_reference(
    db: AsyncSession, framework_id: Optional[int], contract_id: Optional[int] = None
):
    if framework_id is None:
        return
    if contract_id is not None and framework_id == contract_id:
        raise HTTPException(
            status_code=400, detail="A contract cannot reference itself as framework"
        )
    result = await db.execute(
        select(Contract.contract_type).where(Contract.id == framework_id)
    )
    parent_type = result.scalar_one_or_none()
    if parent_type is None:
        raise HTTPException(status_code=400, detail="Framework contract not found")
    if parent_type != "framework":
        raise HTTPException(
            status_code=400, detail="Referenced contract is not a framework contract"
        )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=list[ContractResponse])
async def list_contracts(
    search: Optional[str] = Query(None, max_length=200),
    category: Optional[str] = Query(None),
    only_valid: bool = Query(False),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List contracts, newest first. Supports text search, category and validity filters."""
    q = select(Contract)

    if search:
        pattern = f"%{search}%"
        q = q.where(
            or_(
                Contract.title.ilike(pattern),
                Contract.partner.ilike(pattern),
                Contract.content.ilike(pattern),
            )
        )
    if category:
        q = q.where(Contract.category == category)
    if only_valid:
        q = q.where(
            Contract.is_terminated == False,  # noqa: E712
            or_(Contract.valid_until.is_(None), Contract.valid_until > date.today()),
        )

    result = await db.execute(q.order_by(Contract.created_at.desc(), Contract.id.desc()))
    return [ContractResponse.model_validate(c) for c in result.scalars().all()]


@router.post("/calculate-dates", response_model=RecalculationResponse)
async def calculate_cancellation_dates(
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Recompute cancellation dates for every active contract. Safe to re-run."""
    outcome = await recalculate_cancellation_dates(db)
    logger.info(
        "cancellation_dates_triggered",
        actor_id=current_user["user_id"],
        updated=outcome.updated,
        failed=outcome.failed,
    )
    return RecalculationResponse(
        message=f"Cancellation dates calculated for {outcome.updated} contracts",
        total=outcome.total,
        updated=outcome.updated,
        cleared=outcome.cleared,
        failed=outcome.failed,
    )


@router.get("/{contract_id}", response_model=ContractResponse)
async def get_contract(
    contract_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ContractResponse.model_validate(await _get_contract_or_404(db, contract_id))


@router.post("", response_model=ContractResponse, status_code=status.HTTP_201_CREATED)
async def create_contract(
    body: ContractCreate,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await _validate_framework_reference(db, body.framework_contract_id)

    contract_number = (body.contract_number or "").strip() or await _next_contract_number(db)
    existing = await db.execute(
        select(Contract.id).where(Contract.contract_number == contract_number)
    )
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=409, detail="Contract number already exists")

    contract = Contract(
        contract_number=contract_number,
        is_terminated=False,
        **body.model_dump(include=set(_EDITABLE_FIELDS)),
    )
    db.add(contract)
    await db.flush()
    await db.refresh(contract)

    logger.info(
        "contract_created",
        contract_id=contract.id,
        contract_number=contract.contract_number,
        actor_id=current_user["user_id"],
    )
    return ContractResponse.model_validate(contract)


@router.put("/{contract_id}", response_model=ContractResponse)
async def update_contract(
    contract_id: int,
    body: ContractUpdate,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    contract = await _get_contract_or_404(db, contract_id)
    if contract.is_terminated:
        raise HTTPException(status_code=400, detail="Cannot modify a terminated contract")

    await _validate_framework_reference(db, body.framework_contract_id, contract_id)

    for field, value in body.model_dump(include=set(_EDITABLE_FIELDS)).items():
        setattr(contract, field, value)

    await db.flush()
    await db.refresh(contract)

    logger.info("contract_updated", contract_id=contract.id, actor_id=current_user["user_id"])
    return ContractResponse.model_validate(contract)


@router.post("/{contract_id}/terminate", response_model=ContractResponse)
async def terminate_contract(
    contract_id: int,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Terminate an active contract. Terminated contracts are excluded from recalculation."""
    contract = await _get_contract_or_404(db, contract_id)
    if contract.is_terminated:
        raise HTTPException(status_code=400, detail="Contract is already terminated")

    contract.is_terminated = True
    contract.terminated_at = utcnow()
    await db.flush()
    await db.refresh(contract)

    logger.info("contract_terminated", contract_id=contract.id, actor_id=current_user["user_id"])
    return ContractResponse.model_validate(contract)
