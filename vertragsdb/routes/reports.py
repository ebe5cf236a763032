from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vertragsdb.database import get_db
from vertragsdb.middleware.auth import get_current_user
from vertragsdb.schemas.contract import ContractResponse
from vertragsdb.services.expiry_service import list_expiring_contracts

router = APIRouter()


@router.get("/expiring", response_model=list[ContractResponse])
async def expiring_contracts(
    # Kept as a raw string: malformed or non-positive values fall back to the default.
    days: Optional[str] = Query(None, description="Lookahead in days (default 90)"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Active contracts whose cancellation notice is due within the lookahead, most urgent first."""
    contracts = await list_expiring_contracts(db, lookahead_days=days)
    return [ContractResponse.model_validate(c) for c in contracts]
