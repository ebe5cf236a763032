from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class ContractBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: Optional[str] = None
    conditions: Optional[str] = None
    notice_period: Optional[int] = Field(None, ge=0, le=120, description="months")
    minimum_term: Optional[date] = None
    term_months: Optional[int] = Field(None, ge=0, le=600)
    valid_from: date
    valid_until: Optional[date] = None
    partner: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=100)
    contract_type: Literal["framework", "individual"] = "individual"
    framework_contract_id: Optional[int] = None

    @field_validator("title", "partner", "category")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @model_validator(mode="after")
    def check_validity_window(self):
        if self.valid_until and self.valid_until < self.valid_from:
            raise ValueError("valid_until must not be before valid_from")
        return self


class ContractCreate(ContractBase):
    contract_number: Optional[str] = Field(None, max_length=50)


class ContractUpdate(ContractBase):
    pass


class ContractResponse(BaseModel):
    id: int
    contract_number: str
    title: str
    content: Optional[str] = None
    conditions: Optional[str] = None
    notice_period: Optional[int] = None
    minimum_term: Optional[date] = None
    term_months: Optional[int] = None
    cancellation_date: Optional[date] = None
    cancellation_action_date: Optional[date] = None
    valid_from: date
    valid_until: Optional[date] = None
    partner: str
    category: str
    contract_type: str
    framework_contract_id: Optional[int] = None
    is_terminated: bool
    terminated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RecalculationResponse(BaseModel):
    message: str
    total: int
    updated: int
    cleared: int
    failed: int
