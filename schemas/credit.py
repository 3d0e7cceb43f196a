from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class CreditProfile(BaseModel):
    """Credit-relevant applicant attributes; every field may be missing."""

    annual_income: Optional[Decimal] = None
    employment_status: Optional[str] = None
    age: Optional[int] = None
    marital_status: Optional[str] = None
    existing_debts: Optional[Decimal] = None
    credit_history_years: Optional[int] = None
    late_payments: Optional[int] = None
    credit_utilization: Optional[Decimal] = None
    credit_inquiries: Optional[int] = None
    credit_mix: list[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}

    @field_validator("credit_mix", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return v or []


class LoanHistory(BaseModel):
    """Outcome counts of an applicant's earlier applications."""

    paid_off: int = 0
    defaulted: int = 0
    rejected: int = 0


class ScoreFactor(BaseModel):
    name: str
    points: int
    detail: Optional[str] = None


class CreditAssessment(BaseModel):
    application_id: str
    credit_score: int
    eligible: bool
    interest_rate: Decimal
    monthly_installment: Decimal
    factors: list[ScoreFactor] = Field(default_factory=list)
