from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from models.enums import EmploymentStatus, MaritalStatus, Role


class CreditProfileUpdate(BaseModel):
    annual_income: Optional[Decimal] = Field(None, alias="annualIncome", ge=0)
    employment_status: Optional[EmploymentStatus] = Field(None, alias="employmentStatus")
    age: Optional[int] = Field(None, ge=16, le=120)
    marital_status: Optional[MaritalStatus] = Field(None, alias="maritalStatus")
    existing_debts: Optional[Decimal] = Field(None, alias="existingDebts", ge=0)
    credit_history_years: Optional[int] = Field(None, alias="creditHistoryYears", ge=0)
    late_payments: Optional[int] = Field(None, alias="latePayments", ge=0)
    credit_utilization: Optional[Decimal] = Field(None, alias="creditUtilization", ge=0, le=100)
    credit_inquiries: Optional[int] = Field(None, alias="creditInquiries", ge=0)
    credit_mix: Optional[list[str]] = Field(None, alias="creditMix")

    model_config = {"populate_by_name": True}

    def changes(self) -> dict:
        """Only the fields the caller sent, enums reduced to their stored values."""
        out = {}
        for k, v in self.model_dump(exclude_unset=True).items():
            out[k] = v.value if isinstance(v, (EmploymentStatus, MaritalStatus)) else v
        return out


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=128)
    email: Optional[str] = None
    role: Role = Role.APPLICANT
    profile: Optional[CreditProfileUpdate] = None
