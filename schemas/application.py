from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field


class ApplicationCreate(BaseModel):
    amount: Decimal
    term_months: int = Field(..., alias="termMonths")
    purpose: str

    model_config = {"populate_by_name": True}
