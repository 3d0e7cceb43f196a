from decimal import Decimal

from pydantic import BaseModel


class InterestRateUpdate(BaseModel):
    rate: Decimal
