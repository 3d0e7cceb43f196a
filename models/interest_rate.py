from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String

from database import Base
from utils.clock import utcnow


class InterestRateOverride(Base):
    """Manager-maintained rate for a loan purpose; wins over the computed rate."""

    __tablename__ = "interest_rate_overrides"

    purpose = Column(String(128), primary_key=True)
    rate = Column(Numeric(5, 2), nullable=False)
    updated_by = Column(String(64), ForeignKey("users.id"), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
