from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, Numeric, String

from database import Base
from models.enums import Role
from utils.clock import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, index=True)
    username = Column(String(128), unique=True, nullable=False, index=True)
    email = Column(String(256), nullable=True)
    role = Column(String(32), nullable=False, default=Role.APPLICANT.value, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    # Credit-relevant attributes; all optional, edited only by the owner
    annual_income = Column(Numeric(14, 2), nullable=True)
    employment_status = Column(String(32), nullable=True)
    age = Column(Integer, nullable=True)
    marital_status = Column(String(32), nullable=True)
    existing_debts = Column(Numeric(14, 2), nullable=True)
    credit_history_years = Column(Integer, nullable=True)
    late_payments = Column(Integer, nullable=True)
    credit_utilization = Column(Numeric(5, 2), nullable=True)
    credit_inquiries = Column(Integer, nullable=True)
    credit_mix = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
