from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String

from database import Base
from models.enums import LoanStatus
from utils.clock import utcnow


class LoanApplication(Base):
    __tablename__ = "loan_applications"

    id = Column(String(64), primary_key=True, index=True)
    applicant_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    officer_id = Column(String(64), ForeignKey("users.id"), nullable=True)
    manager_id = Column(String(64), ForeignKey("users.id"), nullable=True)
    status = Column(String(32), nullable=False, default=LoanStatus.SUBMITTED.value, index=True)
    documents_verified = Column(Boolean, nullable=False, default=False)
    # Request
    amount = Column(Numeric(14, 2), nullable=False)
    term_months = Column(Integer, nullable=False)
    purpose = Column(String(128), nullable=False)
    credit_score = Column(Integer, nullable=True)
    interest_rate = Column(Numeric(5, 2), nullable=True)
    # Decision; written once on approval
    approved_amount = Column(Numeric(14, 2), nullable=True)
    interest_amount = Column(Numeric(14, 2), nullable=True)
    paid_amount = Column(Numeric(14, 2), nullable=True)
    pending_amount = Column(Numeric(14, 2), nullable=True)
    applied_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    decision_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
