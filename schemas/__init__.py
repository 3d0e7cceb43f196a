from schemas.application import ApplicationCreate
from schemas.credit import CreditAssessment, CreditProfile, LoanHistory, ScoreFactor
from schemas.interest_rate import InterestRateUpdate
from schemas.user import CreditProfileUpdate, UserCreate

__all__ = [
    "ApplicationCreate",
    "CreditAssessment",
    "CreditProfile",
    "CreditProfileUpdate",
    "InterestRateUpdate",
    "LoanHistory",
    "ScoreFactor",
    "UserCreate",
]
