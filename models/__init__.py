from models.application import LoanApplication
from models.document import Document
from models.enums import DocumentStatus, EmploymentStatus, LoanStatus, MaritalStatus, Role
from models.interest_rate import InterestRateOverride
from models.user import User

__all__ = [
    "Document",
    "DocumentStatus",
    "EmploymentStatus",
    "InterestRateOverride",
    "LoanApplication",
    "LoanStatus",
    "MaritalStatus",
    "Role",
    "User",
]
