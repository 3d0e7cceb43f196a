from repositories.applications import LoanApplicationRepository
from repositories.base import Repository
from repositories.documents import DocumentRepository
from repositories.interest_rates import InterestRateRepository
from repositories.users import UserRepository

__all__ = [
    "DocumentRepository",
    "InterestRateRepository",
    "LoanApplicationRepository",
    "Repository",
    "UserRepository",
]
