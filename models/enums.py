"""
Domain enums shared by the SQLAlchemy models, the services and the API schemas.
Columns store the plain `.value` strings.
"""
import enum


class Role(str, enum.Enum):
    APPLICANT = "APPLICANT"
    OFFICER = "OFFICER"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


class EmploymentStatus(str, enum.Enum):
    EMPLOYED = "EMPLOYED"
    SELF_EMPLOYED = "SELF_EMPLOYED"
    UNEMPLOYED = "UNEMPLOYED"
    OTHER = "OTHER"


class MaritalStatus(str, enum.Enum):
    SINGLE = "SINGLE"
    MARRIED = "MARRIED"
    DIVORCED = "DIVORCED"
    WIDOWED = "WIDOWED"


class DocumentStatus(str, enum.Enum):
    UPLOADED = "UPLOADED"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class LoanStatus(str, enum.Enum):
    SUBMITTED = "SUBMITTED"
    DOCUMENT_VERIFIED = "DOCUMENT_VERIFIED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @classmethod
    def valid_transitions(cls) -> dict["LoanStatus", frozenset["LoanStatus"]]:
        """Canonical lifecycle graph; rejection only happens after document verification."""
        return {
            cls.SUBMITTED: frozenset({cls.DOCUMENT_VERIFIED}),
            cls.DOCUMENT_VERIFIED: frozenset({cls.APPROVED, cls.REJECTED}),
            cls.APPROVED: frozenset(),
            cls.REJECTED: frozenset(),
        }
