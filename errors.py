"""
Caller-facing error taxonomy for the loan review core.
Each error carries the HTTP status the API layer maps it to.
"""
from __future__ import annotations

from typing import Any, Optional


class LoanServiceError(Exception):
    status_code = 500
    error = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "error": self.error}


class ValidationError(LoanServiceError):
    """Malformed input: empty file, blank required field, amount/term out of range."""

    status_code = 400
    error = "validation_error"


class PermissionDeniedError(LoanServiceError):
    status_code = 403
    error = "permission_denied"


class NotFoundError(LoanServiceError):
    status_code = 404
    error = "not_found"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class IllegalStateError(LoanServiceError):
    """A transition was attempted from a status that does not permit it."""

    status_code = 409
    error = "illegal_state"

    def __init__(self, message: str, current_state: Optional[str] = None):
        super().__init__(message)
        self.current_state = current_state

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        if self.current_state is not None:
            d["currentState"] = self.current_state
        return d


class StorageError(LoanServiceError):
    status_code = 502
    error = "storage_error"
