from typing import Any

from fastapi import status


class LedgerError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "bad_request"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(LedgerError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error = "validation_failed"

    def __init__(self, field: str, message: str | None = None) -> None:
        super().__init__(message or f"{field} is required.", field=field)
        self.field = field


class ConflictError(LedgerError):
    status_code = status.HTTP_409_CONFLICT
    error = "conflict"

    def __init__(self, message: str, conflicts: str | None = None) -> None:
        super().__init__(message, conflicts=conflicts)
        self.conflicts = conflicts


class NotFoundError(LedgerError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "not_found"


class TransientStoreError(LedgerError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error = "store_unavailable"
