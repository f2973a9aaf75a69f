"""Shared API error types and helpers."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from fastapi import HTTPException


class ApiErrorCode(StrEnum):
    """Machine-readable API error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_MISSING_TOKEN = "AUTH_MISSING_TOKEN"
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    AUTH_TOKEN_EXPIRED = "AUTH_TOKEN_EXPIRED"
    AUTH_TOKEN_REPLAYED = "AUTH_TOKEN_REPLAYED"
    AUTH_USER_NOT_FOUND = "AUTH_USER_NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    ACCOUNT_DEACTIVATED = "ACCOUNT_DEACTIVATED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    REQUEST_TOO_LARGE = "REQUEST_TOO_LARGE"
    MEDIA_UPLOAD_FAILED = "MEDIA_UPLOAD_FAILED"
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class ApiError(HTTPException):
    """HTTP exception carrying stable API error envelope."""

    def __init__(
        self, *, status_code: int, error_code: ApiErrorCode, message: str
    ) -> None:
        """Build an HTTP exception with standard detail structure."""
        super().__init__(
            status_code=status_code,
            detail={"error_code": str(error_code), "message": message},
        )
        self.error_code = error_code
        self.message = message


def bad_request(
    message: str, error_code: ApiErrorCode = ApiErrorCode.VALIDATION_ERROR
) -> ApiError:
    return ApiError(status_code=400, error_code=error_code, message=message)


def unauthorized(
    message: str, error_code: ApiErrorCode = ApiErrorCode.AUTH_TOKEN_INVALID
) -> ApiError:
    return ApiError(status_code=401, error_code=error_code, message=message)


def forbidden(
    message: str, error_code: ApiErrorCode = ApiErrorCode.FORBIDDEN
) -> ApiError:
    return ApiError(status_code=403, error_code=error_code, message=message)


def not_found(message: str) -> ApiError:
    return ApiError(status_code=404, error_code=ApiErrorCode.NOT_FOUND, message=message)


def conflict(message: str) -> ApiError:
    return ApiError(status_code=409, error_code=ApiErrorCode.CONFLICT, message=message)


def internal_error(
    message: str, error_code: ApiErrorCode = ApiErrorCode.INTERNAL_SERVER_ERROR
) -> ApiError:
    return ApiError(status_code=500, error_code=error_code, message=message)


def raise_for_errors(errors: list[str]) -> None:
    """Raise a 400 joining collected validation messages, if any."""
    if errors:
        raise bad_request(", ".join(errors))


def duplicate_key_message(details: dict[str, Any] | None) -> str:
    """Build a conflict message naming the duplicated field."""
    details = details or {}
    key_pattern = details.get("keyPattern") or details.get("keyValue") or {}
    field = next(iter(key_pattern), "") if isinstance(key_pattern, dict) else ""
    if not field:
        return "Duplicate value violates a unique constraint"
    return f"A record with this {field} already exists"


def to_error_payload(detail: Any, status_code: int) -> dict[str, str]:
    """Normalize HTTP exception detail into stable error payload."""
    if isinstance(detail, dict):
        error_code = str(detail.get("error_code") or f"HTTP_{status_code}")
        message = str(detail.get("message") or detail.get("detail") or "HTTP error")
        return {"error_code": error_code, "message": message}
    return {
        "error_code": f"HTTP_{status_code}",
        "message": str(detail or "HTTP error"),
    }
