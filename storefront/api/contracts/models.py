"""Pydantic API envelope models used in OpenAPI contracts."""

from __future__ import annotations

from typing import Generic, Literal, TypeVar

from pydantic import Field

from storefront.core.documents import CamelModel

T = TypeVar("T")


class ApiResponse(CamelModel, Generic[T]):
    """Uniform success envelope wrapping a typed payload."""

    status_code: int = Field(description="HTTP status code echoed in the body")
    data: T
    message: str = ""
    success: Literal[True] = True


class ApiErrorResponse(CamelModel):
    """Stable error envelope for API responses."""

    status_code: int = Field(description="HTTP status code echoed in the body")
    success: Literal[False] = False
    message: str = Field(description="Human-readable error message")
    error_code: str = Field(description="Machine-readable error code")
    stack: str | None = Field(
        default=None, description="Traceback, only outside production"
    )


class HealthResponse(CamelModel):
    """Health check payload."""

    status: Literal["ok"]
    timestamp: str
    uptime_seconds: float
    environment: str


def ok(data: T, message: str = "", status_code: int = 200) -> ApiResponse[T]:
    """Wrap data in the success envelope."""
    return ApiResponse(status_code=status_code, data=data, message=message)
