"""Public API response contracts."""

from storefront.api.contracts.models import (
    ApiErrorResponse,
    ApiResponse,
    HealthResponse,
    ok,
)

__all__ = [
    "ApiErrorResponse",
    "ApiResponse",
    "HealthResponse",
    "ok",
]
