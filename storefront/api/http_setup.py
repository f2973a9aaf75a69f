"""HTTP middleware and exception handler wiring for FastAPI apps."""

from __future__ import annotations

import traceback
import uuid
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError, PyMongoError
from starlette.exceptions import HTTPException

from storefront.api.contracts import ApiErrorResponse
from storefront.api.errors import (
    ApiErrorCode,
    duplicate_key_message,
    to_error_payload,
)
from storefront.core.config import AppConfig
from storefront.core.logging import bind_request_id


def _validation_messages(errors: list[Any]) -> str:
    """Join pydantic error entries into one readable message."""
    messages: list[str] = []
    for error in errors:
        location = [
            str(part)
            for part in error.get("loc", ())
            if part not in ("body", "query", "path", "form", "header", "cookie")
        ]
        message = str(error.get("msg") or "Invalid value")
        messages.append(f"{'.'.join(location)}: {message}" if location else message)
    return ", ".join(messages) or "Invalid request"


def register_http_middleware(app: FastAPI, *, config: AppConfig, logger: Any) -> None:
    """Attach common security and observability middleware to an app."""

    @app.middleware("http")
    async def request_size_limit_middleware(request: Request, call_next):
        content_type = request.headers.get("content-type", "")
        content_length = request.headers.get("content-length")
        # Multipart bodies are bounded per file by the upload limit instead.
        if content_length and not content_type.startswith("multipart/"):
            try:
                parsed_length = int(content_length)
            except ValueError:
                parsed_length = 0
            if parsed_length > config.security.request_max_bytes:
                return JSONResponse(
                    status_code=413,
                    content=ApiErrorResponse(
                        status_code=413,
                        error_code=ApiErrorCode.REQUEST_TOO_LARGE,
                        message=(
                            "Request size exceeds configured limit "
                            f"({config.security.request_max_bytes} bytes)."
                        ),
                    ).model_dump(exclude_none=True),
                )
        return await call_next(request)

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        correlation_id = (
            request.headers.get("x-request-id")
            or request.headers.get("x-correlation-id")
            or uuid.uuid4().hex
        )
        bind_request_id(correlation_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = correlation_id
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        logger.info(
            "request_completed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
            },
        )
        return response


def register_exception_handlers(
    app: FastAPI, *, config: AppConfig, logger: Any
) -> None:
    """Attach API exception handlers that return the error envelope."""
    expose_stack = not config.security.is_production

    def _envelope(
        status_code: int,
        error_code: str,
        message: str,
        exc: BaseException | None = None,
    ) -> JSONResponse:
        stack = None
        if expose_stack and exc is not None:
            stack = "".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            )
        return JSONResponse(
            status_code=status_code,
            content=ApiErrorResponse(
                status_code=status_code,
                error_code=error_code,
                message=message,
                stack=stack,
            ).model_dump(exclude_none=True),
            headers=getattr(exc, "headers", None),
        )

    def _log(level: str, event: str, request: Request, status_code: int) -> None:
        getattr(logger, level)(
            event,
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": status_code,
            },
        )

    @app.exception_handler(HTTPException)
    async def handle_http_exception(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        payload = to_error_payload(exc.detail, exc.status_code)
        _log("warning", "http_exception", request, exc.status_code)
        return _envelope(exc.status_code, payload["error_code"], payload["message"], exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        _log("warning", "validation_exception", request, 400)
        return _envelope(
            400,
            ApiErrorCode.VALIDATION_ERROR,
            _validation_messages(list(exc.errors())),
            exc,
        )

    @app.exception_handler(ValidationError)
    async def handle_document_validation(
        request: Request,
        exc: ValidationError,
    ) -> JSONResponse:
        _log("warning", "document_validation_exception", request, 400)
        return _envelope(
            400,
            ApiErrorCode.VALIDATION_ERROR,
            _validation_messages(list(exc.errors())),
            exc,
        )

    @app.exception_handler(DuplicateKeyError)
    async def handle_duplicate_key(
        request: Request,
        exc: DuplicateKeyError,
    ) -> JSONResponse:
        _log("warning", "duplicate_key", request, 409)
        return _envelope(
            409, ApiErrorCode.CONFLICT, duplicate_key_message(exc.details), exc
        )

    @app.exception_handler(PyMongoError)
    async def handle_database_error(
        request: Request,
        exc: PyMongoError,
    ) -> JSONResponse:
        logger.exception(
            "database_exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": 500,
            },
        )
        return _envelope(
            500, ApiErrorCode.DATABASE_ERROR, "Database operation failed", exc
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_exception(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        logger.exception(
            "unexpected_exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": 500,
            },
        )
        return _envelope(
            500, ApiErrorCode.INTERNAL_SERVER_ERROR, "Internal server error", exc
        )
