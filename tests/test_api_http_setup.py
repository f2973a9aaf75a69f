from __future__ import annotations

import asyncio
import inspect
import json
import logging
from dataclasses import replace
from typing import Any, Awaitable, Coroutine, cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from pymongo.errors import DuplicateKeyError, PyMongoError, ServerSelectionTimeoutError
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import Response

from storefront.api.errors import not_found
from storefront.api.http_setup import register_exception_handlers, register_http_middleware
from storefront.core.config import AppConfig
from tests.fakes import make_config

LOGGER = logging.getLogger(__name__)


def _app(config: AppConfig | None = None) -> FastAPI:
    app = FastAPI()
    config = config or make_config(request_max_bytes=8)
    register_http_middleware(app, config=config, logger=LOGGER)
    register_exception_handlers(app, config=config, logger=LOGGER)
    return app


def _request(
    path: str, method: str = "GET", headers: list[tuple[bytes, bytes]] | None = None
) -> Request:
    scope: dict[str, Any] = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("utf-8"),
        "query_string": b"",
        "root_path": "",
        "headers": headers or [],
        "client": ("127.0.0.1", 1234),
        "server": ("testserver", 80),
    }

    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": b"", "more_body": False}

    return Request(scope, receive)


def _dispatch_by_name(app: FastAPI, name: str):
    for middleware in app.user_middleware:
        dispatch = middleware.kwargs.get("dispatch")
        if callable(dispatch) and getattr(dispatch, "__name__", "") == name:
            return dispatch
    raise AssertionError(f"Dispatch {name!r} not found")


def _resolve_response(result: Response | Awaitable[Response]) -> Response:
    if inspect.iscoroutine(result):
        return asyncio.run(cast(Coroutine[Any, Any, Response], result))
    return cast(Response, result)


def _body(response: Response) -> dict[str, Any]:
    return json.loads(bytes(response.body))


async def _ok(_request: Request) -> Response:
    return Response(content="ok", status_code=200)


def test_http_setup_adds_security_headers_and_request_id() -> None:
    dispatch = _dispatch_by_name(_app(), "request_logging_middleware")
    request = _request("/ok", headers=[(b"x-request-id", b"req-123")])

    response = asyncio.run(dispatch(request, _ok))

    assert response.headers["X-Request-ID"] == "req-123"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_http_setup_rejects_large_json_body_before_handler() -> None:
    dispatch = _dispatch_by_name(_app(), "request_size_limit_middleware")
    request = _request(
        "/api/v1/enquiries",
        method="POST",
        headers=[(b"content-length", b"20"), (b"content-type", b"application/json")],
    )

    response = asyncio.run(dispatch(request, _ok))

    assert response.status_code == 413
    assert _body(response)["errorCode"] == "REQUEST_TOO_LARGE"
    assert _body(response)["success"] is False


def test_http_setup_leaves_multipart_bodies_to_upload_limit() -> None:
    dispatch = _dispatch_by_name(_app(), "request_size_limit_middleware")
    request = _request(
        "/api/v1/users/register",
        method="POST",
        headers=[
            (b"content-length", b"5000"),
            (b"content-type", b"multipart/form-data; boundary=x"),
        ],
    )

    response = asyncio.run(dispatch(request, _ok))

    assert response.status_code == 200


def test_http_setup_serializes_api_error_envelope() -> None:
    app = _app()
    handler = app.exception_handlers[HTTPException]

    response = _resolve_response(
        handler(_request("/api/v1/products/x"), not_found("Product not found"))
    )

    body = _body(response)
    assert response.status_code == 404
    assert body["statusCode"] == 404
    assert body["message"] == "Product not found"
    assert body["errorCode"] == "NOT_FOUND"
    assert "stack" in body


def test_http_setup_hides_stack_in_production() -> None:
    config = make_config()
    config = replace(config, security=replace(config.security, environment="production"))
    handler = _app(config).exception_handlers[Exception]

    response = _resolve_response(handler(_request("/boom"), RuntimeError("boom")))

    assert response.status_code == 500
    assert _body(response)["errorCode"] == "INTERNAL_SERVER_ERROR"
    assert "stack" not in _body(response)


def test_http_setup_maps_request_validation_to_400() -> None:
    handler = _app().exception_handlers[RequestValidationError]
    errors = [{"loc": ("body", "email"), "msg": "Field required", "type": "missing"}]

    response = _resolve_response(
        handler(_request("/validation"), RequestValidationError(errors))
    )

    assert response.status_code == 400
    assert _body(response)["message"] == "email: Field required"


def test_http_setup_maps_store_errors() -> None:
    app = _app()
    duplicate = _resolve_response(
        app.exception_handlers[DuplicateKeyError](
            _request("/dup"),
            DuplicateKeyError("dup", 11000, {"keyPattern": {"username": 1}}),
        )
    )
    outage = _resolve_response(
        app.exception_handlers[PyMongoError](
            _request("/down"), ServerSelectionTimeoutError("no servers")
        )
    )

    assert duplicate.status_code == 409
    assert _body(duplicate)["message"] == "A record with this username already exists"
    assert outage.status_code == 500
    assert _body(outage)["errorCode"] == "DATABASE_ERROR"
