from __future__ import annotations

from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.application import Repositories, create_app
from tests.fakes import (
    MemoryCommentRepository,
    MemoryEnquiryRepository,
    MemoryOrderRepository,
    MemoryProductRepository,
    MemoryUserRepository,
    MemoryVideoRepository,
    StubMailer,
    StubMedia,
    make_config,
)


@pytest.fixture
def app(tmp_path: Path) -> FastAPI:
    users = MemoryUserRepository()
    repositories = Repositories(
        users=users,
        products=MemoryProductRepository(),
        orders=MemoryOrderRepository(),
        enquiries=MemoryEnquiryRepository(),
        videos=MemoryVideoRepository(users),
        comments=MemoryCommentRepository(),
    )
    return create_app(
        make_config(tmp_dir=tmp_path / "uploads"),
        repositories=repositories,
        media=StubMedia(),
        mailer=StubMailer(),
    )


def _register(client: TestClient, username: str = "alice") -> dict:
    response = client.post(
        "/api/v1/users/register",
        data={
            "fullName": "Alice Example",
            "email": f"{username}@example.com",
            "username": username,
            "password": "alice-pass",
        },
        files={"avatar": ("avatar.png", b"png-bytes", "image/png")},
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_health_uses_success_envelope(app: FastAPI) -> None:
    response = TestClient(app).get("/api/v1/health")

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["statusCode"] == 200
    assert body["data"]["status"] == "ok"
    assert "uptimeSeconds" in body["data"]
    assert response.headers["X-Frame-Options"] == "DENY"


def test_register_login_and_current_user_via_cookie(app: FastAPI) -> None:
    client = TestClient(app)

    registered = _register(client)
    login = client.post(
        "/api/v1/users/login", json={"username": "alice", "password": "alice-pass"}
    )
    me = client.get("/api/v1/users/current-user")

    assert registered["data"]["username"] == "alice"
    assert "password" not in registered["data"]
    assert registered["data"]["avatar"]["url"].startswith("https://media.test/")
    assert login.status_code == 200
    assert login.cookies.get("accessToken")
    assert login.cookies.get("refreshToken")
    assert login.json()["data"]["accessToken"]
    assert me.status_code == 200
    assert me.json()["data"]["email"] == "alice@example.com"


def test_register_without_avatar_is_rejected(app: FastAPI) -> None:
    response = TestClient(app).post(
        "/api/v1/users/register",
        data={
            "fullName": "Bob",
            "email": "bob@example.com",
            "username": "bob",
            "password": "pw",
        },
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Avatar is required"
    assert response.json()["success"] is False


def test_protected_route_without_token_returns_401(app: FastAPI) -> None:
    response = TestClient(app).get("/api/v1/users/current-user")

    assert response.status_code == 401
    assert response.json()["errorCode"] == "AUTH_MISSING_TOKEN"


def test_refresh_token_rotation_rejects_replay(app: FastAPI) -> None:
    client = TestClient(app)
    _register(client)
    login = client.post(
        "/api/v1/users/login", json={"username": "alice", "password": "alice-pass"}
    )
    original = login.json()["data"]["refreshToken"]

    rotated = client.post("/api/v1/users/refresh-token")
    replay = TestClient(app).post(
        "/api/v1/users/refresh-token", json={"refreshToken": original}
    )

    assert rotated.status_code == 200
    assert rotated.json()["data"]["refreshToken"] != original
    assert replay.status_code == 401


def test_admin_login_bootstraps_and_grants_console_access(app: FastAPI) -> None:
    admin = TestClient(app)
    login = admin.post(
        "/api/v1/admin/login", json={"username": "chief", "password": "chief-pass"}
    )
    token = login.json()["data"]["token"]

    stats = TestClient(app).get(
        "/api/v1/admin/stats", headers={"Authorization": f"Bearer {token}"}
    )
    via_header = TestClient(app).get(
        "/api/v1/admin/users", headers={"X-Auth-Token": token}
    )

    assert login.status_code == 200
    assert login.cookies.get("adminToken") == token
    assert login.json()["data"]["user"]["role"] == "admin"
    assert stats.status_code == 200
    assert stats.json()["data"]["admins"] == 1
    assert via_header.json()["data"]["pagination"]["totalCount"] == 1


def test_regular_user_cannot_reach_admin_console(app: FastAPI) -> None:
    client = TestClient(app)
    _register(client)
    client.post(
        "/api/v1/users/login", json={"username": "alice", "password": "alice-pass"}
    )
    token = client.cookies.get("accessToken")

    response = TestClient(app).get(
        "/api/v1/admin/stats", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 403


def test_public_enquiry_and_catalog_listing(app: FastAPI) -> None:
    client = TestClient(app)

    created = client.post(
        "/api/v1/enquiries",
        json={
            "name": "Ravi",
            "email": "ravi@example.com",
            "phone": "12345",
            "message": "Quote please",
            "companyName": "Acme",
            "contactPerson": "Ravi",
            "productCategory": "kitchen",
            "quantityRequired": 50,
        },
    )
    missing_field = client.post("/api/v1/enquiries", json={"name": "Ravi"})
    catalog = client.get("/api/v1/products", params={"page": 1, "limit": 5})

    assert created.status_code == 201
    assert created.json()["data"]["status"] == "pending"
    assert missing_field.status_code == 400
    assert catalog.json()["data"]["items"] == []
    assert catalog.json()["data"]["pagination"]["hasNext"] is False


def test_openapi_declares_error_envelope_for_owner_checks(app: FastAPI) -> None:
    schema = app.openapi()

    update_comment = schema["paths"]["/api/v1/comments/updateComments/{comment_id}"]
    assert update_comment["patch"]["responses"]["403"]["content"]["application/json"][
        "schema"
    ]["$ref"].endswith("ApiErrorResponse")
    assert "/api/v1/orders/{order_ref}/status" in schema["paths"]
    assert "/api/v1/videos/createVideo" in schema["paths"]


def test_create_product_with_infinite_price_is_rejected_and_listing_survives(
    app: FastAPI,
) -> None:
    token = (
        TestClient(app)
        .post(
            "/api/v1/admin/login",
            json={"username": "chief", "password": "chief-pass"},
        )
        .json()["data"]["token"]
    )
    client = TestClient(app)

    created = client.post(
        "/api/v1/createProduct",
        headers={"Authorization": f"Bearer {token}"},
        data={
            "name": "Endless Jar",
            "description": "Too good",
            "category": "kitchen",
            "price": "inf",
            "bulkPrice": "1",
            "minOrder": "1",
        },
        files={"image": ("jar.png", b"png-bytes", "image/png")},
    )
    catalog = client.get("/api/v1/products")

    assert created.status_code == 400
    assert created.json()["success"] is False
    assert catalog.status_code == 200
    assert catalog.json()["data"]["pagination"]["totalCount"] == 0


def test_routing_errors_use_error_envelope(app: FastAPI) -> None:
    client = TestClient(app)

    missing = client.get("/api/v1/no-such-route")
    wrong_method = client.delete("/api/v1/health")

    assert missing.status_code == 404
    assert missing.json()["success"] is False
    assert missing.json()["statusCode"] == 404
    assert missing.json()["errorCode"] == "HTTP_404"
    assert wrong_method.status_code == 405
    assert wrong_method.json()["success"] is False
    assert "GET" in wrong_method.headers["allow"]
