from __future__ import annotations

import random
import re

import pytest

from storefront.api.errors import ApiError
from storefront.auth.models import Role
from storefront.orders.models import (
    CreateOrderRequest,
    OrderStatusUpdate,
    PaymentStatus,
    generate_order_id,
)
from storefront.orders.repository import order_lookup
from storefront.orders.service import OrderService
from tests.fakes import (
    MemoryOrderRepository,
    MemoryProductRepository,
    MemoryUserRepository,
    StubMailer,
)


def _build():
    orders = MemoryOrderRepository()
    products = MemoryProductRepository()
    mailer = StubMailer()
    users = MemoryUserRepository()
    return OrderService(orders, products, mailer), orders, products, mailer, users


def _request(*lines: tuple[str, int], method: str = "cod") -> CreateOrderRequest:
    return CreateOrderRequest.model_validate(
        {
            "items": [{"product": product, "quantity": qty} for product, qty in lines],
            "shippingAddress": {"name": "Alice", "city": "Pune"},
            "paymentMethod": method,
        }
    )


def test_generate_order_id_format() -> None:
    order_id = generate_order_id(now_ms=1_700_000_123_456, rng=random.Random(7))

    assert re.fullmatch(r"ORD123456[A-Z0-9]{3}", order_id)


def test_order_lookup_accepts_document_id_or_order_id() -> None:
    assert "_id" in order_lookup("a" * 24)
    assert order_lookup(" ORD123456ABC ") == {"orderId": "ORD123456ABC"}


def test_place_order_prices_from_catalog_and_decrements_stock() -> None:
    service, _orders, products, mailer, users = _build()
    buyer = users.seed("alice")
    bottle = products.seed("Bottle", price=12.5, stock=3)
    cup = products.seed("Cup", price=4.0, stock=10)

    order = service.place_order(buyer, _request((bottle.id, 2), (cup.id, 1)))

    assert order.total_amount == 29.0
    assert order.items[0].product_name == "Bottle"
    assert order.payment_status is PaymentStatus.PENDING
    assert products.get_by_id(bottle.id).stock_quantity == 1
    assert products.get_by_id(bottle.id).total_sales == 2
    assert mailer.sent[0]["to"] == buyer.email
    assert order.order_id in mailer.sent[0]["subject"]


def test_place_order_card_payment_is_marked_paid() -> None:
    service, _orders, products, _mailer, users = _build()
    product = products.seed("Bottle")

    order = service.place_order(
        users.seed("alice"), _request((product.id, 1), method="card")
    )

    assert order.payment_status is PaymentStatus.PAID


def test_place_order_rejects_insufficient_stock_without_side_effects() -> None:
    service, orders, products, mailer, users = _build()
    product = products.seed("Bottle", stock=1)

    with pytest.raises(ApiError) as exc:
        service.place_order(users.seed("alice"), _request((product.id, 2)))

    assert exc.value.status_code == 400
    assert "Available: 1" in exc.value.message
    assert orders.count() == 0
    assert products.get_by_id(product.id).stock_quantity == 1
    assert mailer.sent == []


def test_place_order_rejects_inactive_or_unknown_product() -> None:
    service, _orders, products, _mailer, users = _build()
    hidden = products.seed("Hidden", isActive=False)
    buyer = users.seed("alice")

    with pytest.raises(ApiError) as inactive:
        service.place_order(buyer, _request((hidden.id, 1)))
    with pytest.raises(ApiError) as unknown:
        service.place_order(buyer, _request(("c" * 24, 1)))
    with pytest.raises(ApiError) as empty:
        service.place_order(buyer, _request())

    assert inactive.value.status_code == 404
    assert unknown.value.status_code == 404
    assert empty.value.status_code == 400


def test_place_order_succeeds_when_mail_relay_rejects() -> None:
    service, orders, products, mailer, users = _build()
    mailer.accept = False
    product = products.seed("Bottle")

    service.place_order(users.seed("alice"), _request((product.id, 1)))

    assert orders.count() == 1


def test_place_order_retries_order_id_collision(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    service, orders, products, _mailer, users = _build()
    product = products.seed("Bottle")
    generated = iter(["ORD000001AAA", "ORD000001AAA", "ORD000002BBB"])
    monkeypatch.setattr(
        "storefront.orders.service.generate_order_id", lambda: next(generated)
    )
    orders.taken_order_ids.add("ORD000001AAA")

    order = service.place_order(users.seed("alice"), _request((product.id, 1)))

    assert order.order_id == "ORD000002BBB"


def test_sequential_checks_allow_oversell_between_concurrent_orders() -> None:
    service, _orders, products, _mailer, users = _build()
    product = products.seed("Bottle", stock=1)
    original_get = products.get_by_id
    snapshot = original_get(product.id)
    # Both requests observe the same pre-decrement stock level.
    products.get_by_id = lambda product_id: snapshot

    service.place_order(users.seed("alice"), _request((product.id, 1)))
    service.place_order(users.seed("bob"), _request((product.id, 1)))

    assert original_get(product.id).stock_quantity == -1


def test_get_order_is_owner_or_admin() -> None:
    service, _orders, products, _mailer, users = _build()
    owner = users.seed("alice")
    stranger = users.seed("bob")
    admin = users.seed("root", role=Role.ADMIN)
    order = service.place_order(owner, _request((products.seed("Bottle").id, 1)))

    assert service.get_order(order.order_id, owner).id == order.id
    assert service.get_order(order.id, admin).id == order.id
    with pytest.raises(ApiError) as exc:
        service.get_order(order.id, stranger)
    assert exc.value.status_code == 403


def test_update_status_requires_a_field() -> None:
    service, _orders, products, _mailer, users = _build()
    order = service.place_order(
        users.seed("alice"), _request((products.seed("Bottle").id, 1))
    )

    with pytest.raises(ApiError) as exc:
        service.update_status(order.order_id, OrderStatusUpdate())
    updated = service.update_status(
        order.order_id, OrderStatusUpdate.model_validate({"orderStatus": "shipped"})
    )

    assert exc.value.status_code == 400
    assert updated.order_status == "shipped"
