"""Order placement, lookup and status changes."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from pymongo.errors import DuplicateKeyError

from storefront.api.errors import bad_request, not_found, raise_for_errors
from storefront.auth.gate import ensure_owner
from storefront.auth.models import UserRecord
from storefront.core.pagination import Page, PageRequest, Pagination
from storefront.mail.sender import MailerProtocol, order_confirmation_message
from storefront.orders.models import (
    CreateOrderRequest,
    OrderItem,
    OrderRecord,
    OrderStatusUpdate,
    generate_order_id,
    initial_payment_status,
    validate_order_request,
)
from storefront.products.models import ProductRecord
from storefront.products.service import ProductRepositoryProtocol

LOGGER = logging.getLogger(__name__)

_ORDER_ID_ATTEMPTS = 3


class OrderRepositoryProtocol(Protocol):
    """Repository methods used by the order service."""

    def create(self, fields: dict[str, Any]) -> OrderRecord:
        """Insert order document."""

    def get(self, order_ref: str) -> OrderRecord | None:
        """Return order by document id or ``orderId``."""

    def list_for_user(self, user_id: str) -> list[OrderRecord]:
        """List a principal's orders newest first."""

    def list_page(self, *, skip: int, limit: int) -> list[OrderRecord]:
        """List all orders newest first."""

    def count(self) -> int:
        """Count all orders."""

    def update_fields(self, order_ref: str, fields: dict[str, Any]) -> OrderRecord | None:
        """Patch order fields and return the updated record."""


class OrderService:
    """Places orders against catalog stock and notifies the buyer."""

    def __init__(
        self,
        repo: OrderRepositoryProtocol,
        products: ProductRepositoryProtocol,
        mailer: MailerProtocol,
    ) -> None:
        self._repo = repo
        self._products = products
        self._mailer = mailer

    def place_order(self, user: UserRecord, req: CreateOrderRequest) -> OrderRecord:
        """Check stock for every line, insert the order, then decrement stock.

        The check and the decrement are separate store calls, so two
        concurrent orders can both pass the check and oversell.
        """
        raise_for_errors(validate_order_request(req))

        items: list[OrderItem] = []
        for line in req.items:
            product = self._products.get_by_id(line.product)
            if product is None or not product.is_active:
                raise not_found(f"Product not found: {line.product}")
            if product.stock_quantity < line.quantity:
                raise bad_request(
                    f"Insufficient stock for {product.name}. "
                    f"Available: {product.stock_quantity}"
                )
            items.append(_line_item(product, line.quantity))

        total = round(sum(item.price * item.quantity for item in items), 2)
        fields: dict[str, Any] = {
            "user": user.id,
            "items": [item.model_dump() for item in items],
            "totalAmount": total,
            "shippingAddress": req.shipping_address.model_dump(),
            "paymentMethod": req.payment_method.value,
            "paymentStatus": initial_payment_status(req.payment_method).value,
            "orderStatus": "pending",
            "transactionId": req.transaction_id,
            "notes": req.notes,
        }
        order = self._insert_with_unique_id(fields)

        for item in items:
            self._products.decrement_stock(item.product, item.quantity)

        LOGGER.info(
            "order_placed", extra={"user_id": user.id, "resource_id": order.order_id}
        )
        subject, html_body, text_body = order_confirmation_message(order, user.full_name)
        self._mailer.send(user.email, subject, html_body, text_body)
        return order

    def list_my_orders(self, user: UserRecord) -> list[OrderRecord]:
        return self._repo.list_for_user(user.id)

    def get_order(self, order_ref: str, user: UserRecord) -> OrderRecord:
        order = self._repo.get(order_ref)
        if order is None:
            raise not_found("Order not found")
        ensure_owner(order.user, user, "You can only view your own orders")
        return order

    def list_orders(self, page: int | None, limit: int | None) -> Page[OrderRecord]:
        request = PageRequest.build(page, limit, default_limit=10)
        items = self._repo.list_page(skip=request.skip, limit=request.limit)
        return Page(
            items=items, pagination=Pagination.from_total(request, self._repo.count())
        )

    def update_status(self, order_ref: str, update: OrderStatusUpdate) -> OrderRecord:
        fields: dict[str, Any] = {}
        if update.order_status is not None:
            fields["orderStatus"] = update.order_status.value
        if update.payment_status is not None:
            fields["paymentStatus"] = update.payment_status.value
        if not fields:
            raise bad_request("orderStatus or paymentStatus is required")
        order = self._repo.update_fields(order_ref, fields)
        if order is None:
            raise not_found("Order not found")
        return order

    def _insert_with_unique_id(self, fields: dict[str, Any]) -> OrderRecord:
        attempt = 0
        while True:
            order_id = generate_order_id()
            try:
                return self._repo.create({**fields, "orderId": order_id})
            except DuplicateKeyError:
                attempt += 1
                if attempt >= _ORDER_ID_ATTEMPTS:
                    raise
                LOGGER.warning("order_id_collision", extra={"resource_id": order_id})


def _line_item(product: ProductRecord, quantity: int) -> OrderItem:
    return OrderItem(
        product=product.id,
        quantity=quantity,
        price=product.price,
        product_name=product.name,
        product_image=product.image.url if product.image else "",
    )
