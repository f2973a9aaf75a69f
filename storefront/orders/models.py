"""Order records, request payloads and order id generation."""

from __future__ import annotations

import random
import string
import time
from enum import StrEnum

from pydantic import Field

from storefront.core.documents import CamelModel, StoredDocument, is_object_id

_ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


class PaymentStatus(StrEnum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class OrderStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(StrEnum):
    COD = "cod"
    ONLINE = "online"
    CARD = "card"
    UPI = "upi"


class ShippingAddress(CamelModel):
    name: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""
    country: str = ""


class OrderItem(CamelModel):
    """Line item snapshot taken from the catalog at order time."""

    product: str
    quantity: int
    price: float
    product_name: str = ""
    product_image: str = ""


class OrderRecord(StoredDocument):
    """Persisted order."""

    order_id: str
    user: str
    items: list[OrderItem] = Field(default_factory=list)
    total_amount: float
    shipping_address: ShippingAddress = Field(default_factory=ShippingAddress)
    payment_status: PaymentStatus = PaymentStatus.PENDING
    order_status: OrderStatus = OrderStatus.PENDING
    payment_method: PaymentMethod
    transaction_id: str | None = None
    notes: str | None = None


class OrderItemRequest(CamelModel):
    product: str
    quantity: int


class CreateOrderRequest(CamelModel):
    items: list[OrderItemRequest] = Field(default_factory=list)
    shipping_address: ShippingAddress = Field(default_factory=ShippingAddress)
    payment_method: PaymentMethod
    transaction_id: str | None = None
    notes: str | None = None


class OrderStatusUpdate(CamelModel):
    order_status: OrderStatus | None = None
    payment_status: PaymentStatus | None = None


def generate_order_id(
    now_ms: int | None = None, rng: random.Random | None = None
) -> str:
    """``ORD`` + last six digits of epoch millis + three random characters."""
    millis = int(time.time() * 1000) if now_ms is None else now_ms
    chooser = rng or random.SystemRandom()
    suffix = "".join(chooser.choice(_ORDER_SUFFIX_ALPHABET) for _ in range(3))
    return f"ORD{str(millis)[-6:]}{suffix}"


def initial_payment_status(method: PaymentMethod) -> PaymentStatus:
    return PaymentStatus.PENDING if method is PaymentMethod.COD else PaymentStatus.PAID


def validate_order_request(req: CreateOrderRequest) -> list[str]:
    """Return validation errors for an order payload."""
    if not req.items:
        return ["Order must contain at least one item"]
    errors: list[str] = []
    for index, item in enumerate(req.items):
        if not is_object_id(item.product):
            errors.append(f"items.{index}.product: Invalid product ID")
        if item.quantity < 1:
            errors.append(f"items.{index}.quantity: Quantity must be at least 1")
    return errors
