"""Catalog product records, drafts and their validation rules."""

from __future__ import annotations

import math
import re

from pydantic import Field, computed_field

from storefront.core.documents import CamelModel, MediaAsset, StoredDocument

DEFAULT_EMOJI = "📦"

_SLUG_STRIP_RE = re.compile(r"[^a-z0-9]+")


class ProductRecord(StoredDocument):
    """Persisted catalog product."""

    name: str
    slug: str = ""
    description: str = ""
    category: str = ""
    price: float
    bulk_price: float
    min_order: int = 1
    features: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    image: MediaAsset | None = None
    emoji: str = DEFAULT_EMOJI
    bestseller: bool = False
    stock_quantity: int = 0
    in_stock: bool = False
    rating: float = 4.0
    review_count: int = 0
    total_sales: int = 0
    meta_description: str | None = None
    created_by: str | None = None
    updated_by: str | None = None
    is_active: bool = True

    @computed_field(alias="discountPercentage")
    @property
    def discount_percentage(self) -> int:
        if not (math.isfinite(self.price) and math.isfinite(self.bulk_price)):
            return 0
        if self.price > 0 and 0 < self.bulk_price < self.price:
            return round((self.price - self.bulk_price) / self.price * 100)
        return 0


class ProductDraft(CamelModel):
    """Create/update form fields; ``None`` means not supplied."""

    name: str | None = None
    description: str | None = None
    category: str | None = None
    price: float | None = None
    bulk_price: float | None = None
    min_order: int | None = None
    features: str | list[str] | None = None
    tags: str | list[str] | None = None
    emoji: str | None = None
    bestseller: bool | None = None
    stock_quantity: int | None = None
    meta_description: str | None = None


class ProductStats(CamelModel):
    total_products: int
    in_stock_products: int
    out_of_stock_products: int


def slugify(name: str) -> str:
    """Lower-case name with non-alphanumeric runs collapsed to ``-``."""
    return _SLUG_STRIP_RE.sub("-", name.lower()).strip("-")


def split_list(value: str | list[str] | None) -> list[str]:
    """Accept a comma-separated string or list and drop blank entries."""
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else value
    return [item.strip() for item in items if item and item.strip()]


def _price_errors(price: float, bulk_price: float) -> list[str]:
    if not (math.isfinite(price) and math.isfinite(bulk_price)):
        return ["Price and bulk price must be finite numbers"]
    if price <= 0 or bulk_price <= 0:
        return ["Price and bulk price must be greater than 0"]
    if bulk_price >= price:
        return ["Bulk price must be less than regular price"]
    return []


def validate_new_product(draft: ProductDraft) -> list[str]:
    """Return validation errors for a product about to be created."""
    required = (
        draft.name,
        draft.description,
        draft.category,
        draft.price,
        draft.bulk_price,
        draft.min_order,
    )
    if any(
        value is None or (isinstance(value, str) and not value.strip())
        for value in required
    ):
        return [
            "Name, description, category, price, bulk price, and min order are required"
        ]
    errors = _price_errors(draft.price, draft.bulk_price)
    errors.extend(_common_errors(draft))
    return errors


def validate_product_update(draft: ProductDraft, existing: ProductRecord) -> list[str]:
    """Return validation errors for a partial update of ``existing``."""
    errors: list[str] = []
    if draft.price is not None or draft.bulk_price is not None:
        price = draft.price if draft.price is not None else existing.price
        bulk_price = (
            draft.bulk_price if draft.bulk_price is not None else existing.bulk_price
        )
        errors.extend(_price_errors(price, bulk_price))
    if draft.name is not None and not draft.name.strip():
        errors.append("Product name cannot be empty")
    errors.extend(_common_errors(draft))
    return errors


def _common_errors(draft: ProductDraft) -> list[str]:
    errors: list[str] = []
    if draft.min_order is not None and draft.min_order < 1:
        errors.append("Minimum order must be at least 1")
    if draft.stock_quantity is not None and draft.stock_quantity < 0:
        errors.append("Stock quantity cannot be negative")
    if draft.emoji is not None and len(draft.emoji) > 4:
        errors.append("Emoji must be at most 4 characters")
    return errors


def draft_to_fields(draft: ProductDraft) -> dict:
    """Convert supplied draft values into stored document fields."""
    fields: dict = {}
    if draft.name is not None:
        fields["name"] = draft.name.strip()
    if draft.description is not None:
        fields["description"] = draft.description.strip()
    if draft.category is not None:
        fields["category"] = draft.category.strip().lower()
    if draft.price is not None:
        fields["price"] = float(draft.price)
    if draft.bulk_price is not None:
        fields["bulkPrice"] = float(draft.bulk_price)
    if draft.min_order is not None:
        fields["minOrder"] = int(draft.min_order)
    if draft.features is not None:
        fields["features"] = split_list(draft.features)
    if draft.tags is not None:
        fields["tags"] = split_list(draft.tags)
    if draft.emoji is not None:
        fields["emoji"] = draft.emoji or DEFAULT_EMOJI
    if draft.bestseller is not None:
        fields["bestseller"] = draft.bestseller
    if draft.stock_quantity is not None:
        fields["stockQuantity"] = int(draft.stock_quantity)
        fields["inStock"] = draft.stock_quantity > 0
    if draft.meta_description is not None:
        fields["metaDescription"] = draft.meta_description.strip()
    return fields
