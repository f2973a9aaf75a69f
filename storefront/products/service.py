"""Catalog operations: public browsing and admin maintenance."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

from storefront.api.errors import (
    ApiErrorCode,
    bad_request,
    conflict,
    not_found,
    raise_for_errors,
)
from storefront.auth.gate import ensure_owner
from storefront.auth.models import UserRecord
from storefront.core.documents import is_object_id, to_object_id
from storefront.core.pagination import Page, PageRequest, Pagination
from storefront.media.uploader import MediaUploaderProtocol, remove_local_file
from storefront.products.models import (
    ProductDraft,
    ProductRecord,
    ProductStats,
    draft_to_fields,
    slugify,
    validate_new_product,
    validate_product_update,
)
from storefront.products.repository import ProductFilters, build_product_query, parse_sort

LOGGER = logging.getLogger(__name__)

PRODUCTS_PAGE_SIZE = 12


class ProductRepositoryProtocol(Protocol):
    """Repository methods used by the product and order services."""

    def get_by_id(self, product_id: str) -> ProductRecord | None:
        """Return product by id, or ``None``."""

    def find_by_name(self, name: str) -> ProductRecord | None:
        """Case-insensitive exact name lookup."""

    def slug_exists(self, slug: str, *, exclude_id: str | None = None) -> bool:
        """Return whether another product already owns the slug."""

    def create(self, fields: dict[str, Any]) -> ProductRecord:
        """Insert product document."""

    def update_fields(
        self, product_id: str, fields: dict[str, Any]
    ) -> ProductRecord | None:
        """Patch product fields and return the updated record."""

    def delete(self, product_id: str) -> ProductRecord | None:
        """Delete product and return the removed record."""

    def list_page(
        self,
        query: dict[str, Any],
        *,
        sort: list[tuple[str, int]],
        skip: int,
        limit: int,
    ) -> list[ProductRecord]:
        """List products matching a filter."""

    def count(self, query: dict[str, Any] | None = None) -> int:
        """Count products matching a filter."""

    def list_by_category(self, category: str) -> list[ProductRecord]:
        """List active products in a category."""

    def decrement_stock(self, product_id: str, quantity: int) -> ProductRecord | None:
        """Decrease stock and increase sales counters."""


class ProductService:
    """Catalog listing plus admin create/update/delete."""

    def __init__(
        self, repo: ProductRepositoryProtocol, media: MediaUploaderProtocol
    ) -> None:
        self._repo = repo
        self._media = media

    def list_products(
        self,
        filters: ProductFilters,
        *,
        page: int | None = None,
        limit: int | None = None,
        sort: str | None = None,
    ) -> Page[ProductRecord]:
        request = PageRequest.build(page, limit, default_limit=PRODUCTS_PAGE_SIZE)
        query = build_product_query(filters)
        items = self._repo.list_page(
            query, sort=parse_sort(sort), skip=request.skip, limit=request.limit
        )
        total = self._repo.count(query)
        return Page(items=items, pagination=Pagination.from_total(request, total))

    def list_by_category(self, category: str) -> list[ProductRecord]:
        return self._repo.list_by_category(category)

    def get_product(self, product_id: str) -> ProductRecord:
        if not is_object_id(product_id):
            raise bad_request("Invalid product ID format")
        product = self._repo.get_by_id(product_id)
        if product is None:
            raise not_found("Product not found")
        return product

    def create_product(
        self, draft: ProductDraft, image_path: Path | None, user: UserRecord
    ) -> ProductRecord:
        """Validate, upload the image, then insert with a unique slug."""
        try:
            raise_for_errors(validate_new_product(draft))
            if self._repo.find_by_name(draft.name or ""):
                raise conflict("Product with this name already exists")
            if image_path is None:
                raise bad_request("Product image is required")
            image = self._media.upload(image_path, "image")
        finally:
            if image_path is not None:
                remove_local_file(image_path)
        if image is None:
            raise bad_request(
                "Failed to upload product image", ApiErrorCode.MEDIA_UPLOAD_FAILED
            )

        fields = draft_to_fields(draft)
        fields["slug"] = self._unique_slug(fields["name"])
        fields["image"] = image.model_dump(exclude_none=True)
        fields["createdBy"] = to_object_id(user.id)
        fields["updatedBy"] = to_object_id(user.id)
        fields.setdefault("inStock", False)
        product = self._repo.create(fields)
        LOGGER.info(
            "product_created", extra={"user_id": user.id, "resource_id": product.id}
        )
        return product

    def update_product(
        self,
        product_id: str,
        draft: ProductDraft,
        image_path: Path | None,
        user: UserRecord,
    ) -> ProductRecord:
        """Apply a partial update, optionally replacing the image."""
        try:
            existing = self.get_product(product_id)
            ensure_owner(
                existing.created_by, user, "You can only update your own products"
            )
            raise_for_errors(validate_product_update(draft, existing))
            new_name = (draft.name or "").strip()
            if new_name and new_name.lower() != existing.name.lower():
                clash = self._repo.find_by_name(new_name)
                if clash is not None and clash.id != existing.id:
                    raise conflict("Product with this name already exists")
            image = (
                self._media.upload(image_path, "image")
                if image_path is not None
                else None
            )
        finally:
            if image_path is not None:
                remove_local_file(image_path)
        if image_path is not None and image is None:
            raise bad_request(
                "Failed to upload product image", ApiErrorCode.MEDIA_UPLOAD_FAILED
            )

        fields = draft_to_fields(draft)
        if "name" in fields and fields["name"] != existing.name:
            fields["slug"] = self._unique_slug(fields["name"], exclude_id=existing.id)
        if image is not None:
            fields["image"] = image.model_dump(exclude_none=True)
        fields["updatedBy"] = to_object_id(user.id)
        updated = self._repo.update_fields(existing.id, fields)
        if updated is None:
            raise not_found("Product not found after update")
        if image is not None and existing.image is not None:
            self._media.delete(existing.image.public_id, "image")
        return updated

    def delete_product(self, product_id: str, user: UserRecord) -> None:
        existing = self.get_product(product_id)
        ensure_owner(existing.created_by, user, "You can only delete your own products")
        removed = self._repo.delete(existing.id)
        if removed is None:
            raise not_found("Product not found")
        if removed.image is not None:
            self._media.delete(removed.image.public_id, "image")
        LOGGER.info(
            "product_deleted", extra={"user_id": user.id, "resource_id": removed.id}
        )

    def stats(self) -> ProductStats:
        return ProductStats(
            total_products=self._repo.count({}),
            in_stock_products=self._repo.count({"inStock": True}),
            out_of_stock_products=self._repo.count({"inStock": False}),
        )

    def _unique_slug(self, name: str, *, exclude_id: str | None = None) -> str:
        base = slugify(name) or "product"
        slug = base
        counter = 1
        while self._repo.slug_exists(slug, exclude_id=exclude_id):
            slug = f"{base}-{counter}"
            counter += 1
        return slug
