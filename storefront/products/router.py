"""Catalog API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from storefront.api.contracts import ApiErrorResponse, ApiResponse, ok
from storefront.auth.dependencies import AuthDependencies
from storefront.auth.models import UserRecord
from storefront.core.config import AppConfig
from storefront.core.pagination import Page
from storefront.media.uploader import spool_optional
from storefront.products.models import ProductDraft, ProductRecord
from storefront.products.repository import ProductFilters
from storefront.products.service import ProductService


def _draft_form(
    name: str | None = Form(default=None),
    description: str | None = Form(default=None),
    category: str | None = Form(default=None),
    price: float | None = Form(default=None),
    bulk_price: float | None = Form(default=None, alias="bulkPrice"),
    min_order: int | None = Form(default=None, alias="minOrder"),
    features: str | None = Form(default=None),
    tags: str | None = Form(default=None),
    emoji: str | None = Form(default=None),
    bestseller: bool | None = Form(default=None),
    stock_quantity: int | None = Form(default=None, alias="stockQuantity"),
    meta_description: str | None = Form(default=None, alias="metaDescription"),
) -> ProductDraft:
    return ProductDraft(
        name=name,
        description=description,
        category=category,
        price=price,
        bulk_price=bulk_price,
        min_order=min_order,
        features=features,
        tags=tags,
        emoji=emoji,
        bestseller=bestseller,
        stock_quantity=stock_quantity,
        meta_description=meta_description,
    )


def create_products_router(
    service: ProductService, deps: AuthDependencies, config: AppConfig
) -> APIRouter:
    """Build catalog routes mounted under ``/api/v1``."""
    router = APIRouter(prefix="/api/v1", tags=["products"])

    @router.get("/products", response_model=ApiResponse[Page[ProductRecord]])
    def list_products(
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=12, ge=1, le=100),
        sort: str = Query(default="-createdAt"),
        category: str | None = Query(default=None),
        min_price: float | None = Query(default=None, alias="minPrice"),
        max_price: float | None = Query(default=None, alias="maxPrice"),
        search: str | None = Query(default=None),
        bestseller: bool | None = Query(default=None),
        in_stock: bool | None = Query(default=None, alias="inStock"),
        tags: str | None = Query(default=None),
    ) -> ApiResponse[Page[ProductRecord]]:
        """Filtered, sorted and paged catalog listing."""
        filters = ProductFilters(
            category=category,
            min_price=min_price,
            max_price=max_price,
            search=search,
            bestseller=bestseller,
            in_stock=in_stock,
            tags=(tags or "").split(",") if tags else [],
        )
        result = service.list_products(filters, page=page, limit=limit, sort=sort)
        return ok(result, "Products fetched successfully")

    @router.get(
        "/products/category/{category}",
        response_model=ApiResponse[list[ProductRecord]],
    )
    def list_by_category(category: str) -> ApiResponse[list[ProductRecord]]:
        return ok(service.list_by_category(category), "Products fetched successfully")

    @router.get(
        "/products/{product_id}",
        response_model=ApiResponse[ProductRecord],
        responses={400: {"model": ApiErrorResponse}, 404: {"model": ApiErrorResponse}},
    )
    def get_product(product_id: str) -> ApiResponse[ProductRecord]:
        return ok(service.get_product(product_id), "Product fetched successfully")

    @router.post(
        "/createProduct",
        status_code=201,
        response_model=ApiResponse[ProductRecord],
        responses={400: {"model": ApiErrorResponse}, 409: {"model": ApiErrorResponse}},
    )
    def create_product(
        draft: ProductDraft = Depends(_draft_form),
        image: UploadFile | None = File(default=None),
        user: UserRecord = Depends(deps.require_admin),
    ) -> ApiResponse[ProductRecord]:
        product = service.create_product(
            draft, spool_optional(image, config.media), user
        )
        return ok(product, "Product created successfully", 201)

    @router.put(
        "/products/update/{product_id}",
        response_model=ApiResponse[ProductRecord],
        responses={400: {"model": ApiErrorResponse}, 404: {"model": ApiErrorResponse}},
    )
    def update_product(
        product_id: str,
        draft: ProductDraft = Depends(_draft_form),
        image: UploadFile | None = File(default=None),
        user: UserRecord = Depends(deps.require_admin),
    ) -> ApiResponse[ProductRecord]:
        product = service.update_product(
            product_id, draft, spool_optional(image, config.media), user
        )
        return ok(product, "Product updated successfully")

    @router.delete(
        "/products/delete/{product_id}",
        response_model=ApiResponse[None],
        responses={404: {"model": ApiErrorResponse}},
    )
    def delete_product(
        product_id: str, user: UserRecord = Depends(deps.require_admin)
    ) -> ApiResponse[None]:
        service.delete_product(product_id, user)
        return ok(None, "Product deleted successfully")

    return router
