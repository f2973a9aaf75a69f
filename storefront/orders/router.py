"""Order API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from storefront.api.contracts import ApiErrorResponse, ApiResponse, ok
from storefront.auth.dependencies import AuthDependencies
from storefront.auth.models import UserRecord
from storefront.core.pagination import Page
from storefront.orders.models import CreateOrderRequest, OrderRecord, OrderStatusUpdate
from storefront.orders.service import OrderService


def create_orders_router(service: OrderService, deps: AuthDependencies) -> APIRouter:
    """Build the ``/api/v1/orders`` router."""
    router = APIRouter(prefix="/api/v1/orders", tags=["orders"])

    @router.post(
        "",
        status_code=201,
        response_model=ApiResponse[OrderRecord],
        responses={400: {"model": ApiErrorResponse}, 404: {"model": ApiErrorResponse}},
    )
    def create_order(
        req: CreateOrderRequest, user: UserRecord = Depends(deps.require_user)
    ) -> ApiResponse[OrderRecord]:
        return ok(service.place_order(user, req), "Order created successfully", 201)

    @router.get("/my-orders", response_model=ApiResponse[list[OrderRecord]])
    def my_orders(
        user: UserRecord = Depends(deps.require_user),
    ) -> ApiResponse[list[OrderRecord]]:
        return ok(service.list_my_orders(user), "Orders fetched successfully")

    @router.get("", response_model=ApiResponse[Page[OrderRecord]])
    def list_orders(
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=10, ge=1, le=100),
        _: UserRecord = Depends(deps.require_admin),
    ) -> ApiResponse[Page[OrderRecord]]:
        return ok(service.list_orders(page, limit), "Orders fetched successfully")

    @router.get(
        "/{order_ref}",
        response_model=ApiResponse[OrderRecord],
        responses={403: {"model": ApiErrorResponse}, 404: {"model": ApiErrorResponse}},
    )
    def get_order(
        order_ref: str, user: UserRecord = Depends(deps.require_user)
    ) -> ApiResponse[OrderRecord]:
        return ok(service.get_order(order_ref, user), "Order fetched successfully")

    @router.put(
        "/{order_ref}/status",
        response_model=ApiResponse[OrderRecord],
        responses={400: {"model": ApiErrorResponse}, 404: {"model": ApiErrorResponse}},
    )
    def update_status(
        order_ref: str,
        update: OrderStatusUpdate,
        _: UserRecord = Depends(deps.require_admin),
    ) -> ApiResponse[OrderRecord]:
        return ok(
            service.update_status(order_ref, update),
            "Order status updated successfully",
        )

    return router
