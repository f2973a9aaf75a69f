"""Enquiry API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from storefront.api.contracts import ApiErrorResponse, ApiResponse, ok
from storefront.auth.dependencies import AuthDependencies
from storefront.auth.models import UserRecord
from storefront.core.pagination import Page
from storefront.enquiries.models import EnquiryCreate, EnquiryRecord, EnquiryUpdate
from storefront.enquiries.service import EnquiryService


def create_enquiries_router(
    service: EnquiryService, deps: AuthDependencies
) -> APIRouter:
    """Build the ``/api/v1/enquiries`` router."""
    router = APIRouter(prefix="/api/v1/enquiries", tags=["enquiries"])
    not_found_responses = {
        400: {"model": ApiErrorResponse},
        404: {"model": ApiErrorResponse},
    }

    @router.post(
        "",
        status_code=201,
        response_model=ApiResponse[EnquiryRecord],
        responses={400: {"model": ApiErrorResponse}},
    )
    def create_enquiry(req: EnquiryCreate) -> ApiResponse[EnquiryRecord]:
        """Public enquiry submission."""
        return ok(service.submit(req), "Enquiry submitted successfully", 201)

    @router.get("", response_model=ApiResponse[Page[EnquiryRecord]])
    def list_enquiries(
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=10, ge=1, le=100),
        _: UserRecord = Depends(deps.require_admin),
    ) -> ApiResponse[Page[EnquiryRecord]]:
        return ok(service.list_enquiries(page, limit), "Enquiries fetched successfully")

    @router.get(
        "/{enquiry_id}",
        response_model=ApiResponse[EnquiryRecord],
        responses=not_found_responses,
    )
    def get_enquiry(
        enquiry_id: str, _: UserRecord = Depends(deps.require_admin)
    ) -> ApiResponse[EnquiryRecord]:
        return ok(service.get_enquiry(enquiry_id), "Enquiry fetched successfully")

    @router.put(
        "/{enquiry_id}",
        response_model=ApiResponse[EnquiryRecord],
        responses=not_found_responses,
    )
    def update_enquiry(
        enquiry_id: str,
        update: EnquiryUpdate,
        _: UserRecord = Depends(deps.require_admin),
    ) -> ApiResponse[EnquiryRecord]:
        return ok(
            service.update_enquiry(enquiry_id, update), "Enquiry updated successfully"
        )

    @router.delete(
        "/{enquiry_id}", response_model=ApiResponse[None], responses=not_found_responses
    )
    def delete_enquiry(
        enquiry_id: str, _: UserRecord = Depends(deps.require_admin)
    ) -> ApiResponse[None]:
        service.delete_enquiry(enquiry_id)
        return ok(None, "Enquiry deleted successfully")

    return router
