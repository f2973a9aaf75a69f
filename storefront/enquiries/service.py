"""Enquiry intake and admin follow-up."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from storefront.api.errors import bad_request, not_found, raise_for_errors
from storefront.core.documents import is_object_id
from storefront.core.pagination import Page, PageRequest, Pagination
from storefront.enquiries.models import (
    EnquiryCreate,
    EnquiryRecord,
    EnquiryUpdate,
    update_to_fields,
    validate_enquiry,
)
from storefront.mail.sender import MailerProtocol, enquiry_notification_message

LOGGER = logging.getLogger(__name__)


class EnquiryRepositoryProtocol(Protocol):
    def create(self, fields: dict[str, Any]) -> EnquiryRecord:
        """Insert enquiry document."""

    def get_by_id(self, enquiry_id: str) -> EnquiryRecord | None:
        """Return enquiry by id, or ``None``."""

    def list_page(self, *, skip: int, limit: int) -> list[EnquiryRecord]:
        """List enquiries newest first."""

    def count(self) -> int:
        """Count all enquiries."""

    def update_fields(
        self, enquiry_id: str, fields: dict[str, Any]
    ) -> EnquiryRecord | None:
        """Patch enquiry fields and return the updated record."""

    def delete(self, enquiry_id: str) -> EnquiryRecord | None:
        """Delete enquiry and return the removed record."""


class EnquiryService:
    def __init__(self, repo: EnquiryRepositoryProtocol, mailer: MailerProtocol) -> None:
        self._repo = repo
        self._mailer = mailer

    def submit(self, req: EnquiryCreate) -> EnquiryRecord:
        """Store a public enquiry and alert the operator mailbox."""
        raise_for_errors(validate_enquiry(req))
        fields = {
            name: value.strip() if isinstance(value, str) else value
            for name, value in req.model_dump(by_alias=True).items()
        }
        fields["email"] = fields["email"].lower()
        enquiry = self._repo.create(fields)
        LOGGER.info("enquiry_submitted", extra={"resource_id": enquiry.id})
        subject, html_body, text_body = enquiry_notification_message(enquiry)
        self._mailer.send(self._mailer.notify_to, subject, html_body, text_body)
        return enquiry

    def list_enquiries(
        self, page: int | None, limit: int | None
    ) -> Page[EnquiryRecord]:
        request = PageRequest.build(page, limit, default_limit=10)
        items = self._repo.list_page(skip=request.skip, limit=request.limit)
        return Page(
            items=items, pagination=Pagination.from_total(request, self._repo.count())
        )

    def get_enquiry(self, enquiry_id: str) -> EnquiryRecord:
        if not is_object_id(enquiry_id):
            raise bad_request("Invalid enquiry ID")
        enquiry = self._repo.get_by_id(enquiry_id)
        if enquiry is None:
            raise not_found("Enquiry not found")
        return enquiry

    def update_enquiry(self, enquiry_id: str, update: EnquiryUpdate) -> EnquiryRecord:
        existing = self.get_enquiry(enquiry_id)
        if update.quantity_required is not None and update.quantity_required <= 0:
            raise bad_request("quantityRequired must be greater than 0")
        fields = update_to_fields(update)
        if not fields:
            return existing
        updated = self._repo.update_fields(existing.id, fields)
        if updated is None:
            raise not_found("Enquiry not found")
        return updated

    def delete_enquiry(self, enquiry_id: str) -> None:
        existing = self.get_enquiry(enquiry_id)
        if self._repo.delete(existing.id) is None:
            raise not_found("Enquiry not found")
