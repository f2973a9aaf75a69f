"""Enquiry records and payloads."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from storefront.core.documents import CamelModel, StoredDocument


class EnquiryStatus(StrEnum):
    PENDING = "pending"
    CONTACTED = "contacted"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


class EnquiryRecord(StoredDocument):
    name: str
    email: str
    phone: str
    message: str
    company_name: str
    contact_person: str
    product_category: str
    quantity_required: float
    status: EnquiryStatus = EnquiryStatus.PENDING


class EnquiryCreate(CamelModel):
    """Public enquiry form; every field is required."""

    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: str = Field(min_length=1)
    message: str = Field(min_length=1)
    company_name: str = Field(min_length=1)
    contact_person: str = Field(min_length=1)
    product_category: str = Field(min_length=1)
    quantity_required: float


class EnquiryUpdate(CamelModel):
    """Admin edit; omitted or empty fields keep their stored value."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    message: str | None = None
    company_name: str | None = None
    contact_person: str | None = None
    product_category: str | None = None
    quantity_required: float | None = None
    status: EnquiryStatus | None = None


def validate_enquiry(req: EnquiryCreate) -> list[str]:
    errors = [
        f"{label} is required"
        for label, value in (
            ("name", req.name),
            ("email", req.email),
            ("phone", req.phone),
            ("message", req.message),
            ("companyName", req.company_name),
            ("contactPerson", req.contact_person),
            ("productCategory", req.product_category),
        )
        if not value.strip()
    ]
    if req.quantity_required <= 0:
        errors.append("quantityRequired must be greater than 0")
    return errors


def update_to_fields(update: EnquiryUpdate) -> dict:
    """Keep only supplied, non-empty values as stored field names."""
    fields: dict = {}
    for name, value in update.model_dump(by_alias=True).items():
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        fields[name] = value.strip() if isinstance(value, str) else value
    return fields
