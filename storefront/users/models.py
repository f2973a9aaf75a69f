"""Request records for self-service account endpoints."""

from __future__ import annotations

import re

from storefront.auth.models import ChangePasswordRequest, UpdateAccountRequest
from storefront.core.documents import CamelModel

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
USERNAME_RE = re.compile(r"^[a-z0-9_.-]{3,30}$")


class RegisterRequest(CamelModel):
    """Registration form fields (files are handled separately)."""

    full_name: str = ""
    email: str = ""
    username: str = ""
    password: str = ""


def validate_registration(req: RegisterRequest) -> list[str]:
    """Return validation errors for a registration form."""
    fields = (req.full_name, req.email, req.username, req.password)
    if any(not value.strip() for value in fields):
        return ["All fields are required"]
    errors: list[str] = []
    if not EMAIL_RE.match(req.email.strip()):
        errors.append("Email is invalid")
    if not USERNAME_RE.match(req.username.strip().lower()):
        errors.append(
            "Username must be 3-30 characters of letters, digits, '.', '_' or '-'"
        )
    return errors


def validate_account_update(req: UpdateAccountRequest) -> list[str]:
    errors: list[str] = []
    if not req.full_name.strip() or not req.email.strip():
        errors.append("fullName and email are required")
    elif not EMAIL_RE.match(req.email.strip()):
        errors.append("Email is invalid")
    return errors


def validate_password_change(req: ChangePasswordRequest) -> list[str]:
    if req.new_password != req.conf_password:
        return ["New password and confirm password do not match"]
    return []
