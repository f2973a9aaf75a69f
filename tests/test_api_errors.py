from __future__ import annotations

import pytest

from storefront.api.errors import (
    ApiError,
    duplicate_key_message,
    raise_for_errors,
    to_error_payload,
)
from storefront.core.pagination import PageRequest, Pagination


def test_to_error_payload_preserves_structured_detail() -> None:
    payload = to_error_payload(
        {"error_code": "AUTH_TOKEN_INVALID", "message": "Invalid"},
        401,
    )

    assert payload == {"error_code": "AUTH_TOKEN_INVALID", "message": "Invalid"}


def test_to_error_payload_normalizes_plain_string() -> None:
    payload = to_error_payload("boom", 500)

    assert payload == {"error_code": "HTTP_500", "message": "boom"}


def test_raise_for_errors_joins_messages() -> None:
    raise_for_errors([])

    with pytest.raises(ApiError) as exc:
        raise_for_errors(["a is required", "b is invalid"])

    assert exc.value.status_code == 400
    assert exc.value.message == "a is required, b is invalid"


def test_duplicate_key_message_names_the_field() -> None:
    assert (
        duplicate_key_message({"keyPattern": {"email": 1}})
        == "A record with this email already exists"
    )
    assert duplicate_key_message(None) == "Duplicate value violates a unique constraint"


def test_pagination_block_for_middle_page() -> None:
    request = PageRequest.build(2, 10)
    pagination = Pagination.from_total(request, 25)

    assert request.skip == 10
    assert pagination.model_dump() == {
        "currentPage": 2,
        "totalPages": 3,
        "totalCount": 25,
        "hasNext": True,
        "hasPrev": True,
        "limit": 10,
    }


def test_page_request_normalizes_bad_input() -> None:
    request = PageRequest.build(0, 500, default_limit=12)

    assert request.page == 1
    assert request.limit == 100
    assert PageRequest.build(None, None, default_limit=12).limit == 12
    assert Pagination.from_total(request, 0).total_pages == 0
