"""Page/limit arithmetic shared by list endpoints."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, TypeVar

from storefront.core.documents import CamelModel

T = TypeVar("T")

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageRequest:
    """Normalized page request with derived skip offset."""

    page: int
    limit: int

    @classmethod
    def build(cls, page: int | None, limit: int | None, *, default_limit: int = 10):
        normalized_page = page if page and page > 0 else 1
        normalized_limit = limit if limit and limit > 0 else default_limit
        return cls(page=normalized_page, limit=min(normalized_limit, MAX_PAGE_SIZE))

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class Pagination(CamelModel):
    """Pagination block returned next to list items."""

    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool
    limit: int

    @classmethod
    def from_total(cls, request: PageRequest, total_count: int) -> "Pagination":
        total_pages = math.ceil(total_count / request.limit) if total_count else 0
        return cls(
            current_page=request.page,
            total_pages=total_pages,
            total_count=total_count,
            has_next=request.page < total_pages,
            has_prev=request.page > 1,
            limit=request.limit,
        )


class Page(CamelModel, Generic[T]):
    """List payload: items plus pagination block."""

    items: list[T]
    pagination: Pagination
