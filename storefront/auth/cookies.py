"""Session cookie helpers."""

from __future__ import annotations

from typing import Literal

from fastapi import Response

from storefront.core.config import AppConfig


def set_session_cookie(
    response: Response,
    name: str,
    value: str,
    *,
    config: AppConfig,
    max_age: int,
    same_site: Literal["lax", "strict"] = "lax",
) -> None:
    response.set_cookie(
        key=name,
        value=value,
        max_age=max_age,
        httponly=True,
        secure=config.security.is_production,
        samesite=same_site,
        path="/",
    )


def clear_session_cookies(
    response: Response,
    *names: str,
    config: AppConfig,
    same_site: Literal["lax", "strict"] = "lax",
) -> None:
    for name in names:
        response.delete_cookie(
            key=name,
            httponly=True,
            secure=config.security.is_production,
            samesite=same_site,
            path="/",
        )
