"""Process-level routes: liveness probe."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone

from fastapi import FastAPI

from storefront.api.contracts import ApiResponse, HealthResponse, ok


@dataclass
class HealthProbe:
    """Reports uptime measured from process start."""

    environment: str
    started_at: float = field(default_factory=time.monotonic)

    def snapshot(self) -> HealthResponse:
        return HealthResponse(
            status="ok",
            timestamp=datetime.now(timezone.utc).isoformat(),
            uptime_seconds=round(time.monotonic() - self.started_at, 3),
            environment=self.environment,
        )


def register_runtime_routes(app: FastAPI, *, probe: HealthProbe) -> None:
    """Register the public health endpoint."""

    @app.get("/api/v1/health", response_model=ApiResponse[HealthResponse])
    def health() -> ApiResponse[HealthResponse]:
        return ok(probe.snapshot(), "API is running")
