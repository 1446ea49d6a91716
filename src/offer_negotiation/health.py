"""Health and readiness endpoints for container orchestration.

- ``GET /health`` -- Liveness check.  Returns 200 if the process is alive.
- ``GET /ready``  -- Readiness check.  Returns 200 only when the offers
  database answers a trivial query; 503 with per-check details otherwise.
"""

from __future__ import annotations

import asyncio
import sqlite3
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


def register_health_routes(app: FastAPI) -> None:
    """Register ``/health`` and ``/ready`` endpoints on *app*."""

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness check -- always returns 200 if the process is running."""
        return {"status": "healthy"}

    @app.get("/ready")
    async def ready(request: Request) -> JSONResponse:
        """Readiness check -- checks the offers database."""
        services: dict[str, Any] = request.app.state.services
        checks: dict[str, str] = {}

        offer_store = services.get("offer_store")
        if offer_store is not None:
            try:
                await asyncio.to_thread(offer_store.ping)
                checks["database"] = "ok"
            except sqlite3.Error:
                checks["database"] = "fail"
        else:
            checks["database"] = "fail"

        all_ok = all(v == "ok" for v in checks.values())
        status = "ready" if all_ok else "not_ready"
        code = 200 if all_ok else 503

        return JSONResponse(content={"status": status, "checks": checks}, status_code=code)
