"""Health and readiness endpoints for container orchestration.

Provides two top-level routes:

- ``GET /health`` -- Liveness probe.  Returns 200 if the process is alive.
- ``GET /ready``  -- Readiness probe.  Returns 200 only when every required
  delivery setting is present.  Returns 503 with per-check details otherwise.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from contact_relay.config import Settings, missing_delivery_settings


def register_health_routes(app: FastAPI) -> None:
    """Register ``/health`` and ``/ready`` endpoints on *app*.

    Args:
        app: The FastAPI application instance.  ``app.state.settings`` must
            hold the application ``Settings``.
    """

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness probe -- always returns 200 if the process is running."""
        return {"status": "healthy"}

    @app.get("/ready")
    async def ready(request: Request) -> JSONResponse:
        """Readiness probe -- checks that delivery configuration is complete."""
        settings: Settings = request.app.state.settings
        missing = missing_delivery_settings(settings)

        checks: dict[str, str] = {
            "delivery_config": "fail" if missing else "ok",
            # Optional feature: reported, but never blocks readiness
            "captcha": "enabled" if settings.captcha_enabled else "disabled",
        }

        all_ok = not missing
        status = "ready" if all_ok else "not_ready"
        code = 200 if all_ok else 503

        return JSONResponse(content={"status": status, "checks": checks}, status_code=code)
