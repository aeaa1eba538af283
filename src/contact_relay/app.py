"""Application entry point serving the contact endpoint with FastAPI.

Configures:
- **structlog** with JSON rendering (production) or colored console (development)
- **Sentry** error forwarding when ``SENTRY_DSN`` is set
- **Request IDs** bound into every log line via ``RequestIdMiddleware``
- **Prometheus** metrics on ``/metrics`` and health probes on ``/health``/``/ready``
- **/contact**, which adapts each HTTP request to ``ContactRequestHandler``
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import Response

from contact_relay.config import Settings, get_settings, validate_credentials
from contact_relay.contact.handler import ContactRequestHandler
from contact_relay.contact.models import HttpRequest
from contact_relay.health import register_health_routes
from contact_relay.observability.metrics import setup_metrics
from contact_relay.observability.middleware import SERVICE_NAME, RequestIdMiddleware
from contact_relay.observability.sentry import get_sentry_processor, init_sentry

logger = structlog.get_logger()

# Every method is routed to the handler so it can answer 405 with CORS headers
CONTACT_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def configure_logging(production: bool = False, sentry: bool = False) -> None:
    """Configure structlog for production (JSON) or development (console).

    Production mode (*production=True*): JSON rendering at INFO level.
    Development mode: colored console rendering at DEBUG level.

    Args:
        production: Enable production mode if ``True``.
        sentry: Forward ERROR events to Sentry if ``True``.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
    ]
    if sentry:
        shared_processors.append(get_sentry_processor())
    shared_processors += [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if production:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        log_level = logging.INFO
    else:
        renderer = structlog.dev.ConsoleRenderer()
        log_level = logging.DEBUG

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(service=SERVICE_NAME)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Lifespan context manager for FastAPI startup and shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application.
    """
    settings: Settings = app.state.settings
    logger.info(
        "FastAPI application starting",
        captcha_enabled=settings.captcha_enabled,
        allowed_origins=list(settings.allowed_origins),
    )
    yield
    logger.info("FastAPI application stopped")


def create_app(
    settings: Settings | None = None,
    handler: ContactRequestHandler | None = None,
    enable_metrics: bool = True,
) -> FastAPI:
    """Create the FastAPI app with the contact route, health probes and metrics.

    Args:
        settings: Application settings.  If ``None``, ``get_settings()`` is used.
        handler: The request handler.  Built from *settings* when ``None``.
        enable_metrics: Expose Prometheus metrics on ``/metrics``.

    Returns:
        The configured FastAPI application.
    """
    if settings is None:
        settings = get_settings()

    fastapi_app = FastAPI(title="Contact Relay", lifespan=lifespan)
    fastapi_app.state.settings = settings
    fastapi_app.state.handler = handler or ContactRequestHandler(settings)
    fastapi_app.add_middleware(RequestIdMiddleware)
    register_health_routes(fastapi_app)
    if enable_metrics:
        setup_metrics(fastapi_app)

    @fastapi_app.api_route("/contact", methods=CONTACT_METHODS)
    async def contact(request: Request) -> Response:
        """Adapt the HTTP request to ``ContactRequestHandler``."""
        raw_body = await request.body()
        result = await request.app.state.handler.handle(
            HttpRequest(
                method=request.method,
                headers=dict(request.headers),
                body=raw_body.decode("utf-8", errors="replace"),
                peer_ip=request.client.host if request.client else "",
            )
        )
        return Response(
            content=result.render_body(),
            status_code=result.status_code,
            headers=result.headers,
        )

    return fastapi_app


async def main() -> None:
    """Main entry point: configure logging and serve the app with uvicorn.

    1. Load settings and configure logging/Sentry
    2. Validate delivery credentials
    3. Create the FastAPI app
    4. Serve with uvicorn
    """
    settings = get_settings()
    configure_logging(production=settings.production, sentry=bool(settings.sentry_dsn))
    init_sentry(settings.sentry_dsn, production=settings.production)
    logger.info("Application starting")

    validate_credentials(settings)

    fastapi_app = create_app(settings)

    config = uvicorn.Config(
        fastapi_app,
        host="0.0.0.0",
        port=settings.port,
        log_level="info",
    )
    server = uvicorn.Server(config)
    await server.serve()


def run() -> None:
    """Console-script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
