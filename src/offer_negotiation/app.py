"""Application entry point for the rental offer negotiation service.

Configures:
- **structlog** with JSON rendering (production) or colored console (development)
- **Sentry** error reporting through the structlog processor chain
- **SQLite** offer store and history tables
- **FastAPI** with offer routes, domain error handlers, request IDs,
  Prometheus metrics, and health checks
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from offer_negotiation.api import register_error_handlers, router
from offer_negotiation.audit.store import init_offer_events_table
from offer_negotiation.config import Settings, get_settings, validate_settings
from offer_negotiation.health import register_health_routes
from offer_negotiation.observability.metrics import setup_metrics
from offer_negotiation.observability.middleware import RequestContextMiddleware
from offer_negotiation.observability.sentry import get_sentry_processor, init_sentry
from offer_negotiation.service import OfferNegotiationService
from offer_negotiation.state.schema import close_database, init_offer_table, open_database
from offer_negotiation.state.store import OfferStore

logger = structlog.get_logger()


def configure_logging(production: bool = False, sentry_enabled: bool = False) -> None:
    """Configure structlog for production (JSON) or development (console).

    Production mode: JSON rendering at INFO level.
    Development mode: colored console rendering at DEBUG level.

    Args:
        production: Enable production mode if ``True``.
        sentry_enabled: Forward ERROR events to Sentry if ``True``.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
    ]
    if sentry_enabled:
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

    structlog.contextvars.bind_contextvars(service="offer-negotiation")


def initialize_services(settings: Settings | None = None) -> dict[str, Any]:
    """Open the database and build the store and negotiation service.

    Args:
        settings: Application settings.  If ``None``, ``get_settings()`` is used.

    Returns:
        A dict of initialized service instances keyed by name.
    """
    if settings is None:
        settings = get_settings()

    services: dict[str, Any] = {}

    db_path = settings.database_path
    if str(db_path) != ":memory:":
        db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = open_database(db_path)
    init_offer_table(conn)
    init_offer_events_table(conn)
    services["db_conn"] = conn
    logger.info("Offers database ready", path=str(db_path))

    offer_store = OfferStore(conn)
    services["offer_store"] = offer_store
    services["negotiation_service"] = OfferNegotiationService(offer_store)

    services["_settings"] = settings
    return services


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager: closes the database connection on shutdown."""
    logger.info("FastAPI application starting")
    yield
    conn = app.state.services.get("db_conn")
    if conn is not None:
        close_database(conn)
        logger.info("Offers database connection closed")


def create_app(services: dict[str, Any]) -> FastAPI:
    """Create the FastAPI app with offer routes, observability, and health checks.

    Args:
        services: The initialized services dict from ``initialize_services``.

    Returns:
        The configured FastAPI application.
    """
    fastapi_app = FastAPI(title="Rental Offer Negotiation", lifespan=lifespan)
    fastapi_app.state.services = services
    fastapi_app.state.settings = services.get("_settings") or get_settings()
    fastapi_app.add_middleware(RequestContextMiddleware)
    fastapi_app.include_router(router)
    register_error_handlers(fastapi_app)
    register_health_routes(fastapi_app)
    setup_metrics(fastapi_app)
    return fastapi_app


async def main() -> None:
    """Main entry point: configure, initialize, and serve over uvicorn."""
    settings = get_settings()
    sentry_dsn = settings.sentry_dsn.get_secret_value()
    init_sentry(
        sentry_dsn,
        production=settings.production,
        identity_header=settings.auth_user_header,
    )
    configure_logging(production=settings.production, sentry_enabled=bool(sentry_dsn))
    logger.info("Application starting")

    validate_settings(settings)

    services = initialize_services(settings)
    fastapi_app = create_app(services)

    config = uvicorn.Config(
        fastapi_app,
        host=settings.http_host,
        port=settings.http_port,
        log_level="info",
    )
    server = uvicorn.Server(config)
    await server.serve()


def run() -> None:
    """Console-script wrapper around :func:`main`."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
