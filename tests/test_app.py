"""Tests for the application entry point: logging, service wiring, app assembly."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
import structlog
from fastapi.testclient import TestClient
from structlog_sentry import SentryProcessor

from offer_negotiation.app import configure_logging, create_app, initialize_services
from offer_negotiation.config import Settings
from offer_negotiation.domain.models import Offer
from offer_negotiation.service import OfferNegotiationService
from offer_negotiation.state.store import OfferStore


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Keep cached loggers and processors from leaking between tests."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


def _settings(tmp_path: Path, **overrides: Any) -> Settings:
    values: dict[str, Any] = {"database_path": tmp_path / "offers.db"}
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[call-arg]


class TestConfigureLogging:
    def test_development_uses_console_renderer(self) -> None:
        configure_logging(production=False)
        processors = structlog.get_config()["processors"]
        assert any(isinstance(p, structlog.dev.ConsoleRenderer) for p in processors)

    def test_production_uses_json_renderer(self) -> None:
        configure_logging(production=True)
        processors = structlog.get_config()["processors"]
        assert any(isinstance(p, structlog.processors.JSONRenderer) for p in processors)

    def test_sentry_processor_added_when_enabled(self) -> None:
        configure_logging(production=True, sentry_enabled=True)
        processors = structlog.get_config()["processors"]
        assert any(isinstance(p, SentryProcessor) for p in processors)

    def test_service_bound(self) -> None:
        configure_logging()
        assert structlog.contextvars.get_contextvars()["service"] == "offer-negotiation"


class TestInitializeServices:
    def test_creates_database_and_services(self, tmp_path: Path) -> None:
        db_path = tmp_path / "nested" / "offers.db"
        services = initialize_services(_settings(tmp_path, database_path=db_path))
        try:
            assert db_path.exists()
            assert isinstance(services["offer_store"], OfferStore)
            assert isinstance(services["negotiation_service"], OfferNegotiationService)
            tables = {
                row[0]
                for row in services["db_conn"].execute(
                    "SELECT name FROM sqlite_master WHERE type = 'table'"
                )
            }
            assert {"offers", "offer_events"} <= tables
        finally:
            services["db_conn"].close()

    def test_reinitializing_keeps_existing_offers(
        self, tmp_path: Path, sample_offer: Offer
    ) -> None:
        settings = _settings(tmp_path)
        first = initialize_services(settings)
        first["offer_store"].create(sample_offer)
        first["db_conn"].close()

        second = initialize_services(settings)
        try:
            assert second["offer_store"].get(sample_offer.id) == sample_offer
        finally:
            second["db_conn"].close()


class TestCreateApp:
    def test_routes_registered(self, tmp_path: Path) -> None:
        services = initialize_services(_settings(tmp_path))
        app = create_app(services)
        paths = {route.path for route in app.routes}  # type: ignore[attr-defined]
        assert {
            "/api/offers",
            "/api/offers/{offer_id}",
            "/api/offers/{offer_id}/accept",
            "/api/offers/{offer_id}/reject",
            "/api/offers/{offer_id}/counter-offer",
            "/api/offers/{offer_id}/history",
            "/health",
            "/ready",
            "/metrics",
        } <= paths

    def test_lifespan_closes_database(self, tmp_path: Path) -> None:
        services = initialize_services(_settings(tmp_path))
        with TestClient(create_app(services)) as client:
            assert client.get("/ready").status_code == 200
        assert client.get("/ready").status_code == 503

    def test_custom_identity_header(self, tmp_path: Path, sample_offer: Offer) -> None:
        services = initialize_services(_settings(tmp_path, auth_user_header="X-Remote-User"))
        services["offer_store"].create(sample_offer)
        client = TestClient(create_app(services))

        resp = client.get("/api/offers/offer-1", headers={"X-User-Id": "user-owner"})
        assert resp.status_code == 401
        resp = client.get("/api/offers/offer-1", headers={"X-Remote-User": "user-owner"})
        assert resp.status_code == 200
        services["db_conn"].close()
