"""Fixtures for HTTP API tests: an app over an in-memory offers database."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from offer_negotiation.app import create_app, initialize_services
from offer_negotiation.config import Settings
from offer_negotiation.domain.models import Offer


@pytest.fixture
def services() -> Iterator[dict[str, Any]]:
    settings = Settings(_env_file=None, database_path=Path(":memory:"))
    services = initialize_services(settings)
    yield services
    services["db_conn"].close()


@pytest.fixture
def client(services: dict[str, Any]) -> TestClient:
    return TestClient(create_app(services))


@pytest.fixture
def stored(services: dict[str, Any], sample_offer: Offer) -> Offer:
    return services["offer_store"].create(sample_offer)
