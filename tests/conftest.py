"""Shared pytest fixtures for the offer negotiation test suite."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from decimal import Decimal
from typing import Any

import pytest

from offer_negotiation.audit.store import init_offer_events_table
from offer_negotiation.domain.models import Offer
from offer_negotiation.service import OfferNegotiationService
from offer_negotiation.state.schema import init_offer_table
from offer_negotiation.state.store import OfferStore

CLIENT_ID = "user-client"
OWNER_ID = "user-owner"


@pytest.fixture
def make_offer() -> Callable[..., Offer]:
    """Factory for offers; keyword arguments override the defaults."""

    def _make(**overrides: Any) -> Offer:
        fields: dict[str, Any] = {
            "id": "offer-1",
            "property_id": "prop-1",
            "client_id": CLIENT_ID,
            "owner_id": OWNER_ID,
            "offer_amount": Decimal("20000"),
        }
        fields.update(overrides)
        return Offer(**fields)

    return _make


@pytest.fixture
def sample_offer(make_offer: Callable[..., Offer]) -> Offer:
    """A new pending offer: 20000 from the client, round 0."""
    return make_offer()


@pytest.fixture
def conn() -> sqlite3.Connection:
    """In-memory SQLite connection with offer tables initialized."""
    connection = sqlite3.connect(":memory:", check_same_thread=False)
    init_offer_table(connection)
    init_offer_events_table(connection)
    return connection


@pytest.fixture
def store(conn: sqlite3.Connection) -> OfferStore:
    """OfferStore backed by the in-memory connection."""
    return OfferStore(conn)


@pytest.fixture
def service(store: OfferStore) -> OfferNegotiationService:
    """Negotiation service over the in-memory store."""
    return OfferNegotiationService(store)
