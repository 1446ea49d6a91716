"""Offer history: event models, SQLite storage, and a query CLI."""

from offer_negotiation.audit.models import OfferEvent, OfferEventType
from offer_negotiation.audit.store import (
    init_offer_events_table,
    insert_offer_event,
    query_offer_history,
)

__all__ = [
    "OfferEvent",
    "OfferEventType",
    "init_offer_events_table",
    "insert_offer_event",
    "query_offer_history",
]
