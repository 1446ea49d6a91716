"""Offer persistence package.

Provides the SQLite-backed ``OfferStore`` with conditional writes, the DDL
helpers, and row serialization for ``Offer`` models.
"""

from offer_negotiation.state.schema import close_database, init_offer_table, open_database
from offer_negotiation.state.serializers import offer_from_row, offer_to_row
from offer_negotiation.state.store import OfferStore

__all__ = [
    "OfferStore",
    "close_database",
    "init_offer_table",
    "offer_from_row",
    "offer_to_row",
    "open_database",
]
