"""Domain types, models, and errors for rental offer negotiation."""

from offer_negotiation.domain.errors import (
    ConcurrentModificationError,
    InvalidTransitionError,
    NotAPartyError,
    OfferNegotiationError,
    OfferNotFoundError,
    PersistenceError,
    RoundLimitExceededError,
)
from offer_negotiation.domain.models import CounterOfferTerms, Offer
from offer_negotiation.domain.types import (
    ACTIVE_STATUSES,
    MAX_NEGOTIATION_ROUNDS,
    TERMINAL_STATUSES,
    OfferStatus,
    Party,
)

__all__ = [
    "ACTIVE_STATUSES",
    "MAX_NEGOTIATION_ROUNDS",
    "TERMINAL_STATUSES",
    "ConcurrentModificationError",
    "CounterOfferTerms",
    "InvalidTransitionError",
    "NotAPartyError",
    "Offer",
    "OfferNegotiationError",
    "OfferNotFoundError",
    "OfferStatus",
    "Party",
    "PersistenceError",
    "RoundLimitExceededError",
]
