"""Stateless negotiation engine with transition validation."""

from offer_negotiation.engine.machine import (
    accept,
    available_commands,
    counter_offer,
    reject,
)
from offer_negotiation.engine.merge import merge_counter_terms
from offer_negotiation.engine.transitions import (
    TRANSITIONS,
    OfferCommand,
    resolve_transition,
)

__all__ = [
    "TRANSITIONS",
    "OfferCommand",
    "accept",
    "available_commands",
    "counter_offer",
    "merge_counter_terms",
    "reject",
    "resolve_transition",
]
