"""Tests for domain error codes and messages."""

import pytest

from offer_negotiation.domain.errors import (
    ConcurrentModificationError,
    InvalidTransitionError,
    NotAPartyError,
    OfferNegotiationError,
    OfferNotFoundError,
    PersistenceError,
    RoundLimitExceededError,
)
from offer_negotiation.domain.types import OfferStatus, Party


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (InvalidTransitionError(OfferStatus.PENDING, "accept", Party.CLIENT), "invalid_transition"),
        (
            RoundLimitExceededError(OfferStatus.COUNTERED, "counter_offer", Party.OWNER, 3),
            "round_limit_exceeded",
        ),
        (ConcurrentModificationError("offer-1", OfferStatus.PENDING, 0), "concurrent_modification"),
        (OfferNotFoundError("offer-1"), "not_found"),
        (NotAPartyError("offer-1", "stranger"), "not_a_party"),
        (PersistenceError("disk full"), "persistence_failure"),
    ],
)
def test_codes(error: OfferNegotiationError, code: str) -> None:
    assert isinstance(error, OfferNegotiationError)
    assert error.code == code


def test_round_limit_message() -> None:
    error = RoundLimitExceededError(OfferStatus.COUNTERED, "counter_offer", Party.OWNER, 3)
    assert str(error) == "Negotiation limit reached: 3 of 3 rounds already used"


def test_concurrent_modification_tells_caller_to_reload() -> None:
    error = ConcurrentModificationError("offer-1", OfferStatus.COUNTERED, 2)
    assert error.expected_round == 2
    assert "reload the offer" in str(error)


def test_default_invalid_transition_message() -> None:
    error = InvalidTransitionError(OfferStatus.PENDING, "accept", Party.CLIENT)
    assert str(error) == "client cannot apply 'accept' to an offer in status 'pending'"
