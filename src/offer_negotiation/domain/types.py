"""Domain enumerations and protocol constants for rental offer negotiation."""

from enum import StrEnum


class OfferStatus(StrEnum):
    """Lifecycle states of a rental offer."""

    PENDING = "pending"
    COUNTERED = "countered"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Party(StrEnum):
    """The two parties allowed to act on an offer."""

    CLIENT = "client"
    OWNER = "owner"

    @property
    def other(self) -> "Party":
        """Return the opposing party."""
        return Party.OWNER if self is Party.CLIENT else Party.CLIENT


# Hard upper bound on counter-offer submissions per offer
MAX_NEGOTIATION_ROUNDS = 3

ACTIVE_STATUSES: frozenset[OfferStatus] = frozenset(
    {OfferStatus.PENDING, OfferStatus.COUNTERED}
)

# Statuses that reject every command -- the offer is frozen.
TERMINAL_STATUSES: frozenset[OfferStatus] = frozenset(
    {OfferStatus.ACCEPTED, OfferStatus.REJECTED}
)
