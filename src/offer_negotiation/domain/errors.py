"""Domain-specific exception classes for rental offer negotiation."""

from offer_negotiation.domain.types import MAX_NEGOTIATION_ROUNDS, OfferStatus, Party


class OfferNegotiationError(Exception):
    """Base class for all domain errors in offer negotiation."""

    code = "negotiation_error"


class InvalidTransitionError(OfferNegotiationError):
    """Raised when a command is not legal for the offer's current state.

    Covers acting out of turn (accepting or countering your own proposal) and
    acting on an offer that already reached a terminal status.

    Attributes:
        status: The offer status when the command was attempted.
        command: The rejected command.
        actor: The party that issued the command.
    """

    code = "invalid_transition"

    def __init__(
        self,
        status: OfferStatus,
        command: str,
        actor: Party,
        message: str | None = None,
    ) -> None:
        self.status = status
        self.command = command
        self.actor = actor
        super().__init__(
            message or f"{actor} cannot apply '{command}' to an offer in status '{status}'"
        )


class RoundLimitExceededError(InvalidTransitionError):
    """Raised when a counter-offer is attempted after the final round.

    Attributes:
        negotiation_round: The round the offer had already reached.
    """

    code = "round_limit_exceeded"

    def __init__(
        self, status: OfferStatus, command: str, actor: Party, negotiation_round: int
    ) -> None:
        self.negotiation_round = negotiation_round
        super().__init__(
            status,
            command,
            actor,
            f"Negotiation limit reached: {negotiation_round} of "
            f"{MAX_NEGOTIATION_ROUNDS} rounds already used",
        )


class ConcurrentModificationError(OfferNegotiationError):
    """Raised when an offer changed between the read and the conditional write.

    The caller must reload the offer and re-evaluate; the stale decision is
    never replayed against the new data.

    Attributes:
        offer_id: The offer whose write was refused.
        expected_status: Status the decision was based on.
        expected_round: Negotiation round the decision was based on.
    """

    code = "concurrent_modification"

    def __init__(
        self, offer_id: str, expected_status: OfferStatus, expected_round: int
    ) -> None:
        self.offer_id = offer_id
        self.expected_status = expected_status
        self.expected_round = expected_round
        super().__init__(
            f"Offer '{offer_id}' was modified concurrently "
            f"(expected status '{expected_status}' at round {expected_round}); "
            "reload the offer and decide again"
        )


class OfferNotFoundError(OfferNegotiationError):
    """Raised when no offer exists for the given id."""

    code = "not_found"

    def __init__(self, offer_id: str) -> None:
        self.offer_id = offer_id
        super().__init__(f"Offer '{offer_id}' not found")


class NotAPartyError(OfferNegotiationError):
    """Raised when a user who is neither client nor owner acts on an offer."""

    code = "not_a_party"

    def __init__(self, offer_id: str, user_id: str) -> None:
        self.offer_id = offer_id
        self.user_id = user_id
        super().__init__(f"User '{user_id}' is not a party to offer '{offer_id}'")


class PersistenceError(OfferNegotiationError):
    """Raised when the offer store fails unexpectedly; no partial write survives."""

    code = "persistence_failure"
