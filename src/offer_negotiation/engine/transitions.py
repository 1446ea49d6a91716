"""Command vocabulary and the legality rules of the offer state machine."""

from enum import StrEnum

from offer_negotiation.domain.errors import InvalidTransitionError, RoundLimitExceededError
from offer_negotiation.domain.models import Offer
from offer_negotiation.domain.types import MAX_NEGOTIATION_ROUNDS, OfferStatus, Party


class OfferCommand(StrEnum):
    """Commands a party can issue against an offer."""

    ACCEPT = "accept"
    REJECT = "reject"
    COUNTER_OFFER = "counter_offer"


# Status-level (current_status, command) -> next_status mappings.  Turn and
# round checks are layered on top by ``resolve_transition``.
TRANSITIONS: dict[tuple[OfferStatus, OfferCommand], OfferStatus] = {
    # From PENDING
    (OfferStatus.PENDING, OfferCommand.ACCEPT): OfferStatus.ACCEPTED,
    (OfferStatus.PENDING, OfferCommand.REJECT): OfferStatus.REJECTED,
    (OfferStatus.PENDING, OfferCommand.COUNTER_OFFER): OfferStatus.COUNTERED,
    # From COUNTERED
    (OfferStatus.COUNTERED, OfferCommand.ACCEPT): OfferStatus.ACCEPTED,
    (OfferStatus.COUNTERED, OfferCommand.REJECT): OfferStatus.REJECTED,
    (OfferStatus.COUNTERED, OfferCommand.COUNTER_OFFER): OfferStatus.COUNTERED,
}


def resolve_transition(offer: Offer, command: OfferCommand, actor: Party) -> OfferStatus:
    """Decide whether *actor* may apply *command* to *offer*.

    Checks run in a fixed order: terminal status first, then the round limit
    (counter-offers only), then turn ownership.  Rejection is never gated on
    turn -- either party may withdraw from a live negotiation.

    Args:
        offer: The current offer snapshot.
        command: The requested command.
        actor: The party issuing the command.

    Returns:
        The status the offer moves to if the command is applied.

    Raises:
        RoundLimitExceededError: A counter-offer after the final round.
        InvalidTransitionError: Any other illegal command.
    """
    own_proposal = actor == offer.last_offered_by
    at_round_limit = offer.negotiation_round >= MAX_NEGOTIATION_ROUNDS

    match (offer.status, command, own_proposal):
        case (OfferStatus.ACCEPTED | OfferStatus.REJECTED, _, _):
            raise InvalidTransitionError(
                offer.status,
                command,
                actor,
                f"Offer is already {offer.status}; no further changes are allowed",
            )
        case (_, OfferCommand.COUNTER_OFFER, _) if at_round_limit:
            raise RoundLimitExceededError(offer.status, command, actor, offer.negotiation_round)
        case (_, OfferCommand.ACCEPT, True):
            raise InvalidTransitionError(
                offer.status,
                command,
                actor,
                f"The {actor} cannot accept their own proposal",
            )
        case (_, OfferCommand.COUNTER_OFFER, True):
            raise InvalidTransitionError(
                offer.status,
                command,
                actor,
                f"The {actor} cannot counter their own outstanding proposal; "
                f"waiting for the {actor.other} to respond",
            )
        case (OfferStatus.PENDING | OfferStatus.COUNTERED, _, _) if (
            (offer.status, command) in TRANSITIONS
        ):
            return TRANSITIONS[(offer.status, command)]

    raise InvalidTransitionError(offer.status, command, actor)
