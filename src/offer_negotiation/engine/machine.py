"""Pure negotiation engine: apply accept / reject / counter-offer to an offer.

Every function takes an immutable ``Offer`` snapshot and returns a new one.
Nothing here touches storage; persisting the result (and detecting that the
snapshot went stale) is the caller's job.

Usage::

    offer = counter_offer(offer, Party.OWNER, CounterOfferTerms(amount=Decimal("22000")))
    offer = accept(offer, Party.CLIENT)   # -> ACCEPTED (terminal)
"""

from __future__ import annotations

from offer_negotiation.domain.errors import InvalidTransitionError
from offer_negotiation.domain.models import CounterOfferTerms, Offer
from offer_negotiation.domain.types import Party
from offer_negotiation.engine.merge import merge_counter_terms
from offer_negotiation.engine.transitions import OfferCommand, resolve_transition


def accept(offer: Offer, actor: Party) -> Offer:
    """Accept the other party's most recent proposal.

    Raises:
        InvalidTransitionError: If the offer is terminal or *actor* made the
            proposal being accepted.
    """
    status = resolve_transition(offer, OfferCommand.ACCEPT, actor)
    return offer.model_copy(update={"status": status})


def reject(offer: Offer, actor: Party, reason: str | None = None) -> Offer:
    """Reject the offer, ending the negotiation.

    Either party may reject at any point before the offer is terminal.

    Args:
        offer: The current offer snapshot.
        actor: The rejecting party.
        reason: Optional free-text reason; blank strings are stored as ``None``.

    Returns:
        The rejected offer.

    Raises:
        InvalidTransitionError: If the offer is already terminal.
    """
    status = resolve_transition(offer, OfferCommand.REJECT, actor)
    cleaned = reason.strip() if reason else None
    return offer.model_copy(update={"status": status, "rejection_reason": cleaned or None})


def counter_offer(offer: Offer, actor: Party, terms: CounterOfferTerms) -> Offer:
    """Submit a counter-offer, handing the turn to the other party.

    Args:
        offer: The current offer snapshot.
        actor: The countering party.
        terms: Proposed terms; omitted fields keep their previous values.

    Returns:
        The countered offer with ``negotiation_round`` incremented.

    Raises:
        RoundLimitExceededError: If the round limit has been reached.
        InvalidTransitionError: If the offer is terminal or *actor* already
            holds the outstanding proposal.
    """
    status = resolve_transition(offer, OfferCommand.COUNTER_OFFER, actor)
    return offer.model_copy(
        update={
            **merge_counter_terms(offer, terms),
            "status": status,
            "last_offered_by": actor,
            "negotiation_round": offer.negotiation_round + 1,
        }
    )


def available_commands(offer: Offer, actor: Party) -> list[str]:
    """Return a sorted list of commands *actor* may issue right now.

    Returns an empty list once the offer is terminal.
    """
    allowed: list[str] = []
    for command in OfferCommand:
        try:
            resolve_transition(offer, command, actor)
        except InvalidTransitionError:
            continue
        allowed.append(command.value)
    return sorted(allowed)
