"""Negotiation API: load an offer, apply a command, persist the result.

``OfferNegotiationService`` is the boundary the HTTP layer talks to.  Each
operation reads one snapshot, asks the pure engine for the next state, and
hands both to ``OfferStore.save_transition`` for a conditional write.  Domain
errors propagate unchanged; a stale snapshot surfaces as
``ConcurrentModificationError`` and is never re-decided here.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog

from offer_negotiation.audit.models import OfferEvent
from offer_negotiation.domain.errors import NotAPartyError, OfferNegotiationError
from offer_negotiation.domain.models import CounterOfferTerms, Offer
from offer_negotiation.domain.types import OfferStatus, Party
from offer_negotiation.engine import machine
from offer_negotiation.engine.transitions import OfferCommand
from offer_negotiation.observability.metrics import OFFER_COMMANDS, OFFERS_CLOSED
from offer_negotiation.state.store import OfferStore

logger = structlog.get_logger()


class OfferNegotiationService:
    """Orchestrates accept / reject / counter-offer against the offer store.

    Args:
        store: The offer store used for reads and conditional writes.
    """

    def __init__(self, store: OfferStore) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def accept_offer(self, offer_id: str, actor: Party) -> Offer:
        """Accept the other party's latest proposal on *offer_id*."""
        return self._apply(
            offer_id,
            actor,
            OfferCommand.ACCEPT,
            lambda offer: machine.accept(offer, actor),
        )

    def reject_offer(self, offer_id: str, actor: Party, reason: str | None = None) -> Offer:
        """Reject *offer_id*; legal for either party until the offer is terminal."""
        return self._apply(
            offer_id,
            actor,
            OfferCommand.REJECT,
            lambda offer: machine.reject(offer, actor, reason),
        )

    def submit_counter_offer(
        self, offer_id: str, actor: Party, terms: CounterOfferTerms
    ) -> Offer:
        """Submit a counter-offer on *offer_id* with partially supplied *terms*.

        Raises:
            RoundLimitExceededError: The final round has already been used.
            InvalidTransitionError: Terminal offer, or *actor* holds the turn.
        """
        return self._apply(
            offer_id,
            actor,
            OfferCommand.COUNTER_OFFER,
            lambda offer: machine.counter_offer(offer, actor, terms),
        )

    def _apply(
        self,
        offer_id: str,
        actor: Party,
        command: OfferCommand,
        decide: Callable[[Offer], Offer],
    ) -> Offer:
        log = logger.bind(offer_id=offer_id, actor=actor.value, command=command.value)

        try:
            before = self._store.get(offer_id)
            after = decide(before)
            saved = self._store.save_transition(
                before, after, OfferEvent.for_transition(before, after, actor)
            )
        except OfferNegotiationError as exc:
            outcome = exc.code
            OFFER_COMMANDS.labels(command=command.value, outcome=outcome).inc()
            log.warning("offer_command_denied", outcome=outcome, reason=str(exc))
            raise

        OFFER_COMMANDS.labels(command=command.value, outcome="ok").inc()
        if saved.is_terminal:
            OFFERS_CLOSED.labels(status=saved.status.value).inc()
        log.info(
            "offer_command_applied",
            from_status=before.status.value,
            to_status=saved.status.value,
            negotiation_round=saved.negotiation_round,
            amount=str(saved.current_amount),
        )
        return saved

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_offer(self, offer_id: str) -> Offer:
        """Load one offer; raises ``OfferNotFoundError`` if missing."""
        return self._store.get(offer_id)

    def resolve_actor(self, offer_id: str, user_id: str) -> tuple[Offer, Party]:
        """Map an authenticated user onto their party role for *offer_id*.

        Party membership never changes after creation, so the role stays valid
        even if the offer is mutated between this call and the command.

        Raises:
            OfferNotFoundError: The offer does not exist.
            NotAPartyError: *user_id* is neither the client nor the owner.
        """
        offer = self._store.get(offer_id)
        party = offer.party_of(user_id)
        if party is None:
            logger.warning("offer_access_denied", offer_id=offer_id, user_id=user_id)
            raise NotAPartyError(offer_id, user_id)
        return offer, party

    def list_offers(self, user_id: str, status: OfferStatus | None = None) -> list[Offer]:
        """List offers where *user_id* is the client or the owner."""
        return self._store.list_for_user(user_id, status=status)

    def offer_history(self, offer_id: str) -> list[dict[str, Any]]:
        """Return the chronological history of *offer_id*."""
        return self._store.history(offer_id)
