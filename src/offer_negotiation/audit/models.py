"""Offer history models: one event per successful offer mutation."""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

from offer_negotiation.domain.models import Offer
from offer_negotiation.domain.types import OfferStatus, Party


class OfferEventType(StrEnum):
    """Types of events recorded in the offer history."""

    OFFER_CREATED = "offer_created"
    COUNTER_OFFER = "counter_offer"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


_EVENT_FOR_STATUS: dict[OfferStatus, OfferEventType] = {
    OfferStatus.COUNTERED: OfferEventType.COUNTER_OFFER,
    OfferStatus.ACCEPTED: OfferEventType.ACCEPTED,
    OfferStatus.REJECTED: OfferEventType.REJECTED,
}


class OfferEvent(BaseModel):
    """A single history entry for an offer.

    ``from_status`` is empty only for ``offer_created``.  ``amount`` is the
    amount on the table after the event.
    """

    offer_id: str
    event_type: OfferEventType
    actor: Party
    from_status: OfferStatus | None = None
    to_status: OfferStatus
    negotiation_round: int
    amount: Decimal | None = None
    details: dict[str, Any] | None = None

    @classmethod
    def for_creation(cls, offer: Offer) -> OfferEvent:
        """Build the ``offer_created`` event for a freshly submitted offer."""
        return cls(
            offer_id=offer.id,
            event_type=OfferEventType.OFFER_CREATED,
            actor=Party.CLIENT,
            to_status=offer.status,
            negotiation_round=offer.negotiation_round,
            amount=offer.offer_amount,
            details={"notes": offer.notes} if offer.notes else None,
        )

    @classmethod
    def for_transition(cls, before: Offer, after: Offer, actor: Party) -> OfferEvent:
        """Build the event describing the move from *before* to *after*."""
        details: dict[str, Any] | None = None
        if after.status == OfferStatus.COUNTERED:
            details = {
                "services_included": after.counter_offer_services_included,
                "services_excluded": after.counter_offer_services_excluded,
                "notes": after.counter_offer_notes,
            }
        elif after.status == OfferStatus.REJECTED and after.rejection_reason:
            details = {"reason": after.rejection_reason}

        return cls(
            offer_id=after.id,
            event_type=_EVENT_FOR_STATUS[after.status],
            actor=actor,
            from_status=before.status,
            to_status=after.status,
            negotiation_round=after.negotiation_round,
            amount=after.current_amount,
            details=details,
        )
