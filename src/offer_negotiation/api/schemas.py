"""Request and response bodies for the offer HTTP API (camelCase on the wire)."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from offer_negotiation.domain.models import CounterOfferTerms, Offer
from offer_negotiation.domain.types import OfferStatus, Party
from offer_negotiation.engine.machine import available_commands


class CamelModel(BaseModel):
    """Base model serialising to camelCase while accepting snake_case too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RejectRequest(CamelModel):
    """Body of ``POST /offers/{id}/reject``."""

    reason: str | None = Field(default=None, max_length=2000)


class CounterOfferRequest(CamelModel):
    """Body of ``POST /offers/{id}/counter-offer``.

    Every field is optional; omitted fields keep the previous counter-offer
    values.  Any acting-party field a client might send is ignored -- the role
    always comes from the authenticated user.
    """

    counter_offer_amount: Decimal | None = Field(default=None, gt=0)
    counter_offer_services_included: list[str] | None = None
    counter_offer_services_excluded: list[str] | None = None
    counter_offer_notes: str | None = Field(default=None, max_length=2000)

    def to_terms(self) -> CounterOfferTerms:
        return CounterOfferTerms(
            amount=self.counter_offer_amount,
            services_included=self.counter_offer_services_included,
            services_excluded=self.counter_offer_services_excluded,
            notes=self.counter_offer_notes,
        )


class OfferResponse(CamelModel):
    """An offer as seen by one of its parties.

    Monetary amounts are rendered as decimal strings to keep exact values.
    """

    id: str
    property_id: str
    client_id: str
    owner_id: str
    status: OfferStatus
    offer_amount: Decimal
    counter_offer_amount: Decimal | None
    counter_offer_services_included: list[str] | None
    counter_offer_services_excluded: list[str] | None
    counter_offer_notes: str | None
    last_offered_by: Party
    negotiation_round: int
    rejection_reason: str | None
    notes: str | None
    created_at: str
    updated_at: str
    current_amount: Decimal
    awaiting: Party | None
    your_role: Party
    available_commands: list[str]

    @classmethod
    def from_offer(cls, offer: Offer, viewer: Party) -> OfferResponse:
        """Render *offer* for the party *viewer*, including their legal commands."""
        return cls(
            **offer.model_dump(exclude={"created_at", "updated_at"}),
            created_at=offer.created_at.isoformat(),
            updated_at=offer.updated_at.isoformat(),
            current_amount=offer.current_amount,
            awaiting=offer.awaiting,
            your_role=viewer,
            available_commands=available_commands(offer, viewer),
        )


class OfferEventResponse(CamelModel):
    """One entry of an offer's negotiation history."""

    timestamp: str
    event_type: str
    actor: Party
    from_status: OfferStatus | None
    to_status: OfferStatus
    negotiation_round: int
    amount: str | None
    details: dict[str, Any] | None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> OfferEventResponse:
        return cls(**{name: row.get(name) for name in cls.model_fields})
