"""Pydantic v2 models for offer negotiation domain data."""

from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from offer_negotiation.domain.types import (
    MAX_NEGOTIATION_ROUNDS,
    TERMINAL_STATUSES,
    OfferStatus,
    Party,
)


def _reject_float(v: object) -> object:
    if isinstance(v, float):
        raise ValueError("Use Decimal or string, not float, for monetary values")
    return v


def _dedupe_labels(v: list[str] | None) -> list[str] | None:
    """Strip labels and drop blanks and duplicates, keeping first-seen order."""
    if v is None:
        return None
    seen: dict[str, None] = {}
    for label in v:
        cleaned = label.strip()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC).replace(microsecond=0)


class CounterOfferTerms(BaseModel):
    """The terms a party proposes in a counter-offer.

    Every field is optional: ``None`` means "keep the previous counter-offer
    value" when the terms are merged into an offer.
    """

    model_config = ConfigDict(frozen=True)

    amount: Decimal | None = None
    services_included: list[str] | None = None
    services_excluded: list[str] | None = None
    notes: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def reject_float_inputs(cls, v: object) -> object:
        """Reject float inputs for monetary fields to prevent precision errors."""
        return _reject_float(v)

    @field_validator("amount")
    @classmethod
    def amount_must_be_positive(cls, v: Decimal | None) -> Decimal | None:
        """Ensure a supplied amount is strictly positive."""
        if v is not None and v <= 0:
            raise ValueError("counter-offer amount must be positive")
        return v

    @field_validator("services_included", "services_excluded")
    @classmethod
    def normalize_services(cls, v: list[str] | None) -> list[str] | None:
        return _dedupe_labels(v)


class Offer(BaseModel):
    """A rental offer tracked through the client/owner negotiation lifecycle.

    Instances are immutable: the engine returns a new ``Offer`` for every
    successful transition, so a refused command can never leave a
    half-updated record behind.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    property_id: str
    client_id: str
    owner_id: str
    status: OfferStatus = OfferStatus.PENDING
    offer_amount: Decimal
    counter_offer_amount: Decimal | None = None
    counter_offer_services_included: list[str] | None = None
    counter_offer_services_excluded: list[str] | None = None
    counter_offer_notes: str | None = None
    last_offered_by: Party = Party.CLIENT
    negotiation_round: int = Field(default=0, ge=0, le=MAX_NEGOTIATION_ROUNDS)
    rejection_reason: str | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("offer_amount", "counter_offer_amount", mode="before")
    @classmethod
    def reject_float_inputs(cls, v: object) -> object:
        """Reject float inputs for monetary fields to prevent precision errors."""
        return _reject_float(v)

    @field_validator("offer_amount")
    @classmethod
    def offer_amount_must_be_positive(cls, v: Decimal) -> Decimal:
        """Ensure the original offer amount is strictly positive."""
        if v <= 0:
            raise ValueError("offer_amount must be positive")
        return v

    @field_validator("counter_offer_services_included", "counter_offer_services_excluded")
    @classmethod
    def normalize_services(cls, v: list[str] | None) -> list[str] | None:
        return _dedupe_labels(v)

    @model_validator(mode="after")
    def parties_must_differ(self) -> "Offer":
        """Ensure the client and the owner are different users."""
        if self.client_id == self.owner_id:
            raise ValueError("client_id and owner_id must refer to different users")
        return self

    @model_validator(mode="after")
    def status_matches_round(self) -> "Offer":
        """Reject status/round/turn combinations the negotiation can never reach.

        A pending offer is the client's untouched opening proposal; every
        counter-offer consumes a round.
        """
        if self.status == OfferStatus.PENDING and (
            self.negotiation_round != 0 or self.last_offered_by != Party.CLIENT
        ):
            raise ValueError("a pending offer must be at round 0 with the client's proposal")
        if self.status == OfferStatus.COUNTERED and self.negotiation_round == 0:
            raise ValueError("a countered offer must have used at least one round")
        return self

    @property
    def is_terminal(self) -> bool:
        """Return True once the offer is accepted or rejected."""
        return self.status in TERMINAL_STATUSES

    @property
    def current_amount(self) -> Decimal:
        """Return the amount currently on the table."""
        if self.counter_offer_amount is not None:
            return self.counter_offer_amount
        return self.offer_amount

    @property
    def awaiting(self) -> Party | None:
        """Return the party expected to respond next, or None once terminal."""
        if self.is_terminal:
            return None
        return self.last_offered_by.other

    def party_of(self, user_id: str) -> Party | None:
        """Map a user id onto the party role it holds in this offer."""
        if user_id == self.client_id:
            return Party.CLIENT
        if user_id == self.owner_id:
            return Party.OWNER
        return None
