"""Partial-update merge of counter-offer terms into an offer."""

from __future__ import annotations

from typing import Any

from offer_negotiation.domain.models import CounterOfferTerms, Offer


def merge_counter_terms(offer: Offer, terms: CounterOfferTerms) -> dict[str, Any]:
    """Overlay *terms* on the offer's current counter-offer fields.

    Fields left as ``None`` in *terms* keep whatever the previous counter-offer
    set.  An explicit empty services list clears that list.

    Args:
        offer: The offer whose counter-offer fields are the baseline.
        terms: The newly proposed terms.

    Returns:
        A dict with the four ``counter_offer_*`` fields after the merge.
    """
    return {
        "counter_offer_amount": (
            terms.amount if terms.amount is not None else offer.counter_offer_amount
        ),
        "counter_offer_services_included": (
            terms.services_included
            if terms.services_included is not None
            else offer.counter_offer_services_included
        ),
        "counter_offer_services_excluded": (
            terms.services_excluded
            if terms.services_excluded is not None
            else offer.counter_offer_services_excluded
        ),
        "counter_offer_notes": (
            terms.notes if terms.notes is not None else offer.counter_offer_notes
        ),
    }
