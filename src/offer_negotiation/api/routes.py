"""FastAPI routes for rental offer negotiation.

Commands resolve the caller's party from the authenticated user id before
touching the offer.  Store access is synchronous SQLite, so every service
call runs in a worker thread via ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Request

from offer_negotiation.api.auth import get_current_user_id
from offer_negotiation.api.schemas import (
    CounterOfferRequest,
    OfferEventResponse,
    OfferResponse,
    RejectRequest,
)
from offer_negotiation.domain.types import OfferStatus
from offer_negotiation.service import OfferNegotiationService

router = APIRouter(prefix="/api/offers", tags=["offers"])

UserId = Annotated[str, Depends(get_current_user_id)]


def get_negotiation_service(request: Request) -> OfferNegotiationService:
    """FastAPI dependency returning the shared negotiation service."""
    service: OfferNegotiationService = request.app.state.services["negotiation_service"]
    return service


Service = Annotated[OfferNegotiationService, Depends(get_negotiation_service)]


@router.get("", response_model=list[OfferResponse])
async def list_offers(
    user_id: UserId,
    service: Service,
    status: OfferStatus | None = None,
) -> list[OfferResponse]:
    """List offers where the caller is the client or the owner."""
    offers = await asyncio.to_thread(service.list_offers, user_id, status)
    responses: list[OfferResponse] = []
    for offer in offers:
        party = offer.party_of(user_id)
        if party is not None:
            responses.append(OfferResponse.from_offer(offer, party))
    return responses


@router.get("/{offer_id}", response_model=OfferResponse)
async def get_offer(offer_id: str, user_id: UserId, service: Service) -> OfferResponse:
    """Return one offer to either of its parties."""
    offer, party = await asyncio.to_thread(service.resolve_actor, offer_id, user_id)
    return OfferResponse.from_offer(offer, party)


@router.get("/{offer_id}/history", response_model=list[OfferEventResponse])
async def get_offer_history(
    offer_id: str, user_id: UserId, service: Service
) -> list[OfferEventResponse]:
    """Return the negotiation history of one offer, oldest first."""
    await asyncio.to_thread(service.resolve_actor, offer_id, user_id)
    rows = await asyncio.to_thread(service.offer_history, offer_id)
    return [OfferEventResponse.from_row(row) for row in rows]


@router.post("/{offer_id}/accept", response_model=OfferResponse)
async def accept_offer(offer_id: str, user_id: UserId, service: Service) -> OfferResponse:
    """Accept the other party's latest proposal."""
    _, actor = await asyncio.to_thread(service.resolve_actor, offer_id, user_id)
    offer = await asyncio.to_thread(service.accept_offer, offer_id, actor)
    return OfferResponse.from_offer(offer, actor)


@router.post("/{offer_id}/reject", response_model=OfferResponse)
async def reject_offer(
    offer_id: str,
    user_id: UserId,
    service: Service,
    body: Annotated[RejectRequest | None, Body()] = None,
) -> OfferResponse:
    """Reject the offer, optionally with a reason."""
    _, actor = await asyncio.to_thread(service.resolve_actor, offer_id, user_id)
    reason = body.reason if body is not None else None
    offer = await asyncio.to_thread(service.reject_offer, offer_id, actor, reason)
    return OfferResponse.from_offer(offer, actor)


@router.post("/{offer_id}/counter-offer", response_model=OfferResponse)
async def submit_counter_offer(
    offer_id: str,
    body: CounterOfferRequest,
    user_id: UserId,
    service: Service,
) -> OfferResponse:
    """Submit a counter-offer; omitted fields keep their previous values."""
    _, actor = await asyncio.to_thread(service.resolve_actor, offer_id, user_id)
    offer = await asyncio.to_thread(
        service.submit_counter_offer, offer_id, actor, body.to_terms()
    )
    return OfferResponse.from_offer(offer, actor)
