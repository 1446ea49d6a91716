"""Caller identity as supplied by the upstream auth gateway.

Authentication itself happens before requests reach this service; the
gateway forwards the verified user id in a trusted header (name configured
by ``Settings.auth_user_header``).  The acting party is then derived from the
offer, never from the request body.
"""

from __future__ import annotations

from fastapi import Request

from offer_negotiation.domain.errors import OfferNegotiationError


class UnauthenticatedError(OfferNegotiationError):
    """Raised when a request arrives without a gateway-supplied user id."""

    code = "unauthenticated"


def get_current_user_id(request: Request) -> str:
    """FastAPI dependency returning the authenticated user id.

    Raises:
        UnauthenticatedError: The identity header is missing or blank.
    """
    header = request.app.state.settings.auth_user_header
    user_id = (request.headers.get(header) or "").strip()
    if not user_id:
        raise UnauthenticatedError(f"Missing {header} header")
    return user_id
