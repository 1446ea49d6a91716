"""Translate domain errors into JSON HTTP responses.

Every error body has the shape ``{"error": <code>, "detail": <message>}`` so
the UI can branch on ``error`` and show ``detail`` verbatim.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from offer_negotiation.api.auth import UnauthenticatedError
from offer_negotiation.domain.errors import (
    ConcurrentModificationError,
    InvalidTransitionError,
    NotAPartyError,
    OfferNegotiationError,
    OfferNotFoundError,
    PersistenceError,
)

logger = structlog.get_logger()

# Checked in order; subclasses must precede their bases.
STATUS_CODES: list[tuple[type[OfferNegotiationError], int]] = [
    (UnauthenticatedError, 401),
    (NotAPartyError, 403),
    (OfferNotFoundError, 404),
    (ConcurrentModificationError, 409),
    (InvalidTransitionError, 412),
    (PersistenceError, 500),
]


def status_for(exc: OfferNegotiationError) -> int:
    """Return the HTTP status code for a domain error."""
    for error_type, status_code in STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 400


async def negotiation_error_handler(
    request: Request, exc: OfferNegotiationError
) -> JSONResponse:
    """Render any ``OfferNegotiationError`` as a JSON error response."""
    status_code = status_for(exc)
    detail = str(exc)
    if isinstance(exc, PersistenceError):
        logger.error("offer_persistence_failure", path=request.url.path, error=detail)
        detail = "The offer could not be saved; no changes were made"
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "detail": detail},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the domain error handler on *app*."""
    app.add_exception_handler(OfferNegotiationError, negotiation_error_handler)
