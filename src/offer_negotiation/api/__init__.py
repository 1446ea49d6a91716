"""HTTP surface for rental offer negotiation."""

from offer_negotiation.api.errors import register_error_handlers
from offer_negotiation.api.routes import router

__all__ = ["register_error_handlers", "router"]
