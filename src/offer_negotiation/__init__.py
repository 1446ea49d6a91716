"""Rental offer negotiation service: client/owner counter-offer protocol."""
