"""Conversion between ``Offer`` models and SQLite rows.

Decimal amounts are stored as strings so no precision is lost, service label
lists as JSON arrays, and timestamps as ISO 8601 UTC strings.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from offer_negotiation.domain.models import Offer

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_timestamp(value: datetime) -> str:
    """Render *value* as an ISO 8601 UTC string with second precision."""
    return value.astimezone(UTC).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    """Parse a string produced by ``format_timestamp``."""
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=UTC)


def _decimal_to_str(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def _labels_to_json(value: list[str] | None) -> str | None:
    return None if value is None else json.dumps(value)


def offer_to_row(offer: Offer) -> dict[str, Any]:
    """Flatten an ``Offer`` into column values for the ``offers`` table.

    Args:
        offer: The offer to serialize.

    Returns:
        A dict keyed by column name.
    """
    return {
        "id": offer.id,
        "property_id": offer.property_id,
        "client_id": offer.client_id,
        "owner_id": offer.owner_id,
        "status": offer.status.value,
        "offer_amount": str(offer.offer_amount),
        "counter_offer_amount": _decimal_to_str(offer.counter_offer_amount),
        "counter_offer_services_included": _labels_to_json(
            offer.counter_offer_services_included
        ),
        "counter_offer_services_excluded": _labels_to_json(
            offer.counter_offer_services_excluded
        ),
        "counter_offer_notes": offer.counter_offer_notes,
        "last_offered_by": offer.last_offered_by.value,
        "negotiation_round": offer.negotiation_round,
        "rejection_reason": offer.rejection_reason,
        "notes": offer.notes,
        "created_at": format_timestamp(offer.created_at),
        "updated_at": format_timestamp(offer.updated_at),
    }


def offer_from_row(row: Mapping[str, Any]) -> Offer:
    """Rebuild an ``Offer`` from an ``offers`` row.

    Args:
        row: A ``sqlite3.Row`` or dict with the ``offers`` columns.

    Returns:
        The validated ``Offer``.
    """
    data = dict(row)
    for column in ("counter_offer_services_included", "counter_offer_services_excluded"):
        if data.get(column) is not None:
            data[column] = json.loads(data[column])
    for column in ("created_at", "updated_at"):
        data[column] = parse_timestamp(data[column])
    return Offer.model_validate(data)
