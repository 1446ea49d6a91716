"""Prometheus metrics instrumentation for the offer negotiation service.

Provides:
- ``setup_metrics(app)``: Attach prometheus-fastapi-instrumentator to a FastAPI app,
  exposing ``/metrics`` with HTTP request duration/count plus custom business counters.
- ``OFFER_COMMANDS``: Counter of negotiation commands by command and outcome.
- ``OFFERS_CLOSED``: Counter of offers reaching a terminal status.

Business metrics are updated by the negotiation service as commands resolve.
"""

from __future__ import annotations

from fastapi import FastAPI
from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator

OFFER_COMMANDS: Counter = Counter(
    "offer_commands_total",
    "Negotiation commands processed, by command and outcome",
    ["command", "outcome"],
)

OFFERS_CLOSED: Counter = Counter(
    "offers_closed_total",
    "Offers reaching a terminal status (accepted or rejected)",
    ["status"],
)


def setup_metrics(app: FastAPI) -> None:
    """Instrument *app* with Prometheus HTTP metrics and expose ``/metrics``.

    Excludes health/ready/metrics endpoints from instrumentation to avoid
    noise in dashboards.

    Args:
        app: The FastAPI application to instrument.
    """
    Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=["/health", "/ready", "/metrics"],
    ).instrument(app).expose(app, include_in_schema=False, should_gzip=True)
