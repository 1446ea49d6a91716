"""Sentry error reporting wired through structlog.

``init_sentry`` is a no-op without a DSN.  Reported events never carry the
gateway identity header, so user ids only reach Sentry through the
structured log fields we choose to send.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import sentry_sdk
import structlog
from sentry_sdk.integrations.logging import LoggingIntegration
from structlog_sentry import SentryProcessor


def init_sentry(
    dsn: str, *, production: bool = False, identity_header: str = "X-User-Id"
) -> None:
    """Initialize the Sentry SDK.

    Args:
        dsn: Sentry DSN string.  Empty string disables Sentry.
        production: Report under the ``production`` environment instead of
            ``development``.
        identity_header: Request header stripped from every reported event.
    """
    if not dsn:
        return

    sentry_sdk.init(
        dsn=dsn,
        environment="production" if production else "development",
        traces_sample_rate=0.1,
        send_default_pii=False,
        before_send=_header_scrubber(identity_header),
        integrations=[
            # structlog-sentry reports errors; stop the SDK capturing them twice.
            LoggingIntegration(event_level=None, level=None),
        ],
    )


def _header_scrubber(header: str) -> Callable[[dict[str, Any], dict[str, Any]], dict[str, Any]]:
    lowered = header.lower()

    def before_send(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any]:
        headers = event.get("request", {}).get("headers")
        if isinstance(headers, dict):
            for name in [n for n in headers if n.lower() == lowered]:
                del headers[name]
        return event

    return before_send


def get_sentry_processor() -> structlog.types.Processor:
    """Return a structlog processor that forwards ERROR events to Sentry."""
    return SentryProcessor(event_level=logging.ERROR)
