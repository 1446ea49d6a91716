"""``offer-history``: print the negotiation trail stored in the offers database.

Usage::

    offer-history --offer off_123
    offer-history --actor owner --event-type counter_offer --since 7d --format json
    offer-history --from-date 2026-10-01 --to-date 2026-10-19
"""

from __future__ import annotations

import argparse
import json
import re
from collections.abc import Callable
from contextlib import closing
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from offer_negotiation.audit.models import OfferEventType
from offer_negotiation.audit.store import init_offer_events_table, query_offer_history
from offer_negotiation.domain.types import Party
from offer_negotiation.state.schema import open_database

_DURATION = re.compile(r"^(?P<count>\d+)(?P<unit>[hdw])$")
_UNIT_HOURS = {"h": 1, "d": 24, "w": 24 * 7}


def _transition(row: dict[str, Any]) -> str:
    if row.get("from_status"):
        return f"{row['from_status']} -> {row['to_status']}"
    return str(row["to_status"])


# (header, width, cell) for each table column.
COLUMNS: list[tuple[str, int, Callable[[dict[str, Any]], object]]] = [
    ("Timestamp", 20, lambda row: row.get("timestamp")),
    ("Offer", 18, lambda row: row.get("offer_id")),
    ("Event", max(len(e.value) for e in OfferEventType), lambda row: row.get("event_type")),
    ("Actor", max(len(p.value) for p in Party), lambda row: row.get("actor")),
    ("Status", 22, _transition),
    ("Round", 5, lambda row: row.get("negotiation_round")),
    ("Amount", 12, lambda row: row.get("amount")),
]


def build_parser() -> argparse.ArgumentParser:
    """Create the ``offer-history`` argument parser."""
    parser = argparse.ArgumentParser(
        prog="offer-history", description="Query rental offer negotiation history"
    )

    filters = parser.add_argument_group("filters")
    filters.add_argument("--offer", help="only events for this offer id")
    filters.add_argument("--actor", choices=[p.value for p in Party])
    filters.add_argument("--event-type", choices=[e.value for e in OfferEventType])
    filters.add_argument("--from-date", help="earliest timestamp or YYYY-MM-DD (inclusive)")
    filters.add_argument("--to-date", help="latest timestamp or YYYY-MM-DD (whole day included)")
    filters.add_argument(
        "--since",
        "--last",
        dest="since",
        metavar="DURATION",
        help="relative start such as 24h, 7d or 2w; overrides --from-date",
    )

    output = parser.add_argument_group("output")
    output.add_argument(
        "--format", choices=["table", "json"], default="table", dest="output_format"
    )
    output.add_argument("--limit", type=int, default=50)
    output.add_argument("--db", type=Path, default=Path("data/offers.db"))

    return parser


def since_timestamp(duration: str, now: datetime | None = None) -> str:
    """Turn ``24h`` / ``7d`` / ``2w`` into the UTC timestamp that long before *now*.

    Raises:
        ValueError: *duration* is not ``<count><h|d|w>``.
    """
    match = _DURATION.match(duration)
    if match is None:
        raise ValueError(f"Unrecognized duration {duration!r}; expected e.g. 24h, 7d or 2w")
    hours = int(match["count"]) * _UNIT_HOURS[match["unit"]]
    start = (now or datetime.now(tz=UTC)) - timedelta(hours=hours)
    return start.strftime("%Y-%m-%dT%H:%M:%SZ")


def format_table(results: list[dict[str, Any]]) -> str:
    """Render history rows as a fixed-width table, one line per event."""
    if not results:
        return "No results found."

    def fit(value: object, width: int) -> str:
        text = "" if value is None else str(value)
        return text if len(text) <= width else text[: width - 3] + "..."

    header = "  ".join(name.ljust(width) for name, width, _ in COLUMNS)
    lines = [header, "-" * len(header)]
    for row in results:
        lines.append("  ".join(fit(cell(row), width).ljust(width) for _, width, cell in COLUMNS))
    return "\n".join(line.rstrip() for line in lines)


def format_json(results: list[dict[str, Any]]) -> str:
    """Render history rows as a JSON array."""
    return json.dumps(results, indent=2)


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``offer-history`` console script."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        from_date = since_timestamp(args.since) if args.since else args.from_date
    except ValueError as exc:
        parser.error(str(exc))

    args.db.parent.mkdir(parents=True, exist_ok=True)
    with closing(open_database(args.db)) as conn:
        init_offer_events_table(conn)
        results = query_offer_history(
            conn,
            offer_id=args.offer,
            actor=args.actor,
            event_type=args.event_type,
            from_date=from_date,
            to_date=args.to_date,
            limit=args.limit,
        )

    render = format_json if args.output_format == "json" else format_table
    print(render(results))


if __name__ == "__main__":
    main()
