"""SQLite-backed offer history with indexed queries.

Events are inserted inside the caller's transaction -- ``insert_offer_event``
never commits -- so an offer update and its history row land atomically.
Uses parameterized queries exclusively.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import UTC, date, datetime, timedelta
from typing import Any

from offer_negotiation.audit.models import OfferEvent


def init_offer_events_table(conn: sqlite3.Connection) -> None:
    """Create the offer_events table and its indexes if missing.

    Args:
        conn: An open sqlite3.Connection.
    """
    conn.execute("""
        CREATE TABLE IF NOT EXISTS offer_events (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            timestamp TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
            offer_id TEXT NOT NULL,
            event_type TEXT NOT NULL,
            actor TEXT NOT NULL,
            from_status TEXT,
            to_status TEXT NOT NULL,
            negotiation_round INTEGER NOT NULL,
            amount TEXT,
            details TEXT
        )
    """)

    conn.execute("CREATE INDEX IF NOT EXISTS idx_events_offer ON offer_events (offer_id)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_events_timestamp ON offer_events (timestamp)")

    conn.commit()


def insert_offer_event(conn: sqlite3.Connection, event: OfferEvent) -> int:
    """Insert a history event without committing.

    Args:
        conn: An open database connection with a transaction in progress.
        event: The event to record.

    Returns:
        The row ID of the inserted event.
    """
    details_json: str | None = None
    if event.details is not None:
        details_json = json.dumps(event.details)

    timestamp = datetime.now(tz=UTC).strftime("%Y-%m-%dT%H:%M:%SZ")

    cursor = conn.execute(
        """
        INSERT INTO offer_events (
            timestamp, offer_id, event_type, actor, from_status, to_status,
            negotiation_round, amount, details
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            timestamp,
            event.offer_id,
            event.event_type.value,
            event.actor.value,
            event.from_status.value if event.from_status is not None else None,
            event.to_status.value,
            event.negotiation_round,
            str(event.amount) if event.amount is not None else None,
            details_json,
        ),
    )
    return cursor.lastrowid or 0


def query_offer_history(
    conn: sqlite3.Connection,
    *,
    offer_id: str | None = None,
    actor: str | None = None,
    event_type: str | None = None,
    from_date: str | None = None,
    to_date: str | None = None,
    limit: int = 50,
) -> list[dict[str, Any]]:
    """Query offer history with optional filters.

    Results are in chronological order (oldest first) so a single offer's
    negotiation reads top to bottom.

    Args:
        conn: An open database connection.
        offer_id: Filter by offer id.
        actor: Filter by acting party (``client`` or ``owner``).
        event_type: Filter by event type.
        from_date: Entries on or after this ISO 8601 date.
        to_date: Entries on or before this ISO 8601 date-time.  A bare
            ``YYYY-MM-DD`` date includes that whole day.
        limit: Maximum number of results to return (default 50).

    Returns:
        A list of dicts, one per matching event.
    """
    conditions: list[str] = []
    params: list[str | int] = []

    if offer_id is not None:
        conditions.append("offer_id = ?")
        params.append(offer_id)

    if actor is not None:
        conditions.append("actor = ?")
        params.append(actor)

    if event_type is not None:
        conditions.append("event_type = ?")
        params.append(event_type)

    if from_date is not None:
        conditions.append("timestamp >= ?")
        params.append(from_date)

    if to_date is not None:
        if _is_bare_date(to_date):
            # Whole end day: everything before midnight of the following day.
            next_day = date.fromisoformat(to_date) + timedelta(days=1)
            conditions.append("timestamp < ?")
            params.append(next_day.isoformat())
        else:
            conditions.append("timestamp <= ?")
            params.append(to_date)

    where_clause = ""
    if conditions:
        where_clause = "WHERE " + " AND ".join(conditions)

    query = f"SELECT * FROM offer_events {where_clause} ORDER BY id ASC LIMIT ?"
    params.append(limit)

    cursor = conn.cursor()
    cursor.row_factory = sqlite3.Row
    rows = cursor.execute(query, params).fetchall()

    results: list[dict[str, Any]] = []
    for row in rows:
        row_dict = dict(row)
        if row_dict.get("details") is not None:
            row_dict["details"] = json.loads(row_dict["details"])
        results.append(row_dict)

    return results


def _is_bare_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return len(value) == 10
