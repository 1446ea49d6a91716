"""SQLite connection setup and DDL for offer persistence."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from offer_negotiation.domain.types import MAX_NEGOTIATION_ROUNDS


def open_database(db_path: Path | str) -> sqlite3.Connection:
    """Open the offers database with WAL mode and foreign keys enabled.

    The connection is shared across FastAPI worker threads, so thread
    affinity checks are disabled; ``OfferStore`` serialises access itself.

    Args:
        db_path: Path to the SQLite database file, or ``":memory:"``.

    Returns:
        An open sqlite3.Connection.
    """
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def init_offer_table(conn: sqlite3.Connection) -> None:
    """Create the offers table if it does not already exist.

    Status and round bounds are enforced with CHECK constraints so a buggy
    writer cannot persist an out-of-protocol offer.  Also creates indexes on
    the two party columns for ``list_for_user()`` queries.

    Args:
        conn: An open sqlite3.Connection.
    """
    conn.execute(f"""
        CREATE TABLE IF NOT EXISTS offers (
            id TEXT PRIMARY KEY,
            property_id TEXT NOT NULL,
            client_id TEXT NOT NULL,
            owner_id TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'pending'
                CHECK (status IN ('pending', 'countered', 'accepted', 'rejected')),
            offer_amount TEXT NOT NULL,
            counter_offer_amount TEXT,
            counter_offer_services_included TEXT,
            counter_offer_services_excluded TEXT,
            counter_offer_notes TEXT,
            last_offered_by TEXT NOT NULL DEFAULT 'client'
                CHECK (last_offered_by IN ('client', 'owner')),
            negotiation_round INTEGER NOT NULL DEFAULT 0
                CHECK (negotiation_round BETWEEN 0 AND {MAX_NEGOTIATION_ROUNDS}),
            rejection_reason TEXT,
            notes TEXT,
            created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
            updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
        )
    """)

    conn.execute("CREATE INDEX IF NOT EXISTS idx_offers_client ON offers (client_id)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_offers_owner ON offers (owner_id)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_offers_status ON offers (status)")

    conn.commit()


def close_database(conn: sqlite3.Connection) -> None:
    """Close the offers database connection."""
    conn.close()
