"""SQLite-backed offer store with optimistic concurrency.

Every mutation is a conditional ``UPDATE`` keyed on the status, round and
turn the caller read, and is committed together with its history event in a
single transaction.  A write that matches no row on an existing offer means
somebody else got there first and raises ``ConcurrentModificationError``.
"""

from __future__ import annotations

import sqlite3
import threading
from datetime import UTC, datetime
from typing import Any

import structlog

from offer_negotiation.audit.models import OfferEvent
from offer_negotiation.audit.store import insert_offer_event, query_offer_history
from offer_negotiation.domain.errors import (
    ConcurrentModificationError,
    OfferNotFoundError,
    PersistenceError,
)
from offer_negotiation.domain.models import Offer
from offer_negotiation.domain.types import OfferStatus
from offer_negotiation.state.serializers import offer_from_row, offer_to_row

logger = structlog.get_logger()

_MUTABLE_COLUMNS = (
    "status",
    "counter_offer_amount",
    "counter_offer_services_included",
    "counter_offer_services_excluded",
    "counter_offer_notes",
    "last_offered_by",
    "negotiation_round",
    "rejection_reason",
    "updated_at",
)


class OfferStore:
    """Persist and retrieve ``Offer`` records and their history.

    A single connection is shared between request threads; a lock keeps each
    read or transaction from interleaving with another thread's.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialize with an open database connection.

        Args:
            conn: An open sqlite3.Connection whose database already has the
                  ``offers`` and ``offer_events`` tables.
        """
        self._conn = conn
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def create(self, offer: Offer) -> Offer:
        """Insert a new offer and its ``offer_created`` history event.

        Args:
            offer: The freshly submitted offer.

        Returns:
            The stored offer.

        Raises:
            PersistenceError: If the insert fails (including a duplicate id).
        """
        row = offer_to_row(offer)
        columns = ", ".join(row)
        placeholders = ", ".join("?" for _ in row)

        with self._lock:
            try:
                with self._conn:
                    self._conn.execute(
                        f"INSERT INTO offers ({columns}) VALUES ({placeholders})",
                        tuple(row.values()),
                    )
                    insert_offer_event(self._conn, OfferEvent.for_creation(offer))
            except sqlite3.Error as exc:
                logger.error("offer_insert_failed", offer_id=offer.id, error=str(exc))
                raise PersistenceError(f"Failed to store offer '{offer.id}'") from exc

        logger.info("offer_created", offer_id=offer.id, property_id=offer.property_id)
        return offer

    def save_transition(self, before: Offer, after: Offer, event: OfferEvent) -> Offer:
        """Conditionally persist *after*, provided the row still matches *before*.

        Args:
            before: The snapshot the decision was made against.
            after: The engine's resulting offer.
            event: The history event to append in the same transaction.

        Returns:
            The persisted offer with a refreshed ``updated_at``.

        Raises:
            ConcurrentModificationError: The row changed since *before* was read.
            OfferNotFoundError: The offer no longer exists.
            PersistenceError: Any other storage failure; nothing is written.
        """
        now = datetime.now(tz=UTC).replace(microsecond=0)
        saved = after.model_copy(update={"updated_at": now})
        row = offer_to_row(saved)
        assignments = ", ".join(f"{column} = ?" for column in _MUTABLE_COLUMNS)

        with self._lock:
            try:
                with self._conn:
                    cursor = self._conn.execute(
                        f"""
                        UPDATE offers SET {assignments}
                        WHERE id = ?
                          AND status = ?
                          AND negotiation_round = ?
                          AND last_offered_by = ?
                        """,
                        (
                            *(row[column] for column in _MUTABLE_COLUMNS),
                            before.id,
                            before.status.value,
                            before.negotiation_round,
                            before.last_offered_by.value,
                        ),
                    )
                    if cursor.rowcount == 0:
                        self._raise_for_missed_write(before)
                    insert_offer_event(self._conn, event)
            except sqlite3.Error as exc:
                logger.error("offer_update_failed", offer_id=before.id, error=str(exc))
                raise PersistenceError(f"Failed to update offer '{before.id}'") from exc

        return saved

    def _raise_for_missed_write(self, before: Offer) -> None:
        exists = self._conn.execute(
            "SELECT 1 FROM offers WHERE id = ?", (before.id,)
        ).fetchone()
        if exists is None:
            raise OfferNotFoundError(before.id)
        raise ConcurrentModificationError(before.id, before.status, before.negotiation_round)

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def get(self, offer_id: str) -> Offer:
        """Load one offer by id.

        Raises:
            OfferNotFoundError: If no offer has this id.
        """
        rows = self._select("SELECT * FROM offers WHERE id = ?", (offer_id,))
        if not rows:
            raise OfferNotFoundError(offer_id)
        return offer_from_row(rows[0])

    def list_for_user(
        self,
        user_id: str,
        status: OfferStatus | None = None,
        limit: int = 100,
    ) -> list[Offer]:
        """Load offers where *user_id* is the client or the owner.

        Args:
            user_id: The user whose offers to list.
            status: Only return offers in this status.
            limit: Maximum number of offers (default 100).

        Returns:
            Offers ordered by most recently updated first.
        """
        query = "SELECT * FROM offers WHERE (client_id = ? OR owner_id = ?)"
        params: list[Any] = [user_id, user_id]
        if status is not None:
            query += " AND status = ?"
            params.append(status.value)
        query += " ORDER BY updated_at DESC, id ASC LIMIT ?"
        params.append(limit)

        return [offer_from_row(row) for row in self._select(query, tuple(params))]

    def history(self, offer_id: str, limit: int = 50) -> list[dict[str, Any]]:
        """Return the chronological history events for one offer."""
        with self._lock:
            return query_offer_history(self._conn, offer_id=offer_id, limit=limit)

    def ping(self) -> None:
        """Run a trivial query; raises if the database is unusable."""
        with self._lock:
            self._conn.execute("SELECT 1")

    def _select(self, query: str, params: tuple[Any, ...]) -> list[sqlite3.Row]:
        with self._lock:
            try:
                cursor = self._conn.cursor()
                cursor.row_factory = sqlite3.Row
                return cursor.execute(query, params).fetchall()
            except sqlite3.Error as exc:
                logger.error("offer_read_failed", error=str(exc))
                raise PersistenceError("Failed to read offers") from exc

