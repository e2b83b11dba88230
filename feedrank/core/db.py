"""SQLite layer for the connection graph used by second-degree expansion."""

import logging
import sqlite3
from pathlib import Path

from feedrank.core.errors import GraphUnavailableError
from feedrank.graph.store import GraphStore

logger = logging.getLogger(__name__)

_CONNECTIONS_TABLE = """
CREATE TABLE IF NOT EXISTS connections (
    user_id     TEXT NOT NULL,
    peer_id     TEXT NOT NULL,
    status      TEXT NOT NULL DEFAULT 'accepted',
    PRIMARY KEY (user_id, peer_id)
);
"""

_PEER_INDEX = "CREATE INDEX IF NOT EXISTS idx_connections_peer ON connections (peer_id);"

CONNECTION_STATUSES = ("pending", "accepted")

# Older SQLite builds cap bound variables at 999 per statement.
MAX_IDS_PER_QUERY = 500


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_CONNECTIONS_TABLE)
    conn.execute(_PEER_INDEX)
    conn.commit()
    return conn


def add_connection(
    conn: sqlite3.Connection,
    user_id: str,
    peer_id: str,
    status: str = "accepted",
) -> None:
    """Store a mutual connection. Re-adding an existing pair updates its status."""
    if status not in CONNECTION_STATUSES:
        msg = f"status must be one of {CONNECTION_STATUSES}, got '{status}'"
        raise ValueError(msg)
    if user_id == peer_id:
        msg = "a user cannot connect to themselves"
        raise ValueError(msg)
    conn.executemany(
        """
        INSERT INTO connections (user_id, peer_id, status)
        VALUES (?, ?, ?)
        ON CONFLICT(user_id, peer_id) DO UPDATE SET status = excluded.status
        """,
        [(user_id, peer_id, status), (peer_id, user_id, status)],
    )
    conn.commit()


def remove_connection(conn: sqlite3.Connection, user_id: str, peer_id: str) -> bool:
    """Delete both directions of a connection. Returns True if anything was removed."""
    cursor = conn.execute(
        """
        DELETE FROM connections
        WHERE (user_id = ? AND peer_id = ?) OR (user_id = ? AND peer_id = ?)
        """,
        (user_id, peer_id, peer_id, user_id),
    )
    conn.commit()
    return cursor.rowcount > 0


def get_connections(conn: sqlite3.Connection, user_id: str) -> set[str]:
    """Return the peers of ``user_id`` regardless of status."""
    rows = conn.execute(
        "SELECT peer_id FROM connections WHERE user_id = ?",
        (user_id,),
    ).fetchall()
    return {row["peer_id"] for row in rows}


class SqliteGraphStore(GraphStore):
    """GraphStore backed by the ``connections`` table.

    Pending connections count as edges, the same as accepted ones, unless
    ``accepted_only`` is set.
    """

    def __init__(self, conn: sqlite3.Connection, accepted_only: bool = False) -> None:
        self._conn = conn
        self._accepted_only = accepted_only

    def neighbors_of(self, ids: frozenset[str]) -> set[str]:
        """Look up neighbors in batches that stay under SQLite's bound-variable limit."""
        if not ids:
            return set()
        ordered = sorted(ids)
        result: set[str] = set()
        try:
            for start in range(0, len(ordered), MAX_IDS_PER_QUERY):
                result |= self._neighbors_batch(ordered[start:start + MAX_IDS_PER_QUERY])
        except sqlite3.Error as e:
            msg = f"connections lookup failed: {e}"
            raise GraphUnavailableError(msg, ids_requested=len(ids)) from e
        logger.debug("neighbors_of: %d ids -> %d neighbors", len(ids), len(result))
        return result

    def _neighbors_batch(self, batch: list[str]) -> set[str]:
        placeholders = ", ".join("?" for _ in batch)
        query = f"SELECT DISTINCT peer_id FROM connections WHERE user_id IN ({placeholders})"
        params = list(batch)
        if self._accepted_only:
            query += " AND status = ?"
            params.append("accepted")
        rows = self._conn.execute(query, params).fetchall()
        return {row["peer_id"] for row in rows}
