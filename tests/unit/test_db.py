"""Tests for the sqlite connection graph: init, add/remove, neighbor lookup."""

import sqlite3

import pytest

from feedrank.core.db import (
    MAX_IDS_PER_QUERY,
    SqliteGraphStore,
    add_connection,
    get_connections,
    init_db,
    remove_connection,
)
from feedrank.core.errors import GraphUnavailableError
from feedrank.core.schemas import ViewerContext
from feedrank.graph.expander import second_degree_for


@pytest.fixture()
def db(tmp_path):  # type: ignore[no-untyped-def]
    """Provide a fresh SQLite connection per test."""
    return init_db(tmp_path / "test.db")


class TestInitDb:
    def test_creates_tables(self, db) -> None:  # type: ignore[no-untyped-def]
        tables = {
            row[0]
            for row in db.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            ).fetchall()
        }
        assert "connections" in tables

    def test_idempotent(self, tmp_path) -> None:  # type: ignore[no-untyped-def]
        """Calling init_db twice on the same path doesn't error."""
        p = tmp_path / "double.db"
        conn1 = init_db(p)
        conn1.close()
        conn2 = init_db(p)
        conn2.close()


class TestAddConnection:
    def test_mutual(self, db) -> None:  # type: ignore[no-untyped-def]
        add_connection(db, "a", "b")
        assert get_connections(db, "a") == {"b"}
        assert get_connections(db, "b") == {"a"}

    def test_readd_updates_status(self, db) -> None:  # type: ignore[no-untyped-def]
        add_connection(db, "a", "b", status="pending")
        add_connection(db, "a", "b", status="accepted")
        rows = db.execute("SELECT status FROM connections").fetchall()
        assert [r["status"] for r in rows] == ["accepted", "accepted"]

    def test_invalid_status(self, db) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(ValueError, match="status must be one of"):
            add_connection(db, "a", "b", status="blocked")

    def test_self_connection_rejected(self, db) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(ValueError, match="themselves"):
            add_connection(db, "a", "a")


class TestRemoveConnection:
    def test_removes_both_directions(self, db) -> None:  # type: ignore[no-untyped-def]
        add_connection(db, "a", "b")
        assert remove_connection(db, "b", "a") is True
        assert get_connections(db, "a") == set()
        assert get_connections(db, "b") == set()

    def test_missing(self, db) -> None:  # type: ignore[no-untyped-def]
        assert remove_connection(db, "a", "b") is False


class TestSqliteGraphStore:
    def test_neighbors_of(self, db) -> None:  # type: ignore[no-untyped-def]
        add_connection(db, "viewer", "A")
        add_connection(db, "A", "B")
        add_connection(db, "A", "C")
        store = SqliteGraphStore(db)
        assert store.neighbors_of(frozenset({"A"})) == {"viewer", "B", "C"}

    def test_empty_ids(self, db) -> None:  # type: ignore[no-untyped-def]
        assert SqliteGraphStore(db).neighbors_of(frozenset()) == set()

    def test_pending_counts_by_default(self, db) -> None:  # type: ignore[no-untyped-def]
        add_connection(db, "A", "B", status="pending")
        assert SqliteGraphStore(db).neighbors_of(frozenset({"A"})) == {"B"}
        assert SqliteGraphStore(db, accepted_only=True).neighbors_of(frozenset({"A"})) == set()

    def test_second_degree_via_sqlite(self, db) -> None:  # type: ignore[no-untyped-def]
        add_connection(db, "viewer", "A")
        add_connection(db, "A", "B")
        add_connection(db, "A", "C")
        viewer = ViewerContext(id="viewer", direct_connections=get_connections(db, "viewer"))
        assert second_degree_for(viewer, SqliteGraphStore(db)) == frozenset({"B", "C"})

    def test_closed_connection_raises_graph_unavailable(self, tmp_path) -> None:  # type: ignore[no-untyped-def]
        conn = init_db(tmp_path / "closed.db")
        conn.close()
        with pytest.raises(GraphUnavailableError, match="connections lookup failed"):
            SqliteGraphStore(conn).neighbors_of(frozenset({"A"}))

    def test_missing_table_raises_graph_unavailable(self) -> None:
        conn = sqlite3.connect(":memory:")
        conn.row_factory = sqlite3.Row
        with pytest.raises(GraphUnavailableError):
            SqliteGraphStore(conn).neighbors_of(frozenset({"A"}))

    def test_more_ids_than_one_query_allows(self, db) -> None:  # type: ignore[no-untyped-def]
        hub_peers = [f"c{i:05d}" for i in range(MAX_IDS_PER_QUERY * 2 + 7)]
        db.executemany(
            "INSERT INTO connections (user_id, peer_id) VALUES (?, ?)",
            [(peer, "hub") for peer in hub_peers] + [(hub_peers[-1], "far")],
        )
        db.commit()
        neighbors = SqliteGraphStore(db).neighbors_of(frozenset(hub_peers))
        assert neighbors == {"hub", "far"}

    def test_batches_respect_accepted_only(self, db) -> None:  # type: ignore[no-untyped-def]
        ids = [f"c{i:05d}" for i in range(MAX_IDS_PER_QUERY + 1)]
        db.executemany(
            "INSERT INTO connections (user_id, peer_id, status) VALUES (?, ?, ?)",
            [(ids[0], "accepted_peer", "accepted"), (ids[-1], "pending_peer", "pending")],
        )
        db.commit()
        store = SqliteGraphStore(db, accepted_only=True)
        assert store.neighbors_of(frozenset(ids)) == {"accepted_peer"}
