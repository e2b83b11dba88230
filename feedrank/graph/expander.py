"""Second-degree neighbor expansion for network suggestions.

Exactly one hop beyond the viewer's direct connections, not a transitive
closure. Runs once per request, before scoring; the result is an immutable
set shared by every scoring task.
"""

import logging

from feedrank.core.errors import GraphUnavailableError
from feedrank.core.schemas import ViewerContext
from feedrank.graph.store import GraphStore

logger = logging.getLogger(__name__)


def exclusion_set(viewer: ViewerContext) -> frozenset[str]:
    """IDs that must never be suggested: the viewer, their connections and follows."""
    return frozenset({viewer.id}) | viewer.direct_connections | viewer.following


def expand_second_degree(
    direct_connections: frozenset[str],
    exclude: frozenset[str],
    store: GraphStore,
) -> frozenset[str]:
    """Return users connected to any direct connection, minus ``exclude``.

    A viewer with no connections gets an empty set without a store lookup.
    Store I/O failures (OSError, including connection and timeout errors)
    propagate as GraphUnavailableError; they are never treated as "no
    neighbors". Any other exception from the store propagates unwrapped.
    """
    if not direct_connections:
        return frozenset()

    try:
        neighbors = store.neighbors_of(frozenset(direct_connections))
    except GraphUnavailableError:
        logger.warning(
            "Graph store unavailable while expanding %d connections",
            len(direct_connections),
        )
        raise
    except OSError as e:
        logger.warning(
            "Graph store failed while expanding %d connections: %s",
            len(direct_connections), e,
        )
        msg = f"Graph store failed to resolve neighbors: {e}"
        raise GraphUnavailableError(msg, ids_requested=len(direct_connections)) from e

    # Direct connections are excluded even if the caller's exclude set omits them.
    second_degree = frozenset(neighbors) - exclude - direct_connections
    logger.debug(
        "Second-degree expansion: %d connections -> %d neighbors -> %d suggestions",
        len(direct_connections), len(neighbors), len(second_degree),
    )
    return second_degree


def second_degree_for(viewer: ViewerContext, store: GraphStore) -> frozenset[str]:
    """Expand the viewer's own connections with the viewer's exclusion set."""
    return expand_second_degree(viewer.direct_connections, exclusion_set(viewer), store)
