"""Orchestrator: wires graph expansion, scoring, and ranking for one request.

Data flow:
  1. Contract check (limit against settings)
  2. I/O phase: second-degree expansion, once (person mode only, needs a graph store)
  3. Scorer → one ScoredCandidate per candidate
  4. Ranker → inclusion policy, sort, slice
  5. RankedPage, with a profile hint when job/person results are empty
"""

import json
import logging
from datetime import datetime

from feedrank.core.config import Settings
from feedrank.core.errors import RankRequestError
from feedrank.core.schemas import Mode, RankedPage, RankRequest
from feedrank.graph.expander import second_degree_for
from feedrank.graph.store import GraphStore
from feedrank.pipeline.ranker import EMPTY_MESSAGES, MODE_POLICIES, rank_scored
from feedrank.pipeline.scorer import score_candidates
from feedrank.sources.base import CandidateSource, UserDirectory

logger = logging.getLogger(__name__)

ALGORITHMS: dict[Mode, str] = {
    Mode.JOB: "smart_recommendations",
    Mode.PERSON: "smart_network_suggestions",
    Mode.FEED: "smart_feed",
}


def rank(
    request: RankRequest,
    settings: Settings | None = None,
    graph_store: GraphStore | None = None,
) -> RankedPage:
    """Rank one request's candidate pool into a page.

    Raises:
        RankRequestError: If the request breaks a settings-level contract.
        GraphUnavailableError: If person-mode expansion cannot reach the graph store.
    """
    settings = settings or Settings()
    mode = request.mode

    # Step 1: Contract checks
    if request.limit > settings.ranking.max_limit:
        msg = f"limit {request.limit} exceeds max_limit {settings.ranking.max_limit}"
        raise RankRequestError(msg)

    # Step 2: I/O phase
    second_degree: frozenset[str] = frozenset()
    if mode is Mode.PERSON:
        if graph_store is None:
            msg = "person mode requires a graph store for second-degree expansion"
            raise RankRequestError(msg)
        second_degree = second_degree_for(request.viewer, graph_store)

    # Step 3: Score
    scored = score_candidates(
        request.viewer,
        request.candidates,
        settings.weights,
        request.now,
        second_degree=second_degree,
        max_workers=settings.ranking.max_workers,
    )

    # Step 4: Rank
    items, matched = rank_scored(scored, MODE_POLICIES[mode], request.limit, request.offset)

    message = EMPTY_MESSAGES.get(mode) if matched == 0 else None

    logger.info(
        "Ranked %s for '%s': %d considered, %d matched, %d returned",
        mode.value, request.viewer.id, len(request.candidates), matched, len(items),
    )

    return RankedPage(
        mode=mode,
        items=items,
        total_candidates_considered=len(request.candidates),
        total_matched=matched,
        limit=request.limit,
        offset=request.offset,
        message=message,
        algorithm=ALGORITHMS[mode],
    )


def rank_for_viewer(
    viewer_id: str,
    mode: Mode,
    directory: UserDirectory,
    source: CandidateSource,
    now: datetime,
    limit: int | None = None,
    offset: int = 0,
    settings: Settings | None = None,
    graph_store: GraphStore | None = None,
) -> RankedPage:
    """Fetch the viewer and candidate pool from collaborators, then rank."""
    settings = settings or Settings()
    viewer = directory.get_viewer(viewer_id)
    candidates = source.fetch(mode, viewer)
    logger.debug("Fetched %d %s candidates for '%s'", len(candidates), mode.value, viewer_id)

    request = RankRequest(
        viewer=viewer,
        candidates=candidates,
        now=now,
        limit=limit if limit is not None else settings.ranking.default_limit,
        offset=offset,
        mode=mode,
    )
    return rank(request, settings, graph_store)


def export_page_json(page: RankedPage, explain: bool = False) -> str:
    """Export a ranked page as a JSON string.

    The signal breakdown is only included when ``explain`` is set.
    """
    items = []
    for s in page.items:
        item: dict[str, object] = {"id": s.candidate.id, "kind": s.candidate.kind, "score": s.score}
        if explain:
            item["breakdown"] = s.breakdown
        items.append(item)

    data = {
        "mode": page.mode.value,
        "algorithm": page.algorithm,
        "total_candidates_considered": page.total_candidates_considered,
        "total_matched": page.total_matched,
        "limit": page.limit,
        "offset": page.offset,
        "message": page.message,
        "items": items,
    }
    return json.dumps(data, indent=2)
