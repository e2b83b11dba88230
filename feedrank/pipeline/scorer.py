"""Weighted-sum scoring of candidates against a viewer.

The score is the plain sum of the mode's signal contributions, in a fixed
signal order, so identical inputs always give the identical float. The
scorer never filters or sorts.
"""

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from functools import partial

from feedrank.core.config import WeightsConfig
from feedrank.core.schemas import (
    Candidate,
    JobCandidate,
    PersonCandidate,
    PostCandidate,
    ScoredCandidate,
    ViewerContext,
)
from feedrank.pipeline.signals import (
    extract_job_signals,
    extract_person_signals,
    extract_post_signals,
)

logger = logging.getLogger(__name__)


def extract_signals(
    viewer: ViewerContext,
    candidate: Candidate,
    weights: WeightsConfig,
    now: datetime,
    second_degree: frozenset[str] = frozenset(),
) -> dict[str, float]:
    """Dispatch to the signal set matching the candidate's kind."""
    if isinstance(candidate, JobCandidate):
        return extract_job_signals(viewer, candidate, weights, now)
    if isinstance(candidate, PersonCandidate):
        return extract_person_signals(viewer, candidate, weights, now, second_degree)
    if isinstance(candidate, PostCandidate):
        return extract_post_signals(viewer, candidate, weights, now)
    msg = f"Unsupported candidate type: {type(candidate).__name__}"
    raise TypeError(msg)


def score_candidate(
    viewer: ViewerContext,
    candidate: Candidate,
    weights: WeightsConfig,
    now: datetime,
    second_degree: frozenset[str] = frozenset(),
) -> ScoredCandidate:
    """Score a single candidate.

    Args:
        viewer: Profile snapshot of the user being ranked for.
        candidate: Job, person or post to score.
        weights: Per-mode weight tables and recency windows.
        now: Reference time for recency and freshness signals.
        second_degree: Pre-expanded neighbor set (person candidates only).

    Returns:
        ScoredCandidate with the summed score and the per-signal breakdown.
    """
    breakdown = extract_signals(viewer, candidate, weights, now, second_degree)
    score = 0.0
    for contribution in breakdown.values():
        score += contribution
    return ScoredCandidate(candidate=candidate, score=score, breakdown=breakdown)


def score_candidates(
    viewer: ViewerContext,
    candidates: Sequence[Candidate],
    weights: WeightsConfig,
    now: datetime,
    second_degree: frozenset[str] = frozenset(),
    max_workers: int = 1,
) -> list[ScoredCandidate]:
    """Score a pool, preserving input order.

    With ``max_workers > 1`` candidates are scored on a thread pool. Scoring is
    pure, so no synchronization is needed.
    """
    score = partial(
        score_candidate,
        viewer,
        weights=weights,
        now=now,
        second_degree=second_degree,
    )
    if max_workers <= 1 or len(candidates) < 2:
        return [score(c) for c in candidates]

    logger.debug("Scoring %d candidates on %d workers", len(candidates), max_workers)
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(score, candidates))
