"""Inclusion policy, total ordering, and pagination of scored candidates.

Order of operations:
  1. Inclusion filter — POSITIVE_ONLY drops score <= 0, ALL keeps everything
  2. Sort             — score desc, timestamp desc (missing last), id asc
  3. Slice            — offset/limit, always after sorting
"""

import logging
from datetime import datetime
from enum import Enum

from feedrank.core.schemas import (
    Candidate,
    JobCandidate,
    Mode,
    PersonCandidate,
    PostCandidate,
    ScoredCandidate,
)

logger = logging.getLogger(__name__)


class InclusionPolicy(str, Enum):
    """Whether zero-scoring candidates appear in the result."""

    POSITIVE_ONLY = "positive_only"
    ALL = "all"


MODE_POLICIES: dict[Mode, InclusionPolicy] = {
    Mode.JOB: InclusionPolicy.POSITIVE_ONLY,
    Mode.PERSON: InclusionPolicy.POSITIVE_ONLY,
    # A feed must never be empty just because engagement is low.
    Mode.FEED: InclusionPolicy.ALL,
}

EMPTY_MESSAGES: dict[Mode, str] = {
    Mode.JOB: "No recommendations found. Try updating your profile with more skills.",
    Mode.PERSON: "No suggestions found. Try updating your profile with more skills and connections.",
}


def candidate_timestamp(candidate: Candidate) -> datetime | None:
    """The timestamp used as the secondary sort key for a candidate."""
    if isinstance(candidate, PersonCandidate):
        return candidate.last_active_at
    if isinstance(candidate, (JobCandidate, PostCandidate)):
        return candidate.created_at
    return None


def sort_key(scored: ScoredCandidate) -> tuple[float, int, float, str]:
    """Ascending key giving score desc, timestamp desc (missing last), id asc."""
    ts = candidate_timestamp(scored.candidate)
    if ts is None:
        return (-scored.score, 1, 0.0, scored.candidate.id)
    return (-scored.score, 0, -ts.timestamp(), scored.candidate.id)


def apply_policy(
    scored: list[ScoredCandidate],
    policy: InclusionPolicy,
) -> list[ScoredCandidate]:
    """Drop candidates the policy excludes."""
    if policy is InclusionPolicy.ALL:
        return list(scored)
    result = [s for s in scored if s.score > 0]
    dropped = len(scored) - len(result)
    if dropped:
        logger.debug("Inclusion policy %s: removed %d zero-score candidates", policy.value, dropped)
    return result


def sort_scored(scored: list[ScoredCandidate]) -> list[ScoredCandidate]:
    return sorted(scored, key=sort_key)


def paginate(items: list[ScoredCandidate], limit: int, offset: int) -> list[ScoredCandidate]:
    """Slice a sorted list. Offsets past the end give an empty page."""
    if limit < 1:
        msg = f"limit must be >= 1, got {limit}"
        raise ValueError(msg)
    if offset < 0:
        msg = f"offset must be >= 0, got {offset}"
        raise ValueError(msg)
    return items[offset:offset + limit]


def offset_for_page(page: int, page_size: int) -> int:
    """Convert a 1-based page number into an offset."""
    if page < 1:
        msg = f"page must be >= 1, got {page}"
        raise ValueError(msg)
    if page_size < 1:
        msg = f"page_size must be >= 1, got {page_size}"
        raise ValueError(msg)
    return (page - 1) * page_size


def rank_scored(
    scored: list[ScoredCandidate],
    policy: InclusionPolicy,
    limit: int,
    offset: int = 0,
) -> tuple[list[ScoredCandidate], int]:
    """Filter, sort, and slice.

    Returns:
        (page items, number of candidates that passed the inclusion policy)
    """
    included = apply_policy(scored, policy)
    ordered = sort_scored(included)
    return paginate(ordered, limit, offset), len(ordered)
