"""Signal extraction: one non-negative contribution per named signal.

Each extractor returns an ordered dict of signal name to weighted
contribution for a single (viewer, candidate) pair. Missing data on either
side contributes 0.0 and never raises. ``now`` is always passed in; nothing
here reads the clock.

Signal sets per mode:
  job    — skill_overlap, location_affinity, experience_fit, graph_proximity,
           recency, verification_trust, popularity
  person — skill_overlap, location_affinity, graph_proximity, industry_match,
           role_complementarity, recency, verification_trust
  feed   — social_engagement, author_proximity, freshness, media
"""

from collections.abc import Iterable
from datetime import datetime, timedelta

from feedrank.core.config import WeightsConfig
from feedrank.core.schemas import (
    JobCandidate,
    Location,
    PersonCandidate,
    PostCandidate,
    Role,
    ViewerContext,
    ensure_aware,
)

SKILL_OVERLAP = "skill_overlap"
LOCATION_AFFINITY = "location_affinity"
EXPERIENCE_FIT = "experience_fit"
GRAPH_PROXIMITY = "graph_proximity"
INDUSTRY_MATCH = "industry_match"
ROLE_COMPLEMENTARITY = "role_complementarity"
RECENCY = "recency"
VERIFICATION_TRUST = "verification_trust"
POPULARITY = "popularity"
SOCIAL_ENGAGEMENT = "social_engagement"
AUTHOR_PROXIMITY = "author_proximity"
FRESHNESS = "freshness"
MEDIA = "media"

JOB_SIGNALS = (
    SKILL_OVERLAP,
    LOCATION_AFFINITY,
    EXPERIENCE_FIT,
    GRAPH_PROXIMITY,
    RECENCY,
    VERIFICATION_TRUST,
    POPULARITY,
)
PERSON_SIGNALS = (
    SKILL_OVERLAP,
    LOCATION_AFFINITY,
    GRAPH_PROXIMITY,
    INDUSTRY_MATCH,
    ROLE_COMPLEMENTARITY,
    RECENCY,
    VERIFICATION_TRUST,
)
FEED_SIGNALS = (SOCIAL_ENGAGEMENT, AUTHOR_PROXIMITY, FRESHNESS, MEDIA)


def extract_job_signals(
    viewer: ViewerContext,
    job: JobCandidate,
    weights: WeightsConfig,
    now: datetime,
) -> dict[str, float]:
    """Compute the job signal set for one job."""
    w = weights.job
    job_terms = _normalize_all(job.required_skills) | _normalize_all(job.keywords)
    matches = len(_normalize_all(viewer.skills) & job_terms)

    located = _same_place(viewer.location, job.location) or job.location.is_remote

    return {
        SKILL_OVERLAP: matches * w.skill_match,
        LOCATION_AFFINITY: w.location_match if located else 0.0,
        EXPERIENCE_FIT: w.experience_fit if _experience_fits(viewer, job) else 0.0,
        GRAPH_PROXIMITY: (
            w.posted_by_connection
            if job.posted_by is not None and job.posted_by in viewer.direct_connections
            else 0.0
        ),
        RECENCY: (
            w.recent
            if _within(job.created_at, now, timedelta(days=weights.windows.job_days))
            else 0.0
        ),
        VERIFICATION_TRUST: w.verified if job.is_verified else 0.0,
        POPULARITY: job.view_count / 100 * w.popularity_per_100_views,
    }


def extract_person_signals(
    viewer: ViewerContext,
    person: PersonCandidate,
    weights: WeightsConfig,
    now: datetime,
    second_degree: frozenset[str] = frozenset(),
) -> dict[str, float]:
    """Compute the person signal set for one suggested user.

    ``second_degree`` is the already-expanded neighbor set for the viewer; it is
    read, never recomputed here.
    """
    w = weights.person
    matches = len(_normalize_all(viewer.skills) & _normalize_all(person.skills))

    return {
        SKILL_OVERLAP: matches * w.skill_match,
        LOCATION_AFFINITY: w.location_match if _same_place(viewer.location, person.location) else 0.0,
        GRAPH_PROXIMITY: w.second_degree if person.id in second_degree else 0.0,
        INDUSTRY_MATCH: (
            w.industry_match if _same_text(viewer.industry, person.industry) else 0.0
        ),
        ROLE_COMPLEMENTARITY: (
            w.complementary_role
            if _roles_complement(viewer.role, person.role, weights.hiring_roles)
            else 0.0
        ),
        RECENCY: (
            w.recently_active
            if _within(person.last_active_at, now, timedelta(days=weights.windows.person_days))
            else 0.0
        ),
        VERIFICATION_TRUST: w.verified if person.is_identity_verified else 0.0,
    }


def extract_post_signals(
    viewer: ViewerContext,
    post: PostCandidate,
    weights: WeightsConfig,
    now: datetime,
) -> dict[str, float]:
    """Compute the feed signal set for one post."""
    w = weights.feed

    # Connection wins over follow; the two are never summed.
    proximity = 0.0
    if post.author_id is not None:
        if post.author_id in viewer.direct_connections:
            proximity = w.connection_author
        elif post.author_id in viewer.following:
            proximity = w.followed_author

    return {
        SOCIAL_ENGAGEMENT: post.like_count * w.per_like + post.comment_count * w.per_comment,
        AUTHOR_PROXIMITY: proximity,
        FRESHNESS: (
            w.fresh
            if _within(post.created_at, now, timedelta(hours=weights.windows.post_hours))
            else 0.0
        ),
        MEDIA: w.media if post.has_media else 0.0,
    }


# --- Private helpers ---


def _normalize(value: str | None) -> str:
    if not value:
        return ""
    return value.strip().casefold()


def _normalize_all(values: Iterable[str]) -> set[str]:
    return {n for n in (_normalize(v) for v in values) if n}


def _same_text(a: str | None, b: str | None) -> bool:
    """True only when both values are non-blank and equal (case-insensitive)."""
    na, nb = _normalize(a), _normalize(b)
    return bool(na) and na == nb


def _same_place(viewer: Location, candidate: Location) -> bool:
    """City match or state match. Blank fields never match."""
    return _same_text(viewer.city, candidate.city) or _same_text(viewer.state, candidate.state)


def _experience_fits(viewer: ViewerContext, job: JobCandidate) -> bool:
    rng = job.experience_range
    if rng is None:
        return False
    return rng.min <= viewer.experience_years <= rng.max


def _roles_complement(
    viewer_role: Role | None,
    candidate_role: Role | None,
    hiring_roles: list[str],
) -> bool:
    if viewer_role is None or candidate_role is None:
        return False
    if viewer_role is Role.SEEKER:
        return candidate_role.value in hiring_roles
    return viewer_role.value in hiring_roles and candidate_role is Role.SEEKER


def _within(ts: datetime | None, now: datetime, window: timedelta) -> bool:
    if ts is None:
        return False
    return ts >= ensure_aware(now) - window
