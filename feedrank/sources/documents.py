"""Adapters from the application's stored documents to ranking models.

Documents are the JSON shapes the surrounding application stores for users,
jobs and posts (camelCase keys, nested ``location``/``requirements`` objects,
connections as ``{"user": id, "status": ...}`` entries).

Design rules:
  - Missing or malformed optional fields map to the empty value, never raise.
  - Only a missing document id is an error, since nothing can be ranked without it.
  - Unknown roles and unparseable timestamps map to None.
"""

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from feedrank.core.schemas import (
    Candidate,
    ExperienceRange,
    JobCandidate,
    JobLocation,
    Location,
    Mode,
    PersonCandidate,
    PostCandidate,
    Role,
    ViewerContext,
)

logger = logging.getLogger(__name__)

Document = Mapping[str, Any]


def viewer_from_document(doc: Document, accepted_only: bool = False) -> ViewerContext:
    """Build a ViewerContext from a user document.

    Pending connections count unless ``accepted_only`` is set.
    """
    experience = _mapping(doc.get("experience"))
    return ViewerContext(
        id=_require_id(doc),
        skills=_strings(doc.get("skills")),
        location=_location(doc.get("location")),
        experience_years=_non_negative_int(experience.get("years")),
        direct_connections=_connection_ids(doc.get("connections"), accepted_only),
        following=frozenset(
            i for i in (_as_id(v) for v in _list(doc.get("following"))) if i
        ),
        industry=_optional_str(doc.get("industry")),
        role=_role(doc.get("role")),
    )


def job_from_document(doc: Document) -> JobCandidate:
    requirements = _mapping(doc.get("requirements"))
    location = _mapping(doc.get("location"))
    return JobCandidate(
        id=_require_id(doc),
        required_skills=_strings(requirements.get("skills")),
        keywords=_strings(doc.get("searchKeywords")),
        location=JobLocation(
            city=_optional_str(location.get("city")),
            state=_optional_str(location.get("state")),
            is_remote=location.get("isRemote") is True,
        ),
        experience_range=_experience_range(requirements.get("experience")),
        posted_by=_as_id(doc.get("postedBy")),
        created_at=_timestamp(doc.get("createdAt")),
        view_count=_non_negative_int(doc.get("views")),
        is_verified=doc.get("isVerified") is True,
    )


def person_from_document(doc: Document) -> PersonCandidate:
    verification = _mapping(doc.get("verification"))
    return PersonCandidate(
        id=_require_id(doc),
        skills=_strings(doc.get("skills")),
        location=_location(doc.get("location")),
        industry=_optional_str(doc.get("industry")),
        role=_role(doc.get("role")),
        is_identity_verified=verification.get("identity") is True,
        last_active_at=_timestamp(doc.get("lastLogin")),
    )


def post_from_document(doc: Document) -> PostCandidate:
    return PostCandidate(
        id=_require_id(doc),
        author_id=_as_id(doc.get("author")),
        created_at=_timestamp(doc.get("createdAt")),
        like_count=_count(doc.get("likes")),
        comment_count=_count(doc.get("comments")),
        has_media=_count(doc.get("media")) > 0,
    )


_PARSERS = {
    Mode.JOB: job_from_document,
    Mode.PERSON: person_from_document,
    Mode.FEED: post_from_document,
}


def candidate_from_document(mode: Mode, doc: Document) -> Candidate:
    """Parse a document into the candidate type ``mode`` ranks."""
    return _PARSERS[mode](doc)


def candidates_from_documents(mode: Mode, docs: list[Document]) -> list[Candidate]:
    return [candidate_from_document(mode, d) for d in docs]


# --- Private helpers ---


def _require_id(doc: Document) -> str:
    value = _as_id(doc.get("_id", doc.get("id")))
    if value is None:
        msg = "document has no '_id' or 'id'"
        raise ValueError(msg)
    return value


def _as_id(value: Any) -> str | None:
    """Accept plain ids, ``{"$oid": ...}`` and populated ``{"_id": ...}`` refs."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        inner = value.get("$oid", value.get("_id"))
        return _as_id(inner)
    text = str(value).strip()
    return text or None


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple, set, frozenset)) else []


def _strings(value: Any) -> frozenset[str]:
    return frozenset(v.strip() for v in _list(value) if isinstance(v, str) and v.strip())


def _optional_str(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def _non_negative_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, number)


def _count(value: Any) -> int:
    """Length of an embedded array, or a pre-computed count."""
    if isinstance(value, (list, tuple)):
        return len(value)
    return _non_negative_int(value)


def _location(value: Any) -> Location:
    loc = _mapping(value)
    return Location(city=_optional_str(loc.get("city")), state=_optional_str(loc.get("state")))


def _experience_range(value: Any) -> ExperienceRange | None:
    """A missing minimum means "from zero"; a missing maximum never matches."""
    rng = _mapping(value)
    if rng.get("max") is None:
        return None
    return ExperienceRange(
        min=_non_negative_int(rng.get("min")),
        max=_non_negative_int(rng.get("max")),
    )


def _connection_ids(value: Any, accepted_only: bool) -> frozenset[str]:
    ids: set[str] = set()
    for entry in _list(value):
        if isinstance(entry, Mapping) and "user" in entry:
            if accepted_only and entry.get("status") != "accepted":
                continue
            user_id = _as_id(entry.get("user"))
        else:
            user_id = _as_id(entry)
        if user_id:
            ids.add(user_id)
    return frozenset(ids)


def _role(value: Any) -> Role | None:
    try:
        return Role(value)
    except ValueError:
        if value is not None:
            logger.debug("Unknown role %r, ignoring", value)
        return None


def _timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, Mapping):
        return _timestamp(value.get("$date"))
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Unparseable timestamp %r, ignoring", value)
        return None
