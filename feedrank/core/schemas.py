"""Core data models for the ranking engine.

All models are frozen: a ViewerContext and its candidate pool are built fresh
per request and never mutated while scoring.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator


def ensure_aware(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so all comparisons are well defined."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


Timestamp = Annotated[datetime, AfterValidator(ensure_aware)]


class Mode(str, Enum):
    """Which call site is ranking: decides the signal set and inclusion policy."""

    JOB = "job"
    PERSON = "person"
    FEED = "feed"


class Role(str, Enum):
    SEEKER = "seeker"
    AGENT = "agent"
    BUSINESS = "business"
    COMPANY = "company"


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    city: str | None = None
    state: str | None = None


class JobLocation(Location):
    is_remote: bool = False


class ExperienceRange(BaseModel):
    """Inclusive range of years of experience a job asks for."""

    model_config = ConfigDict(frozen=True)

    min: int = Field(ge=0)
    max: int = Field(ge=0)


class ViewerContext(BaseModel):
    """Profile snapshot of the user a ranked list is produced for.

    Only ``id`` is required; a viewer with an empty profile is valid and
    simply earns fewer signals.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    skills: frozenset[str] = frozenset()
    location: Location = Field(default_factory=Location)
    experience_years: int = Field(default=0, ge=0)
    direct_connections: frozenset[str] = frozenset()
    following: frozenset[str] = frozenset()
    industry: str | None = None
    role: Role | None = None


class JobCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["job"] = "job"
    id: str
    required_skills: frozenset[str] = frozenset()
    keywords: frozenset[str] = frozenset()
    location: JobLocation = Field(default_factory=JobLocation)
    experience_range: ExperienceRange | None = None
    posted_by: str | None = None
    created_at: Timestamp | None = None
    view_count: int = Field(default=0, ge=0)
    is_verified: bool = False


class PersonCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["person"] = "person"
    id: str
    skills: frozenset[str] = frozenset()
    location: Location = Field(default_factory=Location)
    industry: str | None = None
    role: Role | None = None
    is_identity_verified: bool = False
    last_active_at: Timestamp | None = None


class PostCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["post"] = "post"
    id: str
    author_id: str | None = None
    created_at: Timestamp | None = None
    like_count: int = Field(default=0, ge=0)
    comment_count: int = Field(default=0, ge=0)
    has_media: bool = False


Candidate = Annotated[
    Union[JobCandidate, PersonCandidate, PostCandidate],
    Field(discriminator="kind"),
]

# Candidate kind each mode accepts.
MODE_KINDS: dict[Mode, str] = {
    Mode.JOB: "job",
    Mode.PERSON: "person",
    Mode.FEED: "post",
}


class ScoredCandidate(BaseModel):
    """Wrapper that pairs a frozen candidate with its score and signal breakdown."""

    model_config = ConfigDict(frozen=True)

    candidate: Candidate
    score: float = Field(default=0.0, ge=0.0)
    breakdown: dict[str, float] = Field(default_factory=dict)


class RankRequest(BaseModel):
    """Everything one ranking call needs, supplied by the call site."""

    model_config = ConfigDict(frozen=True)

    viewer: ViewerContext
    candidates: list[Candidate]
    now: Timestamp
    limit: int = Field(default=20, ge=1)
    offset: int = Field(default=0, ge=0)
    mode: Mode

    @model_validator(mode="after")
    def candidates_match_mode(self) -> "RankRequest":
        expected = MODE_KINDS[self.mode]
        for c in self.candidates:
            if c.kind != expected:
                msg = f"{self.mode.value} mode expects '{expected}' candidates, got '{c.kind}' ({c.id})"
                raise ValueError(msg)
        return self


class RankedPage(BaseModel):
    """One page of ranked results."""

    mode: Mode
    items: list[ScoredCandidate] = Field(default_factory=list)
    total_candidates_considered: int = Field(default=0, ge=0)
    total_matched: int = Field(default=0, ge=0)
    limit: int = Field(default=20, ge=1)
    offset: int = Field(default=0, ge=0)
    message: str | None = None
    algorithm: str = ""
