"""Configuration models and YAML loader for the ranking engine.

Weight tables default to the product's hand-tuned values. Every weight is
non-negative so a config file can never turn a signal into a penalty.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

HIRING_ROLES = ("agent", "business", "company")


class JobWeights(BaseModel):
    """Signal weights for job recommendations."""

    skill_match: float = Field(default=20.0, ge=0.0)
    location_match: float = Field(default=30.0, ge=0.0)
    experience_fit: float = Field(default=25.0, ge=0.0)
    posted_by_connection: float = Field(default=40.0, ge=0.0)
    recent: float = Field(default=15.0, ge=0.0)
    verified: float = Field(default=10.0, ge=0.0)
    popularity_per_100_views: float = Field(default=5.0, ge=0.0)


class PersonWeights(BaseModel):
    """Signal weights for network suggestions."""

    skill_match: float = Field(default=15.0, ge=0.0)
    location_match: float = Field(default=30.0, ge=0.0)
    second_degree: float = Field(default=50.0, ge=0.0)
    industry_match: float = Field(default=25.0, ge=0.0)
    complementary_role: float = Field(default=20.0, ge=0.0)
    recently_active: float = Field(default=5.0, ge=0.0)
    verified: float = Field(default=10.0, ge=0.0)


class FeedWeights(BaseModel):
    """Signal weights for the home feed."""

    per_like: float = Field(default=2.0, ge=0.0)
    per_comment: float = Field(default=3.0, ge=0.0)
    connection_author: float = Field(default=50.0, ge=0.0)
    followed_author: float = Field(default=30.0, ge=0.0)
    fresh: float = Field(default=20.0, ge=0.0)
    media: float = Field(default=10.0, ge=0.0)


class RecencyWindows(BaseModel):
    """How far back a timestamp still counts as recent."""

    job_days: int = Field(default=7, ge=1)
    person_days: int = Field(default=30, ge=1)
    post_hours: int = Field(default=24, ge=1)


class WeightsConfig(BaseModel):
    """Per-mode weight tables plus the shared recency windows."""

    job: JobWeights = Field(default_factory=JobWeights)
    person: PersonWeights = Field(default_factory=PersonWeights)
    feed: FeedWeights = Field(default_factory=FeedWeights)
    windows: RecencyWindows = Field(default_factory=RecencyWindows)
    hiring_roles: list[str] = Field(default_factory=lambda: list(HIRING_ROLES))


class RankingConfig(BaseModel):
    """Request-level limits and scoring parallelism."""

    default_limit: int = Field(default=20, ge=1)
    max_limit: int = Field(default=100, ge=1)
    max_workers: int = Field(default=1, ge=1, le=64)

    @model_validator(mode="after")
    def default_within_max(self) -> "RankingConfig":
        if self.default_limit > self.max_limit:
            msg = "default_limit must not exceed max_limit"
            raise ValueError(msg)
        return self


class DatabaseConfig(BaseModel):
    """Database configuration for the sqlite graph store."""

    path: str = "data/graph.db"


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    weights: WeightsConfig = Field(default_factory=WeightsConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
