"""Tests for the weighted-sum scorer."""

from datetime import datetime, timedelta, timezone

import pytest

from feedrank.core.config import WeightsConfig
from feedrank.core.schemas import (
    JobCandidate,
    JobLocation,
    Location,
    PersonCandidate,
    PostCandidate,
    ViewerContext,
)
from feedrank.pipeline.scorer import extract_signals, score_candidate, score_candidates

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
WEIGHTS = WeightsConfig()


def _job(
    *,
    id: str = "j1",
    skills: set[str] | None = None,
    city: str | None = None,
    views: int = 0,
    days_old: int | None = None,
) -> JobCandidate:
    return JobCandidate(
        id=id,
        required_skills=skills or set(),
        location=JobLocation(city=city),
        view_count=views,
        created_at=NOW - timedelta(days=days_old) if days_old is not None else None,
    )


VIEWER = ViewerContext(
    id="viewer",
    skills={"Sales", "Excel"},
    location=Location(city="Austin", state="TX"),
    experience_years=2,
    direct_connections={"a"},
    following={"b"},
)


class TestScoreCandidate:
    def test_score_is_sum_of_breakdown(self) -> None:
        result = score_candidate(VIEWER, _job(skills={"Sales", "Retail"}, city="Austin"), WEIGHTS, NOW)
        assert result.score == 50.0
        assert result.score == sum(result.breakdown.values())

    def test_breakdown_lists_zero_signals(self) -> None:
        result = score_candidate(VIEWER, _job(), WEIGHTS, NOW)
        assert result.score == 0.0
        assert "experience_fit" in result.breakdown
        assert result.breakdown["experience_fit"] == 0.0

    def test_person_uses_second_degree(self) -> None:
        person = PersonCandidate(id="u9")
        without = score_candidate(VIEWER, person, WEIGHTS, NOW)
        with_sd = score_candidate(VIEWER, person, WEIGHTS, NOW, frozenset({"u9"}))
        assert with_sd.score - without.score == 50.0

    def test_post_connection_author(self) -> None:
        result = score_candidate(VIEWER, PostCandidate(id="p1", author_id="a"), WEIGHTS, NOW)
        assert result.score == 50.0

    def test_same_inputs_same_score(self) -> None:
        job = _job(skills={"Sales"}, city="Austin", views=333, days_old=3)
        first = score_candidate(VIEWER, job, WEIGHTS, NOW)
        second = score_candidate(VIEWER, job, WEIGHTS, NOW)
        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_now_changes_recency_only(self) -> None:
        job = _job(days_old=3)
        today = score_candidate(VIEWER, job, WEIGHTS, NOW)
        later = score_candidate(VIEWER, job, WEIGHTS, NOW + timedelta(days=10))
        assert today.breakdown["recency"] == 15.0
        assert later.breakdown["recency"] == 0.0
        assert today.score - later.score == 15.0

    def test_never_negative(self) -> None:
        for candidate in (_job(), PersonCandidate(id="u2"), PostCandidate(id="p1")):
            result = score_candidate(ViewerContext(id="empty"), candidate, WEIGHTS, NOW)
            assert result.score >= 0.0
            assert all(v >= 0.0 for v in result.breakdown.values())

    def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError, match="Unsupported candidate type"):
            extract_signals(VIEWER, object(), WEIGHTS, NOW)  # type: ignore[arg-type]


class TestScoreCandidates:
    def test_preserves_input_order(self) -> None:
        jobs = [_job(id="low"), _job(id="high", skills={"Sales", "Excel"}), _job(id="mid", city="Austin")]
        scored = score_candidates(VIEWER, jobs, WEIGHTS, NOW)
        assert [s.candidate.id for s in scored] == ["low", "high", "mid"]

    def test_empty_pool(self) -> None:
        assert score_candidates(VIEWER, [], WEIGHTS, NOW) == []

    def test_parallel_matches_sequential(self) -> None:
        jobs = [
            _job(id=f"j{i}", skills={"Sales"} if i % 2 else set(), views=i * 10, days_old=i)
            for i in range(40)
        ]
        sequential = score_candidates(VIEWER, jobs, WEIGHTS, NOW)
        parallel = score_candidates(VIEWER, jobs, WEIGHTS, NOW, max_workers=4)
        assert parallel == sequential
