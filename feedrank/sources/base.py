"""Collaborator interfaces the surrounding application implements."""

from abc import ABC, abstractmethod

from feedrank.core.schemas import Candidate, Mode, ViewerContext


class UserDirectory(ABC):
    """Supplies viewer profiles by ID."""

    @abstractmethod
    def get_viewer(self, viewer_id: str) -> ViewerContext:
        """Return the viewer's profile snapshot.

        A user who has filled in nothing gets a zero-valued ViewerContext,
        not an error.
        """


class CandidateSource(ABC):
    """Supplies the eligible candidate pool for a mode.

    Eligibility (active status, expiry, blocked users, self-exclusion) is
    applied here; the ranking engine does not re-check it.
    """

    @abstractmethod
    def fetch(self, mode: Mode, viewer: ViewerContext) -> list[Candidate]:
        """Return the pool of candidates to score for ``viewer``."""
