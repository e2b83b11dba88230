"""Exceptions raised by the ranking engine.

Missing profile or candidate data is never an error; only contract
violations and collaborator failures surface here.
"""


class RankingError(Exception):
    """Base class for ranking engine errors."""


class RankRequestError(RankingError, ValueError):
    """The caller broke the request contract (bad limit, missing collaborator)."""


class GraphUnavailableError(RankingError):
    """The graph store could not resolve neighbors. Safe to retry."""

    retryable = True

    def __init__(self, message: str, *, ids_requested: int = 0) -> None:
        super().__init__(message)
        self.ids_requested = ids_requested
