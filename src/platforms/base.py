"""Abstract base class for candidate-URL feeds."""

from abc import ABC, abstractmethod

from pydantic import BaseModel

from src.core.schemas import SearchResult
from src.profile.schema import CandidateProfile


class ExecutedQuery(BaseModel):
    """A query a feed actually ran, kept so the caller can log it."""

    query: str
    site: str = ""
    results_count: int = 0


class CandidateFeed(ABC):
    """Base class that every URL feed must implement."""

    def __init__(self) -> None:
        self.executed_queries: list[ExecutedQuery] = []

    @property
    @abstractmethod
    def feed_id(self) -> str:
        """Unique identifier for this feed (e.g. 'google')."""

    @abstractmethod
    async def search(self, profile: CandidateProfile) -> list[SearchResult]:
        """Return candidate job URLs for the profile, in feed order."""
