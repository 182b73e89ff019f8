"""Feed that serves a fixed list of URLs (manual runs and test mode)."""

from urllib.parse import urlparse

from src.core.schemas import SearchResult
from src.platforms.base import CandidateFeed
from src.profile.schema import CandidateProfile


class StaticFeed(CandidateFeed):
    def __init__(self, urls: list[str]) -> None:
        super().__init__()
        self._urls = [u.strip() for u in urls if u.strip()]

    @property
    def feed_id(self) -> str:
        return "static"

    async def search(self, profile: CandidateProfile) -> list[SearchResult]:
        return [
            SearchResult(url=u, site=urlparse(u).netloc.removeprefix("www."))
            for u in dict.fromkeys(self._urls)
        ]
