"""
Shared fixtures: an in-memory HTTP client serving canned pages.
"""
import json
from typing import Any, Dict, List, Optional, Tuple

import pytest

from core.document import Document
from core.errors import FetchError
from core.settings import CrawlSettings, RateLimitPolicy


class FakeHTTPClient:
    """
    Serves responses by exact URL.

    A response can be a string, an exception instance (raised), or a list of
    those consumed in order (the last one repeats).
    """

    def __init__(self, pages: Optional[Dict[str, Any]] = None):
        self.pages: Dict[str, Any] = dict(pages or {})
        self.calls: List[Tuple[str, Optional[Dict]]] = []

    def urls(self) -> List[str]:
        return [url for url, _ in self.calls]

    async def get_text(self, url: str, headers=None, params=None) -> str:
        self.calls.append((url, params))
        response = self.pages.get(url)
        if isinstance(response, list):
            response = response.pop(0) if len(response) > 1 else response[0]
        if response is None:
            raise FetchError(url, 404)
        if isinstance(response, Exception):
            raise response
        return response

    async def get_json(self, url: str, params=None) -> Any:
        return json.loads(await self.get_text(url, params=params))

    async def get_document(self, url: str) -> Document:
        return Document(await self.get_text(url))


@pytest.fixture
def fake_http():
    return FakeHTTPClient()


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Settings with no rate-limit wait and a temporary dataset file."""
    for name in ("GLASSDOOR_BASE_URL", "GLASSDOOR_PROXY_URL", "GLASSDOOR_MAX_CONCURRENCY"):
        monkeypatch.delenv(name, raising=False)
    crawl_settings = CrawlSettings(output_path=str(tmp_path / "dataset.jsonl"))
    crawl_settings.rate_limit = RateLimitPolicy(wait_seconds=0)
    return crawl_settings
