"""
Pytest configuration and fixtures for the review service tests.
"""
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest

# Set test environment variables before importing app modules
os.environ.setdefault("API_KEY", "test-crawlbase-token")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from review_service.services.base_fetcher import BaseDocumentFetcher, ReviewFetchError
from review_service.services.review_cache import ReviewCache


FIXTURES_DIR = Path(__file__).parent / "fixtures" / "amazon"


def load_fixture(name: str) -> str:
    with open(FIXTURES_DIR / name, "r", encoding="utf-8") as f:
        return f.read()


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFetcher(BaseDocumentFetcher):
    """Fetcher serving canned pages keyed by URL.

    A page may be an exception instance, which is raised instead.
    """

    def __init__(self, pages: Optional[Dict[str, Union[str, Exception]]] = None):
        self.pages: Dict[str, Union[str, Exception]] = dict(pages or {})
        self.calls: List[str] = []

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        page = self.pages.get(url)
        if page is None:
            raise ReviewFetchError(url)
        if isinstance(page, Exception):
            raise page
        return page


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ReviewCache:
    return ReviewCache(ttl_seconds=86400, check_period_seconds=120, clock=clock)


@pytest.fixture
def reviews_html() -> str:
    return load_fixture("product_reviews.html")


@pytest.fixture
def no_reviews_html() -> str:
    return load_fixture("no_reviews.html")


@pytest.fixture
def make_fetcher():
    """Factory for FakeFetcher instances."""
    return FakeFetcher
