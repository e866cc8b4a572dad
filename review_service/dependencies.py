"""Process-wide service instances and their FastAPI dependencies.

The cache, fetcher and retriever are created once per process on first
use. Tests replace them through ``app.dependency_overrides`` or
``reset_services()``.
"""

from __future__ import annotations

from typing import Optional

from review_service.config import get_settings
from review_service.services.base_fetcher import BaseDocumentFetcher
from review_service.services.crawlbase_fetcher import CrawlbaseFetcher
from review_service.services.review_cache import ReviewCache
from review_service.services.review_retriever import ReviewRetriever

_cache: Optional[ReviewCache] = None
_fetcher: Optional[BaseDocumentFetcher] = None
_retriever: Optional[ReviewRetriever] = None


def get_review_cache() -> ReviewCache:
    """Return the process-wide review cache."""
    global _cache
    if _cache is None:
        settings = get_settings()
        _cache = ReviewCache(
            ttl_seconds=settings.CACHE_TTL_SECONDS,
            check_period_seconds=settings.CACHE_CHECK_PERIOD_SECONDS,
        )
    return _cache


def get_document_fetcher() -> BaseDocumentFetcher:
    """Return the process-wide Crawlbase fetcher."""
    global _fetcher
    if _fetcher is None:
        settings = get_settings()
        _fetcher = CrawlbaseFetcher(
            settings.API_KEY,
            api_url=settings.CRAWLBASE_API_URL,
            timeout=settings.FETCH_TIMEOUT_SECONDS,
        )
    return _fetcher


def get_review_retriever() -> ReviewRetriever:
    """Return the process-wide retriever wired to the cache and fetcher."""
    global _retriever
    if _retriever is None:
        settings = get_settings()
        _retriever = ReviewRetriever(
            get_review_cache(),
            get_document_fetcher(),
            reviews_url_template=settings.REVIEWS_URL_TEMPLATE,
            single_flight=settings.SINGLE_FLIGHT,
        )
    return _retriever


def reset_services() -> None:
    """Drop all instances (useful for tests)."""
    global _cache, _fetcher, _retriever
    _cache = None
    _fetcher = None
    _retriever = None
