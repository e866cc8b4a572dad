"""Business logic services"""

from review_service.services.base_fetcher import BaseDocumentFetcher, ReviewFetchError
from review_service.services.crawlbase_fetcher import CrawlbaseFetcher
from review_service.services.document_view import DocumentView, SoupDocumentView
from review_service.services.review_cache import CacheEntry, CacheStats, ReviewCache
from review_service.services.review_extractor import (
    extract_reviews,
    extract_reviews_from_view,
    truncate_words,
)
from review_service.services.review_retriever import ReviewRetriever

__all__ = [
    "BaseDocumentFetcher",
    "CacheEntry",
    "CacheStats",
    "CrawlbaseFetcher",
    "DocumentView",
    "ReviewCache",
    "ReviewFetchError",
    "ReviewRetriever",
    "SoupDocumentView",
    "extract_reviews",
    "extract_reviews_from_view",
    "truncate_words",
]
