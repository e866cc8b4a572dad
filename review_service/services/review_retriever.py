"""Cache-aside retrieval of product reviews.

For a single ASIN or a pair of ASINs, serve from ``ReviewCache`` when
possible and fetch + extract + cache the missing ones otherwise. When both
ASINs of a pair are missing, the two fetches run concurrently and are
joined before the pair is returned.

Cache writes happen per ASIN as soon as its own fetch completes, so a
pair that fails on one side still caches the side that succeeded.

With ``single_flight`` enabled, concurrent misses for the same ASIN share
one upstream request instead of each issuing their own.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, Tuple
from urllib.parse import quote

from review_service.schemas.review import ProductReviews, Review
from review_service.services.base_fetcher import BaseDocumentFetcher
from review_service.services.review_cache import ReviewCache
from review_service.services.review_extractor import extract_reviews

logger = logging.getLogger(__name__)

DEFAULT_REVIEWS_URL_TEMPLATE = "https://www.amazon.com/product-reviews/{asin}"


class ReviewRetriever:
    """Retrieval orchestrator over a cache, a fetcher and the extractor."""

    def __init__(
        self,
        cache: ReviewCache,
        fetcher: BaseDocumentFetcher,
        *,
        reviews_url_template: str = DEFAULT_REVIEWS_URL_TEMPLATE,
        extractor: Callable[[str], List[Review]] = extract_reviews,
        single_flight: bool = True,
    ) -> None:
        self.cache = cache
        self.fetcher = fetcher
        self.reviews_url_template = reviews_url_template
        self.extractor = extractor
        self.single_flight = single_flight
        self._inflight: Dict[str, asyncio.Task] = {}

    def build_reviews_url(self, asin: str) -> str:
        return self.reviews_url_template.format(asin=quote(asin, safe=""))

    async def _fetch_and_cache(self, asin: str) -> List[Review]:
        html = await self.fetcher.fetch(self.build_reviews_url(asin))
        reviews = self.extractor(html)
        self.cache.set(asin, reviews)
        logger.info("Reviews for ASIN %s fetched and cached (%d reviews)", asin, len(reviews))
        return reviews

    async def _load(self, asin: str) -> List[Review]:
        """Fetch ``asin`` from upstream, joining an in-flight fetch if any."""
        if not self.single_flight:
            return await self._fetch_and_cache(asin)

        task = self._inflight.get(asin)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_cache(asin))
            self._inflight[asin] = task
            task.add_done_callback(lambda _t, key=asin: self._inflight.pop(key, None))
        else:
            logger.info("Joining in-flight fetch for ASIN %s", asin)

        # Shielded so one cancelled caller does not cancel the shared fetch.
        return list(await asyncio.shield(task))

    async def retrieve_reviews(self, asin: str) -> List[Review]:
        """Return reviews for ``asin``, from cache when possible.

        Raises:
            ReviewFetchError: If the page had to be fetched and could not be.
        """
        reviews = self.cache.get(asin)
        if reviews is not None:
            logger.info("Data found in cache for ASIN %s. Serving from cache.", asin)
            return reviews

        logger.info("Data not found in cache for ASIN %s. Fetching reviews...", asin)
        return await self._load(asin)

    async def retrieve_pair(self, asin1: str, asin2: str) -> Tuple[ProductReviews, ProductReviews]:
        """Return the reviews of two products for competitor analysis.

        Missing ASINs are fetched (concurrently when both are missing). If
        any required fetch fails the first error is raised once every
        started fetch has settled; successful siblings remain cached.

        Raises:
            ReviewFetchError: If a required fetch failed.
        """
        reviews1 = self.cache.get(asin1)
        reviews2 = self.cache.get(asin2)

        if reviews1 is None and reviews2 is None:
            logger.info("Fetching reviews for both ASINs: %s and %s", asin1, asin2)
            results = await asyncio.gather(
                self._load(asin1),
                self._load(asin2),
                return_exceptions=True,
            )
            errors = [result for result in results if isinstance(result, BaseException)]
            if errors:
                if len(errors) > 1:
                    logger.error("Both fetches failed for ASINs %s and %s", asin1, asin2)
                raise errors[0]
            reviews1, reviews2 = results
        elif reviews1 is None:
            logger.info("Fetching reviews for ASIN %s", asin1)
            reviews1 = await self._load(asin1)
        elif reviews2 is None:
            logger.info("Fetching reviews for ASIN %s", asin2)
            reviews2 = await self._load(asin2)
        else:
            logger.info("Reviews for ASINs %s and %s served from cache", asin1, asin2)

        return (
            ProductReviews(asin=asin1, reviews=reviews1),
            ProductReviews(asin=asin2, reviews=reviews2),
        )
