"""Crawlbase scraping-proxy fetcher.

Crawlbase renders the target page on its side and returns the HTML:
``GET https://api.crawlbase.com/?token=<token>&url=<target>``.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from review_service.services.base_fetcher import BaseDocumentFetcher, ReviewFetchError
from review_service.services.metrics import REVIEW_FETCHES_TOTAL

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.crawlbase.com/"
DEFAULT_TIMEOUT_SECONDS = 60.0


class CrawlbaseFetcher(BaseDocumentFetcher):
    """Fetch pages through the Crawlbase Crawling API."""

    def __init__(
        self,
        api_token: Optional[str],
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_token = (api_token or "").strip()
        self.api_url = api_url
        self.timeout = timeout
        self._transport = transport

    async def fetch(self, url: str) -> str:
        params = {"token": self.api_token, "url": url}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.api_url, params=params)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            REVIEW_FETCHES_TOTAL.labels(outcome="error").inc()
            logger.error(
                "Crawlbase error %s for %s: %s",
                exc.response.status_code,
                url,
                exc.response.text[:200],
            )
            raise ReviewFetchError(url) from exc
        except httpx.TimeoutException as exc:
            REVIEW_FETCHES_TOTAL.labels(outcome="error").inc()
            logger.error("Crawlbase timeout after %.1fs for %s", self.timeout, url)
            raise ReviewFetchError(url) from exc
        except httpx.HTTPError as exc:
            REVIEW_FETCHES_TOTAL.labels(outcome="error").inc()
            # str(exc) may contain the request URL, which carries the token.
            logger.error("Crawlbase request failed for %s: %s", url, type(exc).__name__)
            raise ReviewFetchError(url) from exc

        REVIEW_FETCHES_TOTAL.labels(outcome="success").inc()
        logger.debug("Fetched %s (%d bytes)", url, len(response.content))
        return response.text
