"""Base interface for document fetchers.

A fetcher turns a fully-qualified page URL into the raw page markup. It
is stateless and does not retry: any transport problem (non-2xx status,
network failure, timeout) is raised as ``ReviewFetchError``.
"""

from abc import ABC, abstractmethod


class ReviewFetchError(Exception):
    """Raised when a product-reviews page could not be fetched."""

    def __init__(self, url: str, message: str = "Error fetching HTML") -> None:
        self.url = url
        super().__init__(f"{message}: {url}")


class BaseDocumentFetcher(ABC):
    """Abstract base class for page fetchers."""

    @abstractmethod
    async def fetch(self, url: str) -> str:
        """Return the raw markup of ``url``.

        Raises:
            ReviewFetchError: If the page could not be obtained.
        """
        raise NotImplementedError(
            f"{self.__class__.__name__} does not implement fetch"
        )
