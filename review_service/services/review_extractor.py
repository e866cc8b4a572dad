"""Review extraction from Amazon product-reviews pages.

Turns the raw HTML of a ``/product-reviews/<ASIN>`` page into an ordered
list of ``Review`` records. Each review container is processed on its own:
a container that cannot be parsed is logged and skipped, it never aborts
the rest of the page.

Page-level fields (product image, rating summary, product name) are read
once per document and attached to every review.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, List, Optional

from review_service.schemas.review import Review
from review_service.services.document_view import DocumentView, SoupDocumentView

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------

REVIEW_CONTAINER = 'div[data-hook="review"]'
REVIEW_STAR_RATING = 'i[data-hook="review-star-rating"]'
REVIEW_DATE = 'span[data-hook="review-date"]'
REVIEW_TITLE = 'a[data-hook="review-title"]'
REVIEW_BODY = 'span[data-hook="review-body"]'

PRODUCT_IMAGE = 'img[data-hook="cr-product-image"]'
RATING_OUT_OF_TEXT = '[data-hook="rating-out-of-text"]'
PRODUCT_LINK = 'a[data-hook="product-link"]'

# "5.0 out of 5 stars" prefix rendered inside the title link
_STARS_PREFIX_RE = re.compile(r"\sout of\s\d\sstars")
_WHITESPACE_RE = re.compile(r"\s+")

BODY_WORD_LIMIT = 100
TRUNCATION_MARKER = " ..."


class MalformedReviewError(ValueError):
    """Raised when a single review container lacks required markup."""


@dataclass(frozen=True)
class _PageFields:
    image_src: Optional[str]
    rating_text: str
    product_name: str


def truncate_words(text: str, limit: int = BODY_WORD_LIMIT) -> str:
    """Keep at most ``limit`` whitespace-delimited words of ``text``.

    Longer texts are re-joined with single spaces and get ``" ..."``
    appended. Shorter texts are returned stripped but otherwise verbatim.
    """
    text = text.strip()
    words = _WHITESPACE_RE.split(text)
    if len(words) > limit:
        return " ".join(words[:limit]) + TRUNCATION_MARKER
    return text


def strip_rating_prefix(raw_title: str) -> str:
    """Return the review title without its "N out of 5 stars" prefix.

    Raises:
        MalformedReviewError: if the prefix is not present.
    """
    parts = _STARS_PREFIX_RE.split(raw_title)
    if len(parts) < 2:
        raise MalformedReviewError("title has no 'out of N stars' marker")
    return parts[1].strip()


def _read_page_fields(view: DocumentView) -> _PageFields:
    return _PageFields(
        image_src=view.attribute(view.find_all(PRODUCT_IMAGE), "src"),
        rating_text=view.text(view.find_all(RATING_OUT_OF_TEXT)).replace("out of 5", "", 1),
        product_name=view.text(view.find_all(PRODUCT_LINK)),
    )


def _read_review(view: DocumentView, container: Any, page: _PageFields) -> Review:
    rating_text = view.text(view.find_all(REVIEW_STAR_RATING, within=container))
    raw_title = view.text(view.find_all(REVIEW_TITLE, within=container))
    return Review(
        rating=rating_text.strip().split(" ")[0],
        title=strip_rating_prefix(raw_title),
        date=view.text(view.find_all(REVIEW_DATE, within=container)).strip(),
        body=truncate_words(view.text(view.find_all(REVIEW_BODY, within=container))),
        image_src=page.image_src,
        rating_text=page.rating_text,
        product_name=page.product_name,
    )


def extract_reviews_from_view(view: DocumentView) -> List[Review]:
    """Extract reviews from an already parsed document, in document order."""
    containers = view.find_all(REVIEW_CONTAINER)
    if not containers:
        return []

    page = _read_page_fields(view)
    reviews: List[Review] = []
    for index, container in enumerate(containers):
        try:
            reviews.append(_read_review(view, container, page))
        except Exception as exc:
            logger.warning("Skipping review container #%d: %s", index, exc)

    skipped = len(containers) - len(reviews)
    if skipped:
        logger.info(
            "Extracted %d reviews, skipped %d malformed containers",
            len(reviews),
            skipped,
        )
    return reviews


def extract_reviews(html: str) -> List[Review]:
    """Parse a product-reviews page and return its reviews.

    Never raises on malformed markup: a page without usable review
    containers yields an empty list.
    """
    return extract_reviews_from_view(SoupDocumentView(html))
