"""Prometheus counters for the review pipeline (low-cardinality labels only)."""

from prometheus_client import Counter

REVIEW_CACHE_LOOKUPS_TOTAL = Counter(
    "review_cache_lookups_total",
    "Review cache lookups",
    ["result"],
)

REVIEW_FETCHES_TOTAL = Counter(
    "review_fetches_total",
    "Upstream product-reviews page fetches",
    ["outcome"],
)
