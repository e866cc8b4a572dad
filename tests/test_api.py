"""
API tests for the review endpoints.

The app runs in-process through httpx.ASGITransport; the retriever is
wired to a FakeFetcher via dependency overrides.
"""
from typing import AsyncGenerator

import httpx
import pytest

from review_service.dependencies import get_review_cache, get_review_retriever, reset_services
from review_service.main import app
from review_service.services.review_retriever import ReviewRetriever


URL = "https://www.amazon.com/product-reviews/{}"


@pytest.fixture
def fetcher(make_fetcher, reviews_html):
    return make_fetcher({URL.format("X"): reviews_html, URL.format("Y"): reviews_html})


@pytest.fixture
def retriever(cache, fetcher) -> ReviewRetriever:
    return ReviewRetriever(cache, fetcher)


@pytest.fixture
async def client(cache, retriever) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client with the review services overridden."""
    app.dependency_overrides[get_review_retriever] = lambda: retriever
    app.dependency_overrides[get_review_cache] = lambda: cache

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
    reset_services()


class TestSearchProductReviews:

    @pytest.mark.asyncio
    async def test_returns_scraped_reviews(self, client, fetcher):
        response = await client.post("/api/search/product/reviews", json={"asin": "X"})

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Reviews Scrapped Successfully"
        assert [r["rating"] for r in data["scrapedData"]] == ["5", "1"]
        first = data["scrapedData"][0]
        assert first["reviewTitle"] == "Best earbuds I have owned"
        assert first["productName"] == "Acme Wireless Earbuds"
        assert first["imgSrc"].startswith("https://m.media-amazon.com/")
        assert fetcher.calls == [URL.format("X")]

    @pytest.mark.asyncio
    async def test_second_request_served_from_cache(self, client, fetcher):
        await client.post("/api/search/product/reviews", json={"asin": "X"})
        response = await client.post("/api/search/product/reviews", json={"asin": "X"})

        assert response.status_code == 200
        assert len(fetcher.calls) == 1

    @pytest.mark.asyncio
    async def test_asin_is_stripped(self, client, fetcher):
        response = await client.post("/api/search/product/reviews", json={"asin": "  X "})

        assert response.status_code == 200
        assert fetcher.calls == [URL.format("X")]

    @pytest.mark.asyncio
    async def test_fetch_failure_returns_generic_500(self, client):
        response = await client.post("/api/search/product/reviews", json={"asin": "NOPE"})

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal Server Error"}
        assert "amazon" not in response.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"asin": ""}, {"asin": "   "}, {"asin": "A" * 65}])
    async def test_invalid_body_rejected(self, client, body, fetcher):
        response = await client.post("/api/search/product/reviews", json=body)

        assert response.status_code == 422
        assert fetcher.calls == []


class TestCompetitorAnalysis:

    @pytest.mark.asyncio
    async def test_returns_both_products(self, client, cache):
        response = await client.post(
            "/api/competitor/analysis", json={"asin1": "X", "asin2": "Y"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Competitor Reviews Scrapped Successfully"
        assert data["product1"]["asin"] == "X"
        assert data["product2"]["asin"] == "Y"
        assert len(data["product1"]["reviews"]) == 2
        assert len(data["product2"]["reviews"]) == 2
        assert "reviewBody" in data["product1"]["reviews"][0]
        assert "X" in cache and "Y" in cache

    @pytest.mark.asyncio
    async def test_one_side_fails(self, client, cache):
        response = await client.post(
            "/api/competitor/analysis", json={"asin1": "X", "asin2": "NOPE"}
        )

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal Server Error"}
        assert "X" in cache

    @pytest.mark.asyncio
    async def test_missing_second_asin(self, client):
        response = await client.post("/api/competitor/analysis", json={"asin1": "X"})

        assert response.status_code == 422


class TestServiceEndpoints:

    @pytest.mark.asyncio
    async def test_root(self, client):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.text == "APIs are Live"

    @pytest.mark.asyncio
    async def test_health_reports_cache_stats(self, client):
        await client.post("/api/search/product/reviews", json={"asin": "X"})

        for path in ("/health", "/api/health"):
            response = await client.get(path)
            assert response.status_code == 200
            data = response.json()
            assert data["status"] == "healthy"
            assert data["cache"]["keys"] == 1
            assert data["cache"]["sets"] == 1

    @pytest.mark.asyncio
    async def test_metrics_endpoint(self, client):
        await client.post("/api/search/product/reviews", json={"asin": "X"})
        response = await client.get("/api/metrics")

        assert response.status_code == 200
        assert "review_cache_lookups_total" in response.text
        assert "http_requests_total" in response.text
