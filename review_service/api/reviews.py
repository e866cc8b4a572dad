"""Review API endpoints - product reviews and competitor analysis"""

from fastapi import APIRouter, Depends, HTTPException, status
import logging

from review_service.dependencies import get_review_retriever
from review_service.schemas.review import (
    CompetitorAnalysisRequest,
    CompetitorAnalysisResponse,
    ReviewSearchRequest,
    ReviewSearchResponse,
)
from review_service.services.base_fetcher import ReviewFetchError
from review_service.services.review_retriever import ReviewRetriever

logger = logging.getLogger(__name__)
router = APIRouter(tags=["reviews"])


@router.post("/search/product/reviews", response_model=ReviewSearchResponse)
async def search_product_reviews(
    request: ReviewSearchRequest,
    retriever: ReviewRetriever = Depends(get_review_retriever),
):
    """
    Scrape the reviews of one product.

    Served from the in-memory cache when the ASIN was scraped within the
    cache TTL.
    """
    logger.info("ASIN from front-end: %s", request.asin)
    try:
        reviews = await retriever.retrieve_reviews(request.asin)
    except ReviewFetchError as e:
        logger.error("Error while processing ASIN %s: %s", request.asin, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        )

    return ReviewSearchResponse(scraped_data=reviews)


@router.post("/competitor/analysis", response_model=CompetitorAnalysisResponse)
async def competitor_analysis(
    request: CompetitorAnalysisRequest,
    retriever: ReviewRetriever = Depends(get_review_retriever),
):
    """
    Scrape the reviews of two products side by side.

    Missing products are fetched concurrently. The request fails as a
    whole if either product could not be fetched.
    """
    try:
        product1, product2 = await retriever.retrieve_pair(request.asin1, request.asin2)
    except ReviewFetchError as e:
        logger.error(
            "Error performing competitor analysis for %s / %s: %s",
            request.asin1,
            request.asin2,
            e,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        )

    return CompetitorAnalysisResponse(product1=product1, product2=product2)
