"""Pydantic schemas"""

from review_service.schemas.review import (
    CompetitorAnalysisRequest,
    CompetitorAnalysisResponse,
    ProductReviews,
    Review,
    ReviewSearchRequest,
    ReviewSearchResponse,
)

__all__ = [
    "CompetitorAnalysisRequest",
    "CompetitorAnalysisResponse",
    "ProductReviews",
    "Review",
    "ReviewSearchRequest",
    "ReviewSearchResponse",
]
