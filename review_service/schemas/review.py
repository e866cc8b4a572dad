"""Review schemas - scraped review records and API payloads"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional


MAX_ASIN_LENGTH = 64


class Review(BaseModel):
    """One customer review scraped from a product-reviews page.

    ``image_src``, ``rating_text`` and ``product_name`` are page-level
    values shared by every review of the same page.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rating: str = Field(..., description="First token of the star-rating text, e.g. '5.0'")
    title: str = Field(..., alias="reviewTitle")
    date: str = Field(..., alias="reviewDate")
    body: str = Field(..., alias="reviewBody")
    image_src: Optional[str] = Field(None, alias="imgSrc")
    rating_text: str = Field("", alias="ratingText")
    product_name: str = Field("", alias="productName")


def _clean_asin(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("ASIN must not be empty")
    if len(v) > MAX_ASIN_LENGTH:
        raise ValueError(f"ASIN must be at most {MAX_ASIN_LENGTH} characters")
    return v


class ReviewSearchRequest(BaseModel):
    """Schema for a single product review lookup"""

    asin: str = Field(..., description="Amazon product identifier")

    @field_validator("asin")
    @classmethod
    def validate_asin(cls, v: str) -> str:
        return _clean_asin(v)


class ReviewSearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Reviews Scrapped Successfully"
    scraped_data: List[Review] = Field(default_factory=list, alias="scrapedData")


class CompetitorAnalysisRequest(BaseModel):
    """Schema for comparing the reviews of two products"""

    asin1: str
    asin2: str

    @field_validator("asin1", "asin2")
    @classmethod
    def validate_asins(cls, v: str) -> str:
        return _clean_asin(v)


class ProductReviews(BaseModel):
    """Reviews of one product, keyed by its identifier"""

    asin: str
    reviews: List[Review] = Field(default_factory=list)


class CompetitorAnalysisResponse(BaseModel):
    message: str = "Competitor Reviews Scrapped Successfully"
    product1: ProductReviews
    product2: ProductReviews
