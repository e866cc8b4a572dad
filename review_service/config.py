"""Application settings and configuration"""

from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Crawlbase scraping proxy
    API_KEY: Optional[str] = None  # Crawlbase token
    CRAWLBASE_API_URL: str = "https://api.crawlbase.com/"
    FETCH_TIMEOUT_SECONDS: float = 60.0  # Crawlbase renders the page, so it is slow

    # Product reviews page, {asin} is URL-quoted before substitution
    REVIEWS_URL_TEMPLATE: str = "https://www.amazon.com/product-reviews/{asin}"

    # Review cache
    CACHE_TTL_SECONDS: int = 86400
    CACHE_CHECK_PERIOD_SECONDS: int = 120
    SINGLE_FLIGHT: bool = True  # Share one upstream fetch between concurrent misses

    # App config
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Sentry Error Tracking (optional)
    SENTRY_DSN: str = ""  # Empty string = disabled
    SENTRY_ENVIRONMENT: str = "production"
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
