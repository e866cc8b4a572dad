"""Main FastAPI application - Product Review Scraper API"""

import logging
import time

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.responses import JSONResponse

from review_service.api import reviews
from review_service.config import get_settings
from review_service.dependencies import get_review_cache
from review_service.services.review_cache import ReviewCache

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Initialize Sentry if DSN is provided
if settings.SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        release="0.1.0",
        integrations=[
            FastApiIntegration(),
        ],
    )
    logging.info("Sentry initialized for environment: %s", settings.SENTRY_ENVIRONMENT)
else:
    logging.info("Sentry disabled (no DSN configured)")

# Prometheus metrics (kept minimal; avoid high-cardinality labels).
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status_code"],
)
HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30, 60),
)

# Create FastAPI app
app = FastAPI(
    title="Product Review Scraper API",
    description="Scrapes and caches Amazon product reviews",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Catch-all for unhandled exceptions: log, report to Sentry, clean 500."""
    logger.exception("Unhandled exception: %s %s", request.method, request.url)
    if settings.SENTRY_DSN:
        import sentry_sdk
        sentry_sdk.capture_exception(exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error"}
    )


# Lifecycle events
@app.on_event("startup")
async def startup_event():
    """Start the review cache sweeper"""
    logger.info("Starting Product Review Scraper API...")
    if not settings.API_KEY:
        logger.warning("API_KEY is not set: Crawlbase requests will be rejected")
    get_review_cache().start()


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down Product Review Scraper API...")
    await get_review_cache().stop()


@app.middleware("http")
async def prometheus_http_middleware(request, call_next):
    """
    Record request metrics with low-cardinality path templates.
    """
    start = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = getattr(response, "status_code", 500) or 500
        return response
    finally:
        try:
            route = request.scope.get("route")
            path = getattr(route, "path", request.url.path) or request.url.path
            # Avoid scraping loops / noise.
            if path != "/api/metrics":
                elapsed = time.perf_counter() - start
                HTTP_REQUESTS_TOTAL.labels(
                    method=request.method,
                    path=path,
                    status_code=str(status_code),
                ).inc()
                HTTP_REQUEST_DURATION_SECONDS.labels(
                    method=request.method,
                    path=path,
                ).observe(elapsed)
        except Exception:
            # Never fail the request because of metrics.
            logger.debug("Failed to record request metrics", exc_info=True)


# Health check
@app.get("/health")
async def health_check(cache: ReviewCache = Depends(get_review_cache)):
    """Health check endpoint with review cache statistics."""
    stats = cache.stats()
    return {
        "status": "healthy",
        "service": "review-service",
        "version": "0.1.0",
        "cache": {
            "keys": stats.keys,
            "hits": stats.hits,
            "misses": stats.misses,
            "sets": stats.sets,
            "evictions": stats.evictions,
            "sweeping": cache.is_sweeping,
        },
    }


@app.get("/api/health")
async def health_check_api(cache: ReviewCache = Depends(get_review_cache)):
    """Health check endpoint (API namespace, for reverse proxies)."""
    return await health_check(cache)


@app.get("/api/metrics")
async def prometheus_metrics():
    """
    Prometheus scrape endpoint.

    Intended to be scraped locally; do not expose publicly.
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


# Include routers
app.include_router(reviews.router, prefix="/api")


# Root endpoint
@app.get("/", response_class=PlainTextResponse)
async def root():
    """Root endpoint"""
    return "APIs are Live"


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "review_service.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
