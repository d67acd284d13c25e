import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from linkpage_app.api.v1 import analytics, blocks, events, pages, public, shortlinks
from linkpage_app.config import settings
from linkpage_app.database.connection import Base, engine
from linkpage_app.exceptions import LinkPageError
from linkpage_app.logging_config import configure_logging
from linkpage_app.middleware import RequestLoggingMiddleware

# Import models to ensure they're registered with Base
from linkpage_app.models import AnalyticsEvent, Block, Page, Shortlink  # noqa: F401

configure_logging()
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Link-in-bio pages with a block editor, public pages and analytics",
    debug=settings.debug
)

app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(LinkPageError)
async def link_page_error_handler(request: Request, exc: LinkPageError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "environment": settings.environment}


######## Include routers
app.include_router(pages.router, prefix="/api/v1")
app.include_router(blocks.router, prefix="/api/v1")
app.include_router(events.router, prefix="/api/v1")
app.include_router(analytics.router, prefix="/api/v1")
app.include_router(shortlinks.router, prefix="/api/v1")
app.include_router(public.router)
