"""FastAPI application entry point."""
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.routers import bookmarks, categories, data, health, metadata, visits
from core.config import get_settings
from db.session import async_session_factory, engine, init_db
from services.category_service import seed_default_categories

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan - startup and shutdown."""
    app_settings = get_settings()

    # Startup: create tables and seed default categories into an empty database
    await init_db()
    if app_settings.seed_default_categories:
        async with async_session_factory() as session:
            await seed_default_categories(session)
            await session.commit()
    logger.info("Database ready")

    yield

    # Shutdown: release pooled connections
    await engine.dispose()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and add security headers to response."""
        response = await call_next(request)
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Prevent clickjacking - API shouldn't be framed
        response.headers["X-Frame-Options"] = "DENY"
        return response


app_settings = get_settings()

app = FastAPI(
    title="Dashmarks API",
    description="A personal bookmark dashboard with metadata scraping and visit analytics.",
    version="0.1.0",
    lifespan=lifespan,
)

# Security headers middleware (runs after CORS, adds headers to responses)
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(metadata.router)
app.include_router(bookmarks.router)
app.include_router(categories.router)
app.include_router(visits.router)
app.include_router(data.router)
