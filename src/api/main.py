"""FastAPI application entry point."""
import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.routers import (
    analytics,
    bookmarks,
    categories,
    health,
    metadata,
    session,
    settings,
    tags,
)
from core.config import get_settings
from core.logging import configure_logging
from db.session import get_session_factory
from services.analytics_service import AnalyticsRecorder
from services.store_registry import StoreRegistry
from services.straico_client import StraicoClient


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan - startup and shutdown."""
    app_settings = get_settings()
    configure_logging(app_settings.log_level)

    # Startup: shared Straico HTTP client (connection pool across users)
    http_client = StraicoClient.create_http_client(
        base_url=app_settings.straico_api_url,
        timeout=app_settings.straico_timeout,
    )
    app.state.straico_client = StraicoClient(http_client)

    # Startup: per-user bookmark stores with a shared analytics recorder
    session_factory = get_session_factory()
    app.state.store_registry = StoreRegistry(
        session_factory,
        AnalyticsRecorder(session_factory),
        idle_timeout=app_settings.store_idle_timeout,
    )
    eviction = asyncio.create_task(
        app.state.store_registry.run_eviction(app_settings.store_eviction_interval),
    )

    yield

    # Shutdown: stop eviction, flush pending analytics, then close the HTTP pool
    eviction.cancel()
    with suppress(asyncio.CancelledError):
        await eviction
    await app.state.store_registry.close()
    await http_client.aclose()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and add security headers to response."""
        response = await call_next(request)
        # HSTS: enforce HTTPS for 1 year, including subdomains
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Prevent clickjacking - API shouldn't be framed
        response.headers["X-Frame-Options"] = "DENY"
        return response


app_settings = get_settings()

app = FastAPI(
    title="Bookmarks API",
    description="Save links, organize them with categories, tags, ratings and watch "
                "status, and generate AI summaries.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(session.router)
app.include_router(bookmarks.router)
app.include_router(categories.router)
app.include_router(tags.router)
app.include_router(analytics.router)
app.include_router(settings.router)
app.include_router(metadata.router)
