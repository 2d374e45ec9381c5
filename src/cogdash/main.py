"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cogdash.analysis.router import router as analysis_router
from cogdash.config import Settings, get_settings
from cogdash.database import close_db, init_db
from cogdash.games.router import router as games_router
from cogdash.health.router import router as health_router
from cogdash.middleware.error_handler import setup_error_handlers
from cogdash.middleware.logging import setup_logging
from cogdash.middleware.rate_limit import RateLimitMiddleware
from cogdash.middleware.request_id import RequestIdMiddleware
from cogdash.progress.router import router as progress_router
from cogdash.records.router import router as records_router
from cogdash.redis_client import close_redis, init_redis
from cogdash.ws.manager import PlayArena
from cogdash.ws.router import router as ws_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )
    await init_redis(settings.redis_url, max_connections=settings.redis_max_connections)

    yield

    await app.state.play_arena.close_all()
    await close_db()
    await close_redis()


def _setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register handlers and middleware. The last one added runs outermost."""
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)
    # Outermost, so 429 and error responses still carry CORS headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
        expose_headers=["X-Request-Id", "X-RateLimit-Remaining", "X-RateLimit-Limit"],
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Cognitive Performance Dashboard API",
        description="Game session capture and per-domain cognitive performance analysis",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.play_arena = PlayArena()

    _setup_middleware(app, settings)
    app.include_router(health_router)
    app.include_router(analysis_router)
    app.include_router(games_router)
    app.include_router(progress_router)
    app.include_router(records_router)
    app.include_router(ws_router)

    return app


app = create_app()
