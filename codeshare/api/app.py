"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from codeshare import __version__
from codeshare.api.routers import ai, comments, likes, posts, users
from codeshare.api.routers import auth as auth_router
from codeshare.core.config import get_settings
from codeshare.core.database import close_engine, get_engine
from codeshare.core.limiter import limiter
from codeshare.core.logging import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    configure_logging()
    settings = get_settings()
    logger.info("Starting codeshare", debug=settings.app_debug)

    # Warm up DB connection pool
    get_engine()

    if not settings.google_oauth_enabled:
        logger.info("Google login disabled (GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET unset)")
    if not settings.openai_api_key:
        logger.info("AI explanations disabled (OPENAI_API_KEY unset)")

    yield

    await close_engine()
    logger.info("codeshare stopped")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="codeshare",
        description="Share code snippets, comment, like and get AI explanations",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_prefix = "/api/v1"

    # Each router guards its own endpoints (some are public or optional-auth)
    app.include_router(auth_router.router, prefix=api_prefix)
    app.include_router(users.router, prefix=api_prefix)
    app.include_router(posts.router, prefix=api_prefix)
    app.include_router(comments.router, prefix=api_prefix)
    app.include_router(likes.router, prefix=api_prefix)
    app.include_router(ai.router, prefix=api_prefix)

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=str(upload_dir)), name="uploads")

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
