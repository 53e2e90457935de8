"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Collaborators are built here, explicitly, and hung on
app.state: the TokenService (signing secret + lifetime) and the
GoogleOAuthClient (with its shared outbound HTTP client). Dependencies
read them back from request.app.state, so a test can build an app with
its own settings or swap in a mocked Google client.

Lifespan manages startup/shutdown (Redis, HTTP client, database).
"""

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notekeeper import __version__
from notekeeper.api import build_api_router
from notekeeper.api.errors import register_error_handlers
from notekeeper.auth.google import GoogleOAuthClient
from notekeeper.auth.jwt import TokenService
from notekeeper.config import Settings, settings

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    config: Settings = app.state.settings
    logger.info(
        "notekeeper.starting",
        version=__version__,
        environment=config.environment,
        port=config.port,
    )
    if not config.google_client_id or not config.google_callback_url:
        logger.warning("notekeeper.google_not_configured")

    from notekeeper.db.redis_pool import close_redis, init_redis
    try:
        await init_redis(config.redis_url)
        logger.info("notekeeper.redis_connected", url=config.redis_url)
    except Exception as e:
        logger.warning("notekeeper.redis_unavailable", error=str(e))
        # Rate limiting is skipped without Redis

    yield

    logger.info("notekeeper.shutdown")

    await close_redis()
    await app.state.google.aclose()

    from notekeeper.db.engine import engine
    await engine.dispose()


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    config = config or settings

    app = FastAPI(
        title="Notekeeper",
        description="Personal notes API with Google sign-in and admin user management",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.tokens = TokenService(
        secret=config.jwt_secret,
        algorithm=config.jwt_algorithm,
        lifetime=timedelta(days=config.token_expire_days),
    )
    app.state.google = GoogleOAuthClient.from_settings(config)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → RateLimit → CORS → handler

    from notekeeper.middleware.rate_limit import RateLimitMiddleware
    from notekeeper.middleware.request_id import RequestIdMiddleware
    from notekeeper.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=config.rate_limit_rpm,
        auth_rpm=config.rate_limit_auth_rpm,
        auth_paths=[f"{config.api_prefix}/auth/google/callback"],
    )
    app.add_middleware(
        SecurityHeadersMiddleware, no_store_prefix=f"{config.api_prefix}/auth"
    )
    app.add_middleware(RequestIdMiddleware)

    register_error_handlers(app)
    app.include_router(build_api_router(config.api_prefix))

    return app


# Default app instance (used by uvicorn: notekeeper.main:app)
app = create_app()
