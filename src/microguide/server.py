"""FastAPI application factory and server configuration."""

import asyncio
from contextlib import asynccontextmanager, suppress
from typing import AsyncGenerator

import structlog
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from microguide.clients.completion import CompletionClient
from microguide.config import get_settings
from microguide.db.base import close_db, init_db
from microguide.dependencies import get_path_service
from microguide.errors import MicroGuideError, microguide_error_handler
from microguide.logging_config import configure_logging
from microguide.middleware import AuthMiddleware, RateLimitMiddleware, RequestIDMiddleware
from microguide.routes import cache, paths, progress, search
from microguide.schemas.common import HealthStatus
from microguide.services.cache import build_query_cache, run_cache_sweeper
from microguide.services.intent import QueryIntentParser
from microguide.services.paths import PathService
from microguide.services.synthesis import PathGenerator

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Open the store, build the shared collaborators, run the sweeper."""
    settings = get_settings()
    await init_db()

    completion = CompletionClient()
    app.state.cache = build_query_cache(settings)
    app.state.completion = completion
    app.state.parser = QueryIntentParser(completion)
    app.state.generator = PathGenerator(completion=completion)

    sweeper = None
    if settings.cache_sweep_interval_seconds > 0:
        sweeper = asyncio.create_task(
            run_cache_sweeper(app.state.cache, settings.cache_sweep_interval_seconds)
        )
    logger.info(
        "service_started",
        environment=settings.environment,
        cache_backend=settings.cache_backend,
        completion_configured=completion.is_configured,
    )

    yield

    if sweeper is not None:
        sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper
    await close_db()
    logger.info("service_stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.add_exception_handler(MicroGuideError, microguide_error_handler)

    # Last added runs first: request id, then auth, then the rate limit
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(AuthMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(paths.router, prefix="/v1/paths", tags=["paths"])
    app.include_router(search.router, prefix="/v1/search", tags=["search"])
    app.include_router(progress.router, prefix="/v1/progress", tags=["progress"])
    app.include_router(cache.router, prefix="/v1/cache", tags=["cache"])

    @app.get("/health", response_model=HealthStatus)
    async def health_check(service: PathService = Depends(get_path_service)):
        healthy = await service.health_check()
        body = HealthStatus(
            status="healthy" if healthy else "degraded",
            service="microguide",
            database=healthy,
        )
        return JSONResponse(
            status_code=200 if healthy else 503, content=body.model_dump()
        )

    @app.get("/")
    async def root():
        return {
            "service": settings.app_name,
            "version": "0.1.0",
            "docs": "/docs" if settings.debug else None,
        }

    return app


app = create_app()
