"""FastAPI application factory and server configuration."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from judge.config import Settings, get_settings
from judge.db.base import Database
from judge.engine.sandbox import SandboxRunner
from judge.logging_setup import configure_logging
from judge.middleware import AuthMiddleware, RateLimitMiddleware, RequestIDMiddleware
from judge.routes import problems

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan manager."""
    # Startup
    database: Database = app.state.database
    await database.connect()
    logger.info("%s started", app.title)

    yield

    # Shutdown
    await database.disconnect()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.debug)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = Database(settings)
    app.state.runner = SandboxRunner.from_settings(settings)

    # Middleware; the last one added runs first
    app.add_middleware(RateLimitMiddleware, settings=settings)
    app.add_middleware(AuthMiddleware, settings=settings)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routes
    app.include_router(problems.router, prefix="/v1/problems", tags=["problems"])

    # Health check
    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "contest-judge"}

    # Root
    @app.get("/")
    async def root():
        return JSONResponse(
            content={
                "service": settings.app_name,
                "version": "0.1.0",
                "docs": "/docs" if settings.debug else None,
            }
        )

    return app


app = create_app()
