"""FastAPI server exposing the health check report."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from healthchecker import __version__, i18n
from healthchecker.api.routes import health_router
from healthchecker.config import Settings, settings as default_settings
from healthchecker.plugins import default_extensions
from healthchecker.runner import HealthCheckRunner

logger = logging.getLogger(__name__)


def build_runner(settings: Settings) -> HealthCheckRunner:
    """Runner wired with the bundled extensions and configured cache."""
    if settings.translations_file:
        i18n.load_strings(Path(settings.translations_file))
    runner = HealthCheckRunner(
        default_extensions(settings, include_example=settings.example_extension),
        settings=settings,
    )
    logger.info(
        "Health check runner ready: %d extensions, cache=%s, workers=%d",
        len(runner.extensions), settings.cache_backend, settings.max_workers,
    )
    return runner


def create_app(runner: HealthCheckRunner | None = None, settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize shared resources on startup."""
        if getattr(app.state, "runner", None) is None:
            app.state.runner = build_runner(settings)
        yield
        logger.info("Health checker API shutting down")

    app = FastAPI(
        title="Health Checker",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.runner = runner

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router, prefix="/api")
    return app
