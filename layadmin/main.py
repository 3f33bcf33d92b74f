"""FastAPI application entry point."""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from layadmin import VERSION
from layadmin.api.admin import router as admin_router
from layadmin.api.health import router as health_router
from layadmin.api.pages import router as pages_router
from layadmin.config import Settings
from layadmin.exceptions import ConfigParseError, ConfigValidationError, PageNotFoundError
from layadmin.middleware.aliases import apply_middleware
from layadmin.services.cache_service import get_cache_store
from layadmin.services.page_service import PageConfigResolver
from layadmin.services.view_service import create_templates

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

BUNDLED_ASSETS_DIR = Path(__file__).resolve().parent / "resources" / "assets"
ASSETS_URL = "/layadmin"


def _configure_logging(debug: bool) -> None:
    """Configure application logging."""
    level = logging.DEBUG if debug else logging.INFO
    fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=fmt,
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan: warm the page table so broken configs surface at startup."""
    settings: Settings = app.state.settings
    _configure_logging(settings.debug)
    logger.info("Starting LayAdmin %s (debug=%s)", VERSION, settings.debug)

    if not settings.page_config_dir.is_dir():
        logger.warning("Page configuration directory %s does not exist", settings.page_config_dir)

    resolver: PageConfigResolver = app.state.page_resolver
    try:
        table = resolver.resolve_table()
        logger.info("Loaded %d admin pages", len(table))
    except (ConfigParseError, ConfigValidationError) as exc:
        # Page requests answer 500 until the files are fixed.
        logger.error("Page configuration is invalid: %s", exc)

    yield

    logger.info("LayAdmin stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title=settings.title,
        description="Admin panel bootstrap",
        version=VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.page_resolver = PageConfigResolver(settings, get_cache_store(settings))
    app.state.templates = create_templates(settings)

    apply_middleware(app, settings.middleware, settings)

    app.include_router(health_router)
    app.include_router(pages_router, prefix=settings.api_route_prefix)
    app.include_router(admin_router, prefix=settings.web_route_prefix)

    # Global exception handlers

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = []
        for err in exc.errors():
            loc = err.get("loc", ())
            field = str(loc[-1]) if loc else "unknown"
            errors.append({"field": field, "message": err.get("msg", "Invalid value")})
        logger.warning(
            "RequestValidationError in %s %s: %s",
            request.method,
            request.url.path,
            errors,
        )
        return JSONResponse(status_code=422, content={"detail": errors})

    @app.exception_handler(PageNotFoundError)
    async def page_not_found_handler(request: Request, exc: PageNotFoundError) -> JSONResponse:
        logger.info("PageNotFoundError in %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=404, content={"detail": "Page not found"})

    @app.exception_handler(ConfigParseError)
    @app.exception_handler(ConfigValidationError)
    async def page_config_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "%s in %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Invalid page configuration"},
        )

    # Published assets in the host public directory take precedence over the bundled copy
    published_assets = settings.public_dir / "layadmin"
    assets_dir = published_assets if published_assets.is_dir() else BUNDLED_ASSETS_DIR
    if assets_dir.is_dir():
        app.mount(ASSETS_URL, StaticFiles(directory=str(assets_dir)), name="layadmin")

    return app


def cli_entry() -> None:
    """CLI entry point for running the server."""
    import uvicorn

    settings = Settings()
    uvicorn.run(
        "layadmin.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
