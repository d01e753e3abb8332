"""
Z-Image API application factory.

Creates the FastAPI app with CORS, request logging, JSON error rendering and
the provider registry built once at startup.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Iterable, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.endpoints import generation, openai_compat, system, upscale
from .clients.gradio import GradioClient
from .clients.service_client import ServiceClient
from .core.config import Settings, settings as default_settings
from .models.schemas import format_validation_error
from .providers.base import ImageProvider
from .providers.registry import ProviderRegistry, build_default_registry
from .services.upscale_service import UpscaleService

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ["GET", "POST", "OPTIONS"]
ALLOWED_HEADERS = ["Content-Type", "Authorization", "X-API-Key", "X-HF-Token", "X-MS-Token"]


def _add_cors_middleware(app: FastAPI, allowed_origins: List[str]) -> None:
    """
    Add CORS middleware to FastAPI app.

    Args:
        app: FastAPI application instance
        allowed_origins: List of allowed origin strings
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
        max_age=3600,
    )


def _add_request_logging_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def log_requests(request: Request, call_next) -> Response:
        start_time = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"📥 [Z-Image API] {request.method} {request.url.path} -> "
            f"{response.status_code} ({duration_ms:.0f}ms)"
        )
        return response


def _add_exception_handlers(app: FastAPI) -> None:
    """Render every error as {"error": ...} instead of FastAPI's {"detail": ...}."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        detail = exc.detail
        if isinstance(detail, dict) and "error" in detail:
            content = detail
        else:
            content = {"error": detail if isinstance(detail, str) else str(detail)}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": format_validation_error(exc.errors())})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"❌ [Z-Image API] Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    settings: Optional[Settings] = None,
    registry: Optional[ProviderRegistry] = None,
    service_client: Optional[ServiceClient] = None,
    extra_providers: Optional[Iterable[ImageProvider]] = None,
) -> FastAPI:
    """
    Create the FastAPI app.

    Args:
        settings: Settings to use (module-level settings by default)
        registry: Pre-built provider registry; the default adapters are used when omitted
        service_client: Upstream HTTP client shared by adapters and the upscaler
        extra_providers: Additional adapters registered before the registry is frozen

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or default_settings
    service_client = service_client or ServiceClient(
        timeout=settings.upstream_timeout,
        connect_timeout=settings.upstream_connect_timeout,
    )

    if registry is None:
        registry = build_default_registry(settings, service_client, extra_providers)
    else:
        for provider in extra_providers or ():
            registry.register_provider(provider)
    registry.freeze()

    upscale_service = UpscaleService(
        GradioClient(
            service_client,
            max_attempts=settings.upstream_max_attempts,
            retry_backoff=settings.upstream_retry_backoff,
        )
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"🚀 Starting {settings.app_name}")
        logger.info(f"🔌 Providers: {', '.join(registry.provider_ids())}")
        yield
        await service_client.close()
        logger.info("🛑 Shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        description=settings.description,
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.registry = registry
    app.state.upscale_service = upscale_service

    allowed_origins = settings.allowed_origins
    logger.info(f"🌐 CORS configured for origins: {allowed_origins or '(none)'}")

    _add_exception_handlers(app)

    app.include_router(system.router)
    app.include_router(generation.router)
    app.include_router(upscale.router)
    app.include_router(openai_compat.router)

    # Last added runs first
    _add_request_logging_middleware(app)
    _add_cors_middleware(app, allowed_origins)

    return app
