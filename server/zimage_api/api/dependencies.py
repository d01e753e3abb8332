"""FastAPI dependencies exposing objects wired at startup."""

from __future__ import annotations

from fastapi import Request

from ..providers.registry import ProviderRegistry
from ..services.upscale_service import UpscaleService


def get_registry(request: Request) -> ProviderRegistry:
    return request.app.state.registry


def get_upscale_service(request: Request) -> UpscaleService:
    return request.app.state.upscale_service
