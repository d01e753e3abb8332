"""
System endpoints: liveness probe, health and catalog.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...models import HealthResponse
from ...models.catalog import ASPECT_RATIOS, MODEL_CONFIGS, PROVIDER_CONFIGS
from ...providers.registry import ProviderRegistry
from ..dependencies import get_registry

router = APIRouter(prefix="/api", tags=["system"])


@router.get("/")
async def root() -> Dict[str, str]:
    """Liveness probe."""
    return {"message": "Z-Image API is running"}


@router.get("/health", response_model=HealthResponse)
async def health_check(registry: ProviderRegistry = Depends(get_registry)):
    return HealthResponse(status="healthy", providers=registry.provider_ids())


@router.get("/models")
async def list_models() -> Dict[str, Any]:
    """
    Static catalog for client-side UI gating.

    Returns:
        Provider configs, per-model features and aspect-ratio presets
    """
    return {
        "providers": [config.model_dump(by_alias=True) for config in PROVIDER_CONFIGS.values()],
        "models": [model.model_dump(by_alias=True, exclude_none=True) for model in MODEL_CONFIGS],
        "aspectRatios": [ratio.model_dump() for ratio in ASPECT_RATIOS],
    }
