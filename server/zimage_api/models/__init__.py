"""
Models package for the Z-Image API.

- schemas: Request/response contracts (pydantic) for the HTTP surface
- catalog: Static provider, model, HuggingFace space and aspect-ratio tables
"""

from .catalog import (
    ASPECT_RATIOS,
    HF_SPACES,
    MODEL_CONFIGS,
    PROVIDER_CONFIGS,
    AspectRatioConfig,
    ModelConfig,
    ModelFeatures,
    ProviderConfig,
)
from .schemas import (
    GenerateRequest,
    GenerateSuccessResponse,
    HealthResponse,
    LegacyGenerateRequest,
    OpenAIImageRequest,
    OpenAIImageResponse,
    UpscaleRequest,
    UpscaleResponse,
)

__all__ = [
    "ASPECT_RATIOS",
    "HF_SPACES",
    "MODEL_CONFIGS",
    "PROVIDER_CONFIGS",
    "AspectRatioConfig",
    "GenerateRequest",
    "GenerateSuccessResponse",
    "HealthResponse",
    "LegacyGenerateRequest",
    "ModelConfig",
    "ModelFeatures",
    "OpenAIImageRequest",
    "OpenAIImageResponse",
    "ProviderConfig",
    "UpscaleRequest",
    "UpscaleResponse",
]
