"""ModelScope API-Inference provider (OpenAI-compatible images API)."""

from __future__ import annotations

from ..models.catalog import PROVIDER_CONFIGS
from .openai_compatible import OpenAICompatibleProvider


class ModelScopeProvider(OpenAICompatibleProvider):
    id = "modelscope"
    name = "ModelScope"

    base_url = PROVIDER_CONFIGS["modelscope"].base_url
    default_model = "Tongyi-MAI/Z-Image-Turbo"
