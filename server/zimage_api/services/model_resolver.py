"""
Model string resolution for the OpenAI-compatible surface.

``gitee/<name>`` and ``ms/<name>`` route to Gitee AI and ModelScope, with
``<name>`` translated through a small alias table. Anything else is a
HuggingFace model; names outside the known set fall back to the default
model instead of failing, which existing clients rely on.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from ..models.catalog import DEFAULT_HF_MODEL, ProviderType

GITEE_PREFIX = "gitee/"
MODELSCOPE_PREFIX = "ms/"

HF_MODELS = ("z-image-turbo", "qwen-image-fast", "ovis-image", "flux-1-schnell")

GITEE_MODEL_ALIASES: Dict[str, str] = {
    "z-image-turbo": "z-image-turbo",
    "qwen-image": "Qwen-Image",
    "flux-1-krea-dev": "FLUX_1-Krea-dev",
    "flux-1-dev": "FLUX.1-dev",
}

MODELSCOPE_MODEL_ALIASES: Dict[str, str] = {
    "z-image-turbo": "Tongyi-MAI/Z-Image-Turbo",
    "flux-2": "black-forest-labs/FLUX.2-dev",
    "flux-1-krea-dev": "black-forest-labs/FLUX.1-Krea-dev",
    "flux-1": "MusePublic/489_ckpt_FLUX_1",
}


@dataclass(frozen=True)
class ResolvedModel:
    provider: ProviderType
    model: str


def resolve_model(model_param: Optional[str] = None) -> ResolvedModel:
    model = (model_param or DEFAULT_HF_MODEL).strip()

    if model.startswith(GITEE_PREFIX):
        raw = model[len(GITEE_PREFIX):]
        return ResolvedModel("gitee", GITEE_MODEL_ALIASES.get(raw) or raw)

    if model.startswith(MODELSCOPE_PREFIX):
        raw = model[len(MODELSCOPE_PREFIX):]
        return ResolvedModel("modelscope", MODELSCOPE_MODEL_ALIASES.get(raw) or raw)

    return ResolvedModel("huggingface", model if model in HF_MODELS else DEFAULT_HF_MODEL)


def list_openai_models() -> List[tuple]:
    """(model id, owner) pairs accepted by resolve_model without fallback."""
    models = [(name, "huggingface") for name in HF_MODELS]
    models += [(f"{GITEE_PREFIX}{alias}", "gitee") for alias in GITEE_MODEL_ALIASES]
    models += [(f"{MODELSCOPE_PREFIX}{alias}", "modelscope") for alias in MODELSCOPE_MODEL_ALIASES]
    return models
