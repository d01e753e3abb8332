"""
Static provider, model and aspect-ratio catalog.

Everything here is compiled in and read-only at runtime:
- PROVIDER_CONFIGS: one entry per supported provider id (auth header, base URL)
- MODEL_CONFIGS: per-model capabilities, used by clients to gate UI controls
- HF_SPACES: Gradio spaces backing the HuggingFace provider and the upscaler
- ASPECT_RATIOS: 1K/2K size presets per aspect ratio label
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

ProviderType = Literal["gitee", "huggingface", "modelscope"]


class ProviderConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: ProviderType
    name: str
    requires_auth: bool = Field(..., serialization_alias="requiresAuth")
    auth_header: str = Field(..., serialization_alias="authHeader")
    base_url: str = Field(..., serialization_alias="baseUrl")


class NumericRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: float
    max: float
    default: float


class ModelFeatures(BaseModel):
    model_config = ConfigDict(frozen=True)

    negative_prompt: bool = Field(..., serialization_alias="negativePrompt")
    steps: NumericRange
    guidance_scale: Optional[NumericRange] = Field(default=None, serialization_alias="guidanceScale")
    seed: bool = True


class ModelConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    provider: ProviderType
    features: ModelFeatures


class HuggingFaceSpace(BaseModel):
    """A Gradio space and the positional argument order of its endpoint."""

    model_config = ConfigDict(frozen=True)

    base_url: str
    endpoint: str
    arguments: Tuple[str, ...] = ()


class AspectRatioPreset(BaseModel):
    model_config = ConfigDict(frozen=True)

    w: int
    h: int


class AspectRatioConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    presets: List[AspectRatioPreset]


PROVIDER_CONFIGS: Dict[str, ProviderConfig] = {
    "gitee": ProviderConfig(
        id="gitee",
        name="Gitee AI",
        requires_auth=True,
        auth_header="X-API-Key",
        base_url="https://ai.gitee.com/v1",
    ),
    "huggingface": ProviderConfig(
        id="huggingface",
        name="HuggingFace",
        requires_auth=False,
        auth_header="X-HF-Token",
        base_url="https://huggingface.co",
    ),
    "modelscope": ProviderConfig(
        id="modelscope",
        name="ModelScope",
        requires_auth=True,
        auth_header="X-MS-Token",
        base_url="https://api-inference.modelscope.cn/v1",
    ),
}

# Positional argument layouts of the Gradio endpoints we call
_ZIMAGE_ARGS = ("prompt", "height", "width", "steps", "seed", "randomize_seed")
_FLUX_ARGS = ("prompt", "seed", "randomize_seed", "width", "height", "steps")

HF_SPACES: Dict[str, HuggingFaceSpace] = {
    "z-image-turbo": HuggingFaceSpace(
        base_url="https://luca115-z-image-turbo.hf.space",
        endpoint="generate_image",
        arguments=_ZIMAGE_ARGS,
    ),
    "qwen-image-fast": HuggingFaceSpace(
        base_url="https://mcp-tools-qwen-image-fast.hf.space",
        endpoint="generate_image",
        arguments=_ZIMAGE_ARGS,
    ),
    "ovis-image": HuggingFaceSpace(
        base_url="https://aidc-ai-ovis-image-7b.hf.space",
        endpoint="generate",
        arguments=_ZIMAGE_ARGS,
    ),
    "flux-1-schnell": HuggingFaceSpace(
        base_url="https://black-forest-labs-flux-1-schnell.hf.space",
        endpoint="infer",
        arguments=_FLUX_ARGS,
    ),
    "upscaler": HuggingFaceSpace(
        base_url="https://tuan2308-upscaler.hf.space",
        endpoint="realesrgan",
    ),
}

# Older clients send the bare family name
HF_MODEL_ALIASES: Dict[str, str] = {
    "z-image": "z-image-turbo",
    "qwen-image": "qwen-image-fast",
    "flux-schnell": "flux-1-schnell",
}

DEFAULT_HF_MODEL = "z-image-turbo"


def _range(min_value: float, max_value: float, default: float) -> NumericRange:
    return NumericRange(min=min_value, max=max_value, default=default)


MODEL_CONFIGS: List[ModelConfig] = [
    ModelConfig(
        id="z-image-turbo",
        name="Z-Image Turbo",
        provider="gitee",
        features=ModelFeatures(negative_prompt=True, steps=_range(1, 20, 9)),
    ),
    ModelConfig(
        id="Qwen-Image",
        name="Qwen Image",
        provider="gitee",
        features=ModelFeatures(
            negative_prompt=True,
            steps=_range(4, 50, 20),
            guidance_scale=_range(0, 10, 4),
        ),
    ),
    ModelConfig(
        id="FLUX_1-Krea-dev",
        name="FLUX.1 Krea [dev]",
        provider="gitee",
        features=ModelFeatures(
            negative_prompt=False,
            steps=_range(1, 50, 28),
            guidance_scale=_range(0, 20, 4.5),
        ),
    ),
    ModelConfig(
        id="FLUX.1-dev",
        name="FLUX.1 [dev]",
        provider="gitee",
        features=ModelFeatures(
            negative_prompt=False,
            steps=_range(1, 50, 28),
            guidance_scale=_range(0, 20, 3.5),
        ),
    ),
    ModelConfig(
        id="z-image-turbo",
        name="Z-Image Turbo",
        provider="huggingface",
        features=ModelFeatures(negative_prompt=False, steps=_range(1, 20, 9)),
    ),
    ModelConfig(
        id="qwen-image-fast",
        name="Qwen Image Fast",
        provider="huggingface",
        features=ModelFeatures(negative_prompt=False, steps=_range(4, 28, 8)),
    ),
    ModelConfig(
        id="ovis-image",
        name="Ovis Image",
        provider="huggingface",
        features=ModelFeatures(
            negative_prompt=False,
            steps=_range(10, 50, 50),
            guidance_scale=_range(1, 10, 5),
        ),
    ),
    ModelConfig(
        id="flux-1-schnell",
        name="FLUX.1 [schnell]",
        provider="huggingface",
        features=ModelFeatures(negative_prompt=False, steps=_range(1, 8, 4)),
    ),
    ModelConfig(
        id="Tongyi-MAI/Z-Image-Turbo",
        name="Z-Image Turbo",
        provider="modelscope",
        features=ModelFeatures(negative_prompt=True, steps=_range(1, 20, 9)),
    ),
    ModelConfig(
        id="black-forest-labs/FLUX.2-dev",
        name="FLUX.2 [dev]",
        provider="modelscope",
        features=ModelFeatures(
            negative_prompt=False,
            steps=_range(1, 50, 28),
            guidance_scale=_range(1, 10, 4),
        ),
    ),
    ModelConfig(
        id="black-forest-labs/FLUX.1-Krea-dev",
        name="FLUX.1 Krea [dev]",
        provider="modelscope",
        features=ModelFeatures(
            negative_prompt=False,
            steps=_range(1, 50, 28),
            guidance_scale=_range(0, 20, 4.5),
        ),
    ),
    ModelConfig(
        id="MusePublic/489_ckpt_FLUX_1",
        name="FLUX.1",
        provider="modelscope",
        features=ModelFeatures(
            negative_prompt=True,
            steps=_range(1, 50, 30),
            guidance_scale=_range(1, 10, 3.5),
        ),
    ),
]


ASPECT_RATIOS: List[AspectRatioConfig] = [
    AspectRatioConfig(
        label="1:1",
        presets=[AspectRatioPreset(w=1024, h=1024), AspectRatioPreset(w=2048, h=2048)],
    ),
    AspectRatioConfig(
        label="4:3",
        presets=[AspectRatioPreset(w=1152, h=896), AspectRatioPreset(w=2048, h=1536)],
    ),
    AspectRatioConfig(
        label="3:4",
        presets=[AspectRatioPreset(w=768, h=1024), AspectRatioPreset(w=1536, h=2048)],
    ),
    AspectRatioConfig(
        label="16:9",
        presets=[AspectRatioPreset(w=1024, h=576), AspectRatioPreset(w=2048, h=1152)],
    ),
    AspectRatioConfig(
        label="9:16",
        presets=[AspectRatioPreset(w=576, h=1024), AspectRatioPreset(w=1152, h=2048)],
    ),
]


def get_provider_config(provider_id: str) -> Optional[ProviderConfig]:
    return PROVIDER_CONFIGS.get(provider_id)


def get_models_for_provider(provider_id: str) -> List[ModelConfig]:
    return [model for model in MODEL_CONFIGS if model.provider == provider_id]


def get_aspect_ratio_by_label(label: str) -> Optional[AspectRatioConfig]:
    """Get aspect ratio configuration by label, e.g. "16:9"."""
    for ratio in ASPECT_RATIOS:
        if ratio.label == label:
            return ratio
    return None
