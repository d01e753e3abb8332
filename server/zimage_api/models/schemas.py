from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class RequestModel(BaseModel):
    """Base for request bodies: unknown keys are ignored, explicit nulls mean unset."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class GenerateRequest(RequestModel):
    """Unified generate request accepted by POST /api/generate."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    provider: str = Field(default="gitee", description="Provider id: 'gitee', 'huggingface' or 'modelscope'")
    model: Optional[str] = Field(default=None, description="Provider model id (provider default when omitted)")
    prompt: Optional[str] = Field(default=None, description="Text prompt")
    negative_prompt: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("negativePrompt", "negative_prompt"),
    )
    width: int = Field(default=1024)
    height: int = Field(default=1024)
    steps: int = Field(
        default=9,
        validation_alias=AliasChoices("steps", "num_inference_steps"),
    )
    seed: Optional[int] = Field(default=None)
    guidance_scale: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("guidanceScale", "guidance_scale"),
    )

    @model_validator(mode="before")
    @classmethod
    def drop_empty_aliases(cls, data: Any) -> Any:
        """Empty provider means the default; the first non-empty negative prompt key wins."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not data.get("provider"):
            data.pop("provider", None)
        negative_prompt = data.pop("negativePrompt", None) or data.pop("negative_prompt", None)
        data.pop("negative_prompt", None)
        if negative_prompt:
            data["negativePrompt"] = negative_prompt
        return data


class LegacyGenerateRequest(RequestModel):
    """Body of the legacy POST /api/generate-hf endpoint."""

    prompt: Optional[str] = None
    width: int = 1024
    height: int = 1024
    model: Optional[str] = None
    seed: Optional[int] = None


class UpscaleRequest(RequestModel):
    url: Any = Field(default=None, description="Source image URL (allow-listed hosts only)")
    scale: Union[int, float] = Field(default=4, description="Upscale factor (1-4)")


class GenerateSuccessResponse(BaseModel):
    """Normalized provider result. At least one of url / b64_json is set."""

    url: Optional[str] = None
    b64_json: Optional[str] = None
    seed: Optional[int] = None

    @property
    def has_image(self) -> bool:
        return bool(self.url or self.b64_json)


class UpscaleResponse(BaseModel):
    url: str


class HealthResponse(BaseModel):
    status: str
    providers: List[str]


# OpenAI-compatible images API


class OpenAIImageRequest(RequestModel):
    model: Optional[str] = None
    prompt: Optional[str] = None
    n: int = 1
    size: str = "1024x1024"
    quality: Optional[Literal["standard", "hd"]] = None
    response_format: Literal["url", "b64_json"] = "url"
    negative_prompt: Optional[str] = None
    steps: Optional[int] = None
    seed: Optional[int] = None
    guidance_scale: Optional[float] = None


class OpenAIImageData(BaseModel):
    url: Optional[str] = None
    b64_json: Optional[str] = None
    revised_prompt: Optional[str] = None


class OpenAIImageResponse(BaseModel):
    created: int
    data: List[OpenAIImageData]


class OpenAIModelInfo(BaseModel):
    id: str
    object: Literal["model"] = "model"
    created: int
    owned_by: str


class OpenAIModelsListResponse(BaseModel):
    object: Literal["list"] = "list"
    data: List[OpenAIModelInfo]


def format_validation_error(errors: List[Dict[str, Any]]) -> str:
    """Turn pydantic error entries into one readable message."""
    if not errors:
        return "Invalid request body"
    first = errors[0]
    location = ".".join(
        str(part) for part in first.get("loc", ()) if part not in ("body",)
    )
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message
