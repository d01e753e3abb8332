"""
OpenAI-compatible images API.

Lets OpenAI SDK clients use the gateway: the ``model`` string selects the
provider (``gitee/...``, ``ms/...`` or a HuggingFace model id) and the bearer
token is passed through as that provider's credential.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from ...models.catalog import get_provider_config
from ...models.schemas import (
    OpenAIImageData,
    OpenAIImageRequest,
    OpenAIImageResponse,
    OpenAIModelInfo,
    OpenAIModelsListResponse,
)
from ...providers.base import ProviderGenerateRequest
from ...providers.registry import ProviderRegistry
from ...services.model_resolver import list_openai_models, resolve_model
from ...utils.validation import ValidationResult, validate_dimensions, validate_prompt, validate_steps
from ..dependencies import get_registry
from ._helpers import parse_body, read_json_body, run_provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["openai"])

SIZE_PATTERN = re.compile(r"^\s*(\d+)\s*[xX]\s*(\d+)\s*$")
DEFAULT_STEPS = 9


def openai_error(status_code: int, message: str, error_type: str = "invalid_request_error") -> HTTPException:
    """HTTPException whose body is the OpenAI error envelope."""
    return HTTPException(
        status_code=status_code,
        detail={"error": {"message": message, "type": error_type}},
    )


def _check(result: ValidationResult) -> None:
    if not result.valid:
        raise openai_error(400, result.error or "Invalid request")


def parse_size(size: str) -> Tuple[int, int]:
    match = SIZE_PATTERN.match(size or "")
    if not match:
        raise openai_error(400, f"Invalid size: {size}. Expected WIDTHxHEIGHT")
    return int(match.group(1)), int(match.group(2))


def _bearer_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


@router.get("/models")
async def list_models() -> JSONResponse:
    created = int(time.time())
    response = OpenAIModelsListResponse(
        data=[
            OpenAIModelInfo(id=model_id, created=created, owned_by=owner)
            for model_id, owner in list_openai_models()
        ]
    )
    return JSONResponse(content=response.model_dump())


@router.post("/images/generations")
async def create_image(
    request: Request,
    registry: ProviderRegistry = Depends(get_registry),
) -> JSONResponse:
    try:
        body = parse_body(OpenAIImageRequest, await read_json_body(request))
    except HTTPException as e:
        raise openai_error(e.status_code, str(e.detail))

    if body.n != 1:
        raise openai_error(400, "Only n=1 is supported")

    resolved = resolve_model(body.model)
    if not registry.has_provider(resolved.provider):
        raise openai_error(400, f"Invalid provider: {resolved.provider}")

    token = _bearer_token(request)
    provider_config = get_provider_config(resolved.provider)
    if provider_config is not None and provider_config.requires_auth and not token:
        raise openai_error(
            401,
            f"Authorization: Bearer <token> is required for {provider_config.name}",
            "authentication_error",
        )

    width, height = parse_size(body.size)
    steps = body.steps if body.steps is not None else DEFAULT_STEPS
    _check(validate_prompt(body.prompt))
    _check(validate_dimensions(width, height))
    _check(validate_steps(steps))

    logger.info(
        f"🎨 [Z-Image API] /v1/images/generations model={body.model or '(default)'} -> "
        f"{resolved.provider}/{resolved.model}"
    )
    try:
        result = await run_provider(
            registry.get_provider(resolved.provider),
            ProviderGenerateRequest(
                prompt=body.prompt,
                width=width,
                height=height,
                model=resolved.model,
                negative_prompt=body.negative_prompt,
                steps=steps,
                seed=body.seed,
                guidance_scale=body.guidance_scale,
                auth_token=token,
            ),
        )
    except HTTPException as e:
        error_type = "authentication_error" if e.status_code == 401 else "api_error"
        raise openai_error(e.status_code, str(e.detail), error_type)

    if body.response_format == "b64_json" and result.b64_json:
        item = OpenAIImageData(b64_json=result.b64_json)
    else:
        item = OpenAIImageData(url=result.url, b64_json=None if result.url else result.b64_json)

    response = OpenAIImageResponse(created=int(time.time()), data=[item])
    return JSONResponse(content=response.model_dump(exclude_none=True))
