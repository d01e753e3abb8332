"""
Image generation endpoints.

- POST /api/generate: unified endpoint, provider chosen by the body
- POST /api/generate-hf: legacy endpoint, always HuggingFace
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from ...models.catalog import get_provider_config
from ...models.schemas import GenerateRequest, LegacyGenerateRequest
from ...providers.base import ProviderGenerateRequest
from ...providers.registry import ProviderRegistry
from ...utils.validation import validate_dimensions, validate_prompt, validate_steps
from ..dependencies import get_registry
from ._helpers import ensure_valid, parse_body, read_json_body, run_provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["generation"])

DEFAULT_PROVIDER = "gitee"
DEFAULT_AUTH_HEADER = "X-API-Key"
LEGACY_HF_MODEL = "z-image"


@router.post("/generate")
async def generate_image(
    request: Request,
    registry: ProviderRegistry = Depends(get_registry),
) -> JSONResponse:
    """
    Generate an image with the requested provider.

    Returns 400 for malformed bodies, unknown providers and invalid fields,
    401 when the provider's auth header is missing, 500 on upstream failure.
    """
    raw_body = await read_json_body(request)

    # Provider and credential are checked before field validation
    provider_id = (raw_body.get("provider") if isinstance(raw_body, dict) else None) or DEFAULT_PROVIDER
    if not isinstance(provider_id, str) or not registry.has_provider(provider_id):
        raise HTTPException(status_code=400, detail=f"Invalid provider: {provider_id}")

    provider_config = get_provider_config(provider_id)
    auth_header = provider_config.auth_header if provider_config else DEFAULT_AUTH_HEADER
    auth_token = request.headers.get(auth_header) or None

    if provider_config is not None and provider_config.requires_auth and not auth_token:
        raise HTTPException(
            status_code=401,
            detail=f"{provider_config.auth_header} is required for {provider_config.name}",
        )

    body = parse_body(GenerateRequest, raw_body)

    ensure_valid(validate_prompt(body.prompt))
    ensure_valid(validate_dimensions(body.width, body.height))
    ensure_valid(validate_steps(body.steps))

    logger.info(
        f"🎨 [Z-Image API] generate provider={provider_id} model={body.model or '(default)'} "
        f"size={body.width}x{body.height} steps={body.steps}"
    )
    result = await run_provider(
        registry.get_provider(provider_id),
        ProviderGenerateRequest(
            prompt=body.prompt,
            width=body.width,
            height=body.height,
            model=body.model,
            negative_prompt=body.negative_prompt,
            steps=body.steps,
            seed=body.seed,
            guidance_scale=body.guidance_scale,
            auth_token=auth_token,
        ),
    )
    return JSONResponse(content=result.model_dump(exclude_none=True))


@router.post("/generate-hf")
async def generate_image_hf(
    request: Request,
    registry: ProviderRegistry = Depends(get_registry),
) -> JSONResponse:
    """Legacy HuggingFace endpoint kept for older clients."""
    body = parse_body(LegacyGenerateRequest, await read_json_body(request))

    ensure_valid(validate_prompt(body.prompt))
    ensure_valid(validate_dimensions(body.width, body.height))

    result = await run_provider(
        registry.get_provider("huggingface"),
        ProviderGenerateRequest(
            prompt=body.prompt,
            width=body.width,
            height=body.height,
            model=body.model or LEGACY_HF_MODEL,
            seed=body.seed,
            auth_token=request.headers.get("X-HF-Token") or None,
        ),
    )
    return JSONResponse(content=result.model_dump(exclude_none=True))
