from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from ...core.exceptions import ZImageError
from ...models.schemas import UpscaleRequest, UpscaleResponse
from ...services.upscale_service import UpscaleService
from ...utils.validation import is_allowed_image_url, validate_scale
from ..dependencies import get_upscale_service
from ._helpers import ensure_valid, parse_body, read_json_body

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["upscale"])


@router.post("/upscale")
async def upscale_image(
    request: Request,
    service: UpscaleService = Depends(get_upscale_service),
) -> JSONResponse:
    """
    Upscale an image hosted on an allow-listed domain.

    The URL is checked before any upstream call so the gateway cannot be
    used to fetch arbitrary or internal addresses.
    """
    body = parse_body(UpscaleRequest, await read_json_body(request))

    if not isinstance(body.url, str) or not body.url:
        raise HTTPException(status_code=400, detail="url is required")
    if not is_allowed_image_url(body.url):
        logger.warning("🚫 [Z-Image API] Rejected upscale URL outside allow-list")
        raise HTTPException(status_code=400, detail="URL not allowed")

    ensure_valid(validate_scale(body.scale))

    try:
        image_url = await service.upscale(
            body.url, body.scale, request.headers.get("X-HF-Token") or None
        )
    except ZImageError as e:
        logger.error(f"❌ [Z-Image API] Upscale error: {e.message}")
        raise HTTPException(status_code=500, detail=e.message)
    except Exception as e:
        logger.exception("❌ [Z-Image API] Upscale unexpected error")
        raise HTTPException(status_code=500, detail=str(e) or "Upscale failed")

    return JSONResponse(content=UpscaleResponse(url=image_url).model_dump())
