"""
Shared helper functions for API endpoints.

- JSON body parsing and typed validation (400 on failure)
- Provider invocation with error-to-status mapping
"""

from __future__ import annotations

import logging
import traceback
from typing import Any, Type, TypeVar

from fastapi import HTTPException, Request
from pydantic import BaseModel, ValidationError

from ...core.exceptions import AuthenticationError, ZImageError
from ...models.schemas import GenerateSuccessResponse, format_validation_error
from ...providers.base import ImageProvider, ProviderGenerateRequest
from ...utils.validation import ValidationResult

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

INVALID_JSON_MESSAGE = "Invalid JSON body"


async def read_json_body(request: Request) -> Any:
    """
    Read the request body as JSON.

    Raises:
        HTTPException: 400 if the body is empty or not valid JSON
    """
    try:
        return await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail=INVALID_JSON_MESSAGE)


def parse_body(model: Type[ModelT], body: Any) -> ModelT:
    """
    Validate a decoded JSON body against a request contract.

    Raises:
        HTTPException: 400 with the first validation error
    """
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=format_validation_error(e.errors()))


def ensure_valid(result: ValidationResult) -> None:
    if not result.valid:
        raise HTTPException(status_code=400, detail=result.error)


async def run_provider(
    provider: ImageProvider,
    request: ProviderGenerateRequest,
) -> GenerateSuccessResponse:
    """
    Call an adapter and map its failures to HTTP errors.

    Returns:
        Adapter result, guaranteed to carry a url or b64_json

    Raises:
        HTTPException: 401 for a missing credential, 500 for upstream failures
    """
    try:
        result = await provider.generate(request)
    except AuthenticationError as e:
        logger.warning(f"🔒 [Z-Image API] {provider.id}: {e.message}")
        raise HTTPException(status_code=401, detail=e.message)
    except ZImageError as e:
        logger.error(f"❌ [Z-Image API] {provider.id} error: {e.message}")
        raise HTTPException(status_code=500, detail=e.message)
    except Exception as e:
        logger.error(f"❌ [Z-Image API] {provider.id} unexpected error: {traceback.format_exc()}")
        raise HTTPException(status_code=500, detail=str(e) or "Image generation failed")

    if not result.has_image:
        logger.error(f"❌ [Z-Image API] {provider.id} returned no image")
        raise HTTPException(status_code=500, detail=f"No image returned from {provider.name or provider.id}")
    return result
