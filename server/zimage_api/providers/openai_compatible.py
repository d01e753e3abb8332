"""
Shared adapter for OpenAI-compatible ``images/generations`` endpoints.

Gitee AI and ModelScope both accept the OpenAI image request shape plus a few
provider-specific fields (negative prompt, steps, guidance, seed).
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import httpx

from ..clients.service_client import ServiceClient, bearer_headers, describe_request_error
from ..core.exceptions import AuthenticationError, ProviderError
from ..models.schemas import GenerateSuccessResponse
from .base import ImageProvider, ProviderGenerateRequest

logger = logging.getLogger(__name__)

DEFAULT_STEPS = 9


class OpenAICompatibleProvider(ImageProvider):
    base_url: str = ""
    default_model: str = ""

    def __init__(self, service_client: ServiceClient, base_url: Optional[str] = None) -> None:
        self.service_client = service_client
        if base_url:
            self.base_url = base_url.rstrip("/")

    async def generate(self, request: ProviderGenerateRequest) -> GenerateSuccessResponse:
        if not request.auth_token or not request.auth_token.strip():
            raise AuthenticationError(f"API Key is required for {self.name}")

        prefix = self._get_log_prefix()
        payload = self._build_payload(request)
        url = f"{self.base_url}/images/generations"
        logger.info(
            f"🎨 {prefix} Generating: model='{payload['model']}', size={payload['size']}, "
            f"prompt='{request.prompt[:50]}'"
        )

        start_time = time.time()
        try:
            data = await self.service_client.post_json(
                url, json=payload, headers=bearer_headers(request.auth_token)
            )
        except httpx.HTTPStatusError as e:
            raise ProviderError(self._status_error_message(e.response)) from e
        except httpx.RequestError as e:
            raise ProviderError(describe_request_error(e)) from e
        except ValueError as e:
            raise ProviderError(f"Invalid response from {self.name}") from e

        result = self._extract_image(data)
        logger.info(f"✅ {prefix} Image generated in {time.time() - start_time:.2f}s")
        return result

    def _build_payload(self, request: ProviderGenerateRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "prompt": request.prompt,
            "model": request.model or self.default_model,
            "size": request.size,
            "negative_prompt": request.negative_prompt or "",
            "num_inference_steps": request.steps if request.steps is not None else DEFAULT_STEPS,
        }
        if request.guidance_scale is not None:
            payload["guidance_scale"] = request.guidance_scale
        if request.seed is not None:
            payload["seed"] = request.seed
        return payload

    def _extract_image(self, data: Any) -> GenerateSuccessResponse:
        items = None
        if isinstance(data, dict):
            items = data.get("data") or data.get("images")
        image = items[0] if isinstance(items, list) and items else None
        if not isinstance(image, dict) or not (image.get("url") or image.get("b64_json")):
            raise ProviderError(f"No image returned from {self.name}")

        seed = image.get("seed")
        return GenerateSuccessResponse(
            url=image.get("url"),
            b64_json=image.get("b64_json"),
            seed=seed if isinstance(seed, int) and not isinstance(seed, bool) else None,
        )

    def _status_error_message(self, response: httpx.Response) -> str:
        """Prefer the provider's own error message over the bare status."""
        detail: Any = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            detail = body.get("error") or body.get("message") or body.get("errors")
            if isinstance(detail, dict):
                detail = detail.get("message")
        if detail:
            return f"{self.name} error ({response.status_code}): {detail}"
        return f"{self.name} request failed with status {response.status_code}"
