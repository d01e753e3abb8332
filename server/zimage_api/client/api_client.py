"""
Async client for the Z-Image API.

Wraps the /api surface with httpx and raises ApiClientError carrying the
server's ``{"error": ...}`` message for any non-2xx response.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..clients.service_client import build_timeout
from ..models.catalog import PROVIDER_CONFIGS
from ..models.schemas import GenerateSuccessResponse

logger = logging.getLogger(__name__)


class ApiClientError(Exception):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"HTTP {status_code}: {message}")


class ZImageClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        tokens: Optional[Dict[str, str]] = None,
        timeout: float = 180.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Args:
            base_url: Server root (``/api`` is appended per call)
            tokens: Provider id -> credential; sent in that provider's auth header
            timeout: Request timeout in seconds
            transport: Optional custom transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.tokens = {key: value for key, value in (tokens or {}).items() if value}
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=build_timeout(timeout),
            transport=transport,
        )

    async def __aenter__(self) -> "ZImageClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    def _auth_headers(self, provider_id: str) -> Dict[str, str]:
        config = PROVIDER_CONFIGS.get(provider_id)
        token = self.tokens.get(provider_id)
        if config is None or not token:
            return {}
        return {config.auth_header: token}

    async def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        response = await self._client.request(method, f"/api{path}", **kwargs)
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if response.is_error:
            message = payload.get("error") if isinstance(payload, dict) else None
            raise ApiClientError(response.status_code, message or response.text[:200] or "Request failed")
        if not isinstance(payload, dict):
            raise ApiClientError(response.status_code, "Unexpected response body")
        return payload

    async def health(self) -> Dict[str, Any]:
        return await self._request("GET", "/")

    async def generate(
        self,
        prompt: str,
        provider: str = "gitee",
        model: Optional[str] = None,
        width: int = 1024,
        height: int = 1024,
        negative_prompt: Optional[str] = None,
        steps: Optional[int] = None,
        seed: Optional[int] = None,
        guidance_scale: Optional[float] = None,
    ) -> GenerateSuccessResponse:
        body: Dict[str, Any] = {
            "provider": provider,
            "model": model,
            "prompt": prompt,
            "negativePrompt": negative_prompt,
            "width": width,
            "height": height,
            "steps": steps,
            "seed": seed,
            "guidanceScale": guidance_scale,
        }
        payload = await self._request(
            "POST",
            "/generate",
            json={key: value for key, value in body.items() if value is not None},
            headers=self._auth_headers(provider),
        )
        return GenerateSuccessResponse.model_validate(payload)

    async def generate_hf(
        self,
        prompt: str,
        width: int = 1024,
        height: int = 1024,
        model: Optional[str] = None,
        seed: Optional[int] = None,
    ) -> GenerateSuccessResponse:
        body = {"prompt": prompt, "width": width, "height": height, "model": model, "seed": seed}
        payload = await self._request(
            "POST",
            "/generate-hf",
            json={key: value for key, value in body.items() if value is not None},
            headers=self._auth_headers("huggingface"),
        )
        return GenerateSuccessResponse.model_validate(payload)

    async def upscale(self, url: str, scale: float = 4) -> str:
        payload = await self._request(
            "POST",
            "/upscale",
            json={"url": url, "scale": scale},
            headers=self._auth_headers("huggingface"),
        )
        image_url = payload.get("url")
        if not image_url:
            raise ApiClientError(500, "No image returned")
        return image_url
