"""
HTTP client for calling upstream image providers.

This module provides a ServiceClient class wrapping a shared httpx.AsyncClient
with explicit timeouts, redirect following and error logging.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


def build_timeout(timeout: float, connect: Optional[float] = None) -> httpx.Timeout:
    """
    Build an httpx.Timeout for provider calls.

    Args:
        timeout: Read, write and pool timeout in seconds
        connect: Connect timeout in seconds (defaults to ``timeout``)
    """
    return httpx.Timeout(
        timeout,
        connect=connect if connect is not None else timeout,
        read=timeout,
        write=timeout,
        pool=timeout,
    )


def bearer_headers(token: Optional[str]) -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token.strip()}"
    return headers


def describe_request_error(error: Exception) -> str:
    """
    Map an httpx transport error to a readable message.

    Args:
        error: Exception raised by httpx

    Returns:
        Formatted error message string
    """
    if not isinstance(error, httpx.RequestError):
        return str(error) if error else "Unknown error"

    error_msg = str(error)
    if isinstance(error, httpx.TimeoutException):
        return f"Timeout error: Request timed out. {error_msg}".strip()
    if isinstance(error, httpx.ConnectError):
        return f"Connection error: Unable to connect to provider. {error_msg}".strip()
    if isinstance(error, httpx.NetworkError):
        return f"Network error: {error_msg}"
    error_type = type(error).__name__
    return f"{error_type}: {error_msg}" if error_msg else f"{error_type}: Connection failed"


class ServiceClient:
    """
    Async HTTP client shared by the provider adapters.

    Handles:
    - Async HTTP requests with configurable timeouts
    - Automatic redirect following
    - Error logging (status codes and truncated bodies, never credentials)
    """

    def __init__(
        self,
        timeout: float = 120.0,
        connect_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize service client.

        Args:
            timeout: Request timeout in seconds
            connect_timeout: Connect timeout in seconds (defaults to ``timeout``)
            transport: Optional custom transport (used by tests)
        """
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            timeout=build_timeout(timeout, connect_timeout),
            follow_redirects=True,
            transport=transport,
        )

    async def post(
        self,
        url: str,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """
        Make POST request and return the raw response.

        Status handling is left to the caller.

        Raises:
            httpx.RequestError: If request fails (network error, timeout, etc.)
        """
        logger.info(f"🌐 [ServiceClient] POST {url}")
        try:
            response = await self._client.post(url, json=json, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"❌ [ServiceClient] POST {url} failed: {describe_request_error(e)}")
            raise
        logger.info(f"📡 [ServiceClient] POST {url} returned HTTP {response.status_code}")
        return response

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        """
        Make GET request and return the raw response.

        Raises:
            httpx.RequestError: If request fails (network error, timeout, etc.)
        """
        try:
            response = await self._client.get(url, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"❌ [ServiceClient] GET {url} failed: {describe_request_error(e)}")
            raise
        logger.info(f"📡 [ServiceClient] GET {url} returned HTTP {response.status_code}")
        return response

    async def post_json(
        self,
        url: str,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        POST and decode a JSON object body.

        Raises:
            httpx.HTTPStatusError: If response status is not 2xx
            httpx.RequestError: If request fails
            ValueError: If the body is not JSON
        """
        response = await self.post(url, json=json, headers=headers)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError:
            logger.error(
                f"❌ [ServiceClient] POST {url} returned HTTP {response.status_code}: "
                f"{response.text[:500]}"
            )
            raise
        return response.json()

    async def close(self) -> None:
        """Close HTTP client and release resources."""
        await self._client.aclose()
