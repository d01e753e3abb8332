"""
Gradio queue/poll protocol used by HuggingFace Spaces.

A call is two requests:
1. POST {space}/gradio_api/call/{endpoint} with {"data": [...]} -> {"event_id": ...}
2. GET  {space}/gradio_api/call/{endpoint}/{event_id} -> server-sent events

The result is the JSON payload of the ``data:`` line following
``event: complete``. An ``event: error`` means the space refused the job,
which in practice is quota or token exhaustion.

Transport failures (connect errors, timeouts) are retried a bounded number of
times with capped exponential backoff, separately for the submit and the poll
request. Protocol failures are reported on first occurrence.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from ..core.exceptions import ProviderError, QuotaExhaustedError
from .service_client import ServiceClient, bearer_headers, describe_request_error

logger = logging.getLogger(__name__)

QUOTA_EXHAUSTED_MESSAGE = "Quota exhausted, please set HF Token"
RAW_SNIPPET_LENGTH = 200
MAX_BACKOFF_SECONDS = 10.0


def extract_complete_event_data(sse_stream: str) -> Any:
    """
    Scan an SSE body for the ``complete`` event and decode its data.

    Args:
        sse_stream: Raw text of the event stream

    Returns:
        Decoded JSON value of the first ``data:`` line after ``event: complete``

    Raises:
        QuotaExhaustedError: On an ``event: error`` line
        ProviderError: If no complete event is present, or its data is not JSON
    """
    is_complete_event = False

    for line in sse_stream.split("\n"):
        line = line.rstrip("\r")
        if line.startswith("event:"):
            event_type = line[len("event:"):].strip()
            if event_type == "complete":
                is_complete_event = True
            elif event_type == "error":
                raise QuotaExhaustedError(QUOTA_EXHAUSTED_MESSAGE)
            else:
                is_complete_event = False
        elif line.startswith("data:") and is_complete_event:
            payload = line[len("data:"):].strip()
            try:
                return json.loads(payload)
            except json.JSONDecodeError as e:
                raise ProviderError(f"Invalid complete event data: {payload[:RAW_SNIPPET_LENGTH]}") from e

    raise ProviderError(f"No complete event in response: {sse_stream[:RAW_SNIPPET_LENGTH]}")


class GradioClient:
    """Calls Gradio endpoints through a shared ServiceClient."""

    def __init__(
        self,
        service_client: ServiceClient,
        max_attempts: int = 1,
        retry_backoff: float = 1.0,
    ) -> None:
        self.service_client = service_client
        self.max_attempts = max(1, max_attempts)
        self.retry_backoff = max(0.0, retry_backoff)

    async def call(
        self,
        base_url: str,
        endpoint: str,
        data: List[Any],
        hf_token: Optional[str] = None,
    ) -> Any:
        """
        Submit a job and wait for its result.

        The queue POST and the result GET are retried independently, so a
        failed poll never submits the job a second time.

        Args:
            base_url: Space base URL, e.g. https://owner-space.hf.space
            endpoint: Gradio API endpoint name
            data: Positional endpoint arguments
            hf_token: Optional HuggingFace token, sent as a bearer token

        Returns:
            Decoded ``complete`` event payload (a list for Gradio endpoints)
        """
        call_url = f"{base_url.rstrip('/')}/gradio_api/call/{endpoint}"
        headers = bearer_headers(hf_token)

        event_id = await self._with_retries(
            f"{endpoint} submit", lambda: self._submit(call_url, data, headers)
        )
        logger.info(f"📨 [Gradio] {endpoint} queued as event {event_id}")
        return await self._with_retries(
            f"{endpoint} poll", lambda: self._poll(f"{call_url}/{event_id}", headers)
        )

    async def _with_retries(self, label: str, send: Callable[[], Awaitable[Any]]) -> Any:
        last_error: Optional[httpx.RequestError] = None
        for attempt in range(self.max_attempts):
            if attempt:
                delay = min(self.retry_backoff * (2 ** (attempt - 1)), MAX_BACKOFF_SECONDS)
                logger.info(
                    f"🔄 [Gradio] Retrying {label} ({attempt + 1}/{self.max_attempts}) in {delay:.1f}s"
                )
                await asyncio.sleep(delay)
            try:
                return await send()
            except httpx.RequestError as e:
                last_error = e
                logger.warning(f"⚠️ [Gradio] {label} transport failure: {describe_request_error(e)}")

        raise ProviderError(
            f"Upstream request failed after {self.max_attempts} attempt(s): "
            f"{describe_request_error(last_error)}"
        )

    async def _submit(self, call_url: str, data: List[Any], headers: Dict[str, str]) -> str:
        queue = await self.service_client.post(call_url, json={"data": data}, headers=headers)
        if not queue.is_success:
            raise ProviderError(f"Queue request failed: {queue.status_code}")

        try:
            queue_data = queue.json()
        except ValueError:
            queue_data = None
        event_id = queue_data.get("event_id") if isinstance(queue_data, dict) else None
        if not event_id:
            raise ProviderError("No event_id returned")
        return event_id

    async def _poll(self, result_url: str, headers: Dict[str, str]) -> Any:
        result = await self.service_client.get(result_url, headers=headers)
        return extract_complete_event_data(result.text)
