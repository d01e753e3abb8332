"""
Tests for the Gradio queue/poll client and SSE parsing.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from conftest import sse
from zimage_api.clients.gradio import (
    QUOTA_EXHAUSTED_MESSAGE,
    GradioClient,
    extract_complete_event_data,
)
from zimage_api.core.exceptions import ProviderError, QuotaExhaustedError

SPACE_URL = "https://owner-space.hf.space"


def gradio_handler(sse_body: str, event_id: str = "evt-1"):
    """Queue POST returns an event id, the poll GET returns ``sse_body``."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return httpx.Response(200, json={"event_id": event_id})
        return httpx.Response(200, text=sse_body)

    return handler


# ============================================================================
# extract_complete_event_data
# ============================================================================


class TestExtractCompleteEventData:
    """Test cases for SSE scanning."""

    def test_returns_data_after_complete(self):
        body = sse(
            ("generating", "null"),
            ("complete", '[{"url": "https://x.hf.space/file=a.png"}, 42]'),
        )
        assert extract_complete_event_data(body) == [{"url": "https://x.hf.space/file=a.png"}, 42]

    def test_handles_crlf_line_endings(self):
        body = 'event: complete\r\ndata: ["ok"]\r\n\r\n'
        assert extract_complete_event_data(body) == ["ok"]

    def test_ignores_data_of_other_events(self):
        body = sse(("heartbeat", '["not this"]'), ("complete", '["this"]'))
        assert extract_complete_event_data(body) == ["this"]

    def test_error_event_raises_quota_exhausted(self):
        body = sse(("error", "null"))
        with pytest.raises(QuotaExhaustedError) as exc_info:
            extract_complete_event_data(body)
        assert exc_info.value.message == QUOTA_EXHAUSTED_MESSAGE

    def test_error_event_is_a_provider_error(self):
        with pytest.raises(ProviderError):
            extract_complete_event_data(sse(("error", "null")))

    def test_no_complete_event_includes_truncated_body(self):
        body = "event: heartbeat\ndata: null\n" + "x" * 500
        with pytest.raises(ProviderError) as exc_info:
            extract_complete_event_data(body)
        message = exc_info.value.message
        assert message.startswith("No complete event in response: event: heartbeat")
        assert len(message) == len("No complete event in response: ") + 200

    def test_invalid_json_after_complete(self):
        with pytest.raises(ProviderError, match="Invalid complete event data"):
            extract_complete_event_data(sse(("complete", "{not json")))


# ============================================================================
# GradioClient.call
# ============================================================================


class TestGradioClientCall:
    """Test cases for the two-step queue/poll call."""

    def test_posts_data_then_polls_event(self, upstream, gradio_client):
        upstream.handler = gradio_handler(sse(("complete", '["done"]')), event_id="abc123")

        result = asyncio.run(
            gradio_client.call(SPACE_URL + "/", "generate_image", ["a cat", 1024], "hf_token")
        )

        assert result == ["done"]
        assert upstream.call_count == 2
        queue, poll = upstream.requests
        assert queue.method == "POST"
        assert str(queue.url) == f"{SPACE_URL}/gradio_api/call/generate_image"
        assert upstream.json_body(0) == {"data": ["a cat", 1024]}
        assert queue.headers["Authorization"] == "Bearer hf_token"
        assert poll.method == "GET"
        assert str(poll.url) == f"{SPACE_URL}/gradio_api/call/generate_image/abc123"

    def test_no_token_sends_no_authorization(self, upstream, gradio_client):
        upstream.handler = gradio_handler(sse(("complete", "[1]")))

        asyncio.run(gradio_client.call(SPACE_URL, "infer", []))

        assert "Authorization" not in upstream.requests[0].headers

    def test_queue_failure_status(self, upstream, gradio_client):
        upstream.handler = lambda request: httpx.Response(503, text="busy")

        with pytest.raises(ProviderError, match="Queue request failed: 503"):
            asyncio.run(gradio_client.call(SPACE_URL, "infer", []))
        # HTTP status failures are not retried
        assert upstream.call_count == 1

    def test_missing_event_id(self, upstream, gradio_client):
        upstream.handler = lambda request: httpx.Response(200, json={"status": "queued"})

        with pytest.raises(ProviderError, match="No event_id returned"):
            asyncio.run(gradio_client.call(SPACE_URL, "infer", []))

    def test_error_event_propagates(self, upstream, gradio_client):
        upstream.handler = gradio_handler(sse(("error", "null")))

        with pytest.raises(QuotaExhaustedError):
            asyncio.run(gradio_client.call(SPACE_URL, "infer", []))


class TestGradioClientRetry:
    """Transport failures are retried up to max_attempts."""

    def test_recovers_after_transient_connect_error(self, upstream, gradio_client):
        success = gradio_handler(sse(("complete", '["ok"]')))
        failures = {"remaining": 1}

        def handler(request: httpx.Request) -> httpx.Response:
            if failures["remaining"]:
                failures["remaining"] -= 1
                raise httpx.ConnectError("connection refused", request=request)
            return success(request)

        upstream.handler = handler

        assert asyncio.run(gradio_client.call(SPACE_URL, "infer", [])) == ["ok"]
        assert upstream.call_count == 3

    def test_gives_up_after_max_attempts(self, upstream, gradio_client):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        upstream.handler = handler

        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(gradio_client.call(SPACE_URL, "infer", []))
        assert "after 2 attempt(s)" in exc_info.value.message
        assert "Timeout error" in exc_info.value.message
        assert upstream.call_count == 2

    def test_poll_timeout_does_not_resubmit_job(self, upstream, gradio_client):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(200, json={"event_id": "evt-9"})
            raise httpx.ReadTimeout("stream stalled", request=request)

        upstream.handler = handler

        with pytest.raises(ProviderError, match="after 2 attempt"):
            asyncio.run(gradio_client.call(SPACE_URL, "infer", ["a cat"]))

        methods = [request.method for request in upstream.requests]
        assert methods.count("POST") == 1
        assert methods.count("GET") == 2
        assert all(
            request.url.path.endswith("/evt-9") for request in upstream.requests if request.method == "GET"
        )

    def test_poll_recovers_on_same_event(self, upstream, gradio_client):
        polls = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(200, json={"event_id": "evt-2"})
            polls["count"] += 1
            if polls["count"] == 1:
                raise httpx.ReadTimeout("stream stalled", request=request)
            return httpx.Response(200, text=sse(("complete", '["late"]')))

        upstream.handler = handler

        assert asyncio.run(gradio_client.call(SPACE_URL, "infer", [])) == ["late"]
        assert [request.method for request in upstream.requests] == ["POST", "GET", "GET"]

    def test_single_attempt_when_disabled(self, upstream, service_client):
        client = GradioClient(service_client, max_attempts=1, retry_backoff=0.0)

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        upstream.handler = handler

        with pytest.raises(ProviderError):
            asyncio.run(client.call(SPACE_URL, "infer", []))
        assert upstream.call_count == 1

    def test_backoff_is_capped(self, upstream, service_client, monkeypatch):
        delays = []

        async def fake_sleep(delay):
            delays.append(delay)

        monkeypatch.setattr("zimage_api.clients.gradio.asyncio.sleep", fake_sleep)
        client = GradioClient(service_client, max_attempts=5, retry_backoff=4.0)

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        upstream.handler = handler

        with pytest.raises(ProviderError):
            asyncio.run(client.call(SPACE_URL, "infer", []))
        assert delays == [4.0, 8.0, 10.0, 10.0]
