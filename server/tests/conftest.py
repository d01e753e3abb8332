"""
Shared fixtures.

The network layer is replaced by httpx.MockTransport so no test ever reaches
a real provider; every outbound request is recorded for call-count checks.
"""

from __future__ import annotations

import json
from typing import Callable, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from zimage_api.clients.gradio import GradioClient
from zimage_api.clients.service_client import ServiceClient
from zimage_api.core.config import Settings
from zimage_api.main import create_app

GITEE_URL = "https://ai.gitee.com/v1/images/generations"
MODELSCOPE_URL = "https://api-inference.modelscope.cn/v1/images/generations"


class FakeUpstream:
    """Records outbound requests and answers them with a configurable handler."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.handler: Optional[Callable[[httpx.Request], httpx.Response]] = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.handler is None:
            return httpx.Response(599, text="no handler configured")
        return self.handler(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def json_body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


def sse(*events: tuple) -> str:
    """Build a server-sent-events body from (event, data) pairs."""
    return "".join(f"event: {event}\ndata: {data}\n\n" for event, data in events)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        CORS_ORIGINS="http://localhost:5173",
        UPSTREAM_MAX_ATTEMPTS=2,
        UPSTREAM_RETRY_BACKOFF=0.0,
    )


@pytest.fixture
def service_client(upstream: FakeUpstream) -> ServiceClient:
    return ServiceClient(timeout=5.0, transport=httpx.MockTransport(upstream))


@pytest.fixture
def gradio_client(service_client: ServiceClient) -> GradioClient:
    return GradioClient(service_client, max_attempts=2, retry_backoff=0.0)


@pytest.fixture
def app(test_settings: Settings, service_client: ServiceClient):
    return create_app(settings=test_settings, service_client=service_client)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
