"""
Companion client for the Z-Image API.

- api_client: Async httpx client for the /api surface
- flow_storage: Versioned local history of generated images
"""

from .api_client import ApiClientError, ZImageClient
from .flow_storage import (
    FlowInputSettings,
    FlowSession,
    FlowStorage,
    GeneratedImage,
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
)

__all__ = [
    "ApiClientError",
    "FlowInputSettings",
    "FlowSession",
    "FlowStorage",
    "GeneratedImage",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "ZImageClient",
]
