"""
Upstream HTTP clients.

- service_client: Shared httpx.AsyncClient wrapper with timeouts and logging
- gradio: Gradio queue/poll protocol for HuggingFace Spaces
"""

from .gradio import GradioClient, extract_complete_event_data
from .service_client import ServiceClient

__all__ = ["GradioClient", "ServiceClient", "extract_complete_event_data"]
