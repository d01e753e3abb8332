"""Image upscaling through the Real-ESRGAN HuggingFace space."""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from ..clients.gradio import GradioClient
from ..core.exceptions import ProviderError
from ..models.catalog import HF_SPACES

logger = logging.getLogger(__name__)

UPSCALE_MODEL = "RealESRGAN_x4plus"
DENOISE_STRENGTH = 0.5
FACE_ENHANCE = False


class UpscaleService:
    def __init__(self, gradio_client: GradioClient) -> None:
        self.gradio_client = gradio_client
        self.space = HF_SPACES["upscaler"]

    async def upscale(self, url: str, scale: float, hf_token: Optional[str] = None) -> str:
        """
        Upscale the image at ``url`` and return the result URL.

        The URL must already have passed the allow-list check.

        Raises:
            ProviderError: If the space fails or returns no image URL
        """
        start_time = time.time()
        logger.info(f"🔍 [Upscale] Upscaling x{scale} via {self.space.base_url}")
        data = await self.gradio_client.call(
            self.space.base_url,
            self.space.endpoint,
            [
                {"path": url, "meta": {"_type": "gradio.FileData"}},
                UPSCALE_MODEL,
                DENOISE_STRENGTH,
                FACE_ENHANCE,
                scale,
            ],
            hf_token,
        )

        image_url = _first_url(data)
        if not image_url:
            raise ProviderError("No image returned")
        logger.info(f"✅ [Upscale] Done in {time.time() - start_time:.2f}s")
        return image_url


def _first_url(data: Any) -> Optional[str]:
    if isinstance(data, list) and data and isinstance(data[0], dict):
        url = data[0].get("url")
        return url if isinstance(url, str) and url else None
    return None
