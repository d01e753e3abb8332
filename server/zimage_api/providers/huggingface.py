"""
HuggingFace Spaces provider.

Each supported model is served by a public Gradio space; the request is
mapped onto the space endpoint's positional arguments. A token is optional
and raises the caller's quota when present.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from ..clients.gradio import GradioClient
from ..core.exceptions import ProviderError
from ..models.catalog import DEFAULT_HF_MODEL, HF_MODEL_ALIASES, HF_SPACES, HuggingFaceSpace
from ..models.schemas import GenerateSuccessResponse
from .base import ImageProvider, ProviderGenerateRequest

logger = logging.getLogger(__name__)

DEFAULT_STEPS = 9


class HuggingFaceProvider(ImageProvider):
    id = "huggingface"
    name = "HuggingFace"

    def __init__(self, gradio_client: GradioClient) -> None:
        self.gradio_client = gradio_client

    def resolve_space(self, model: Optional[str]) -> HuggingFaceSpace:
        model_id = HF_MODEL_ALIASES.get(model or "", model or DEFAULT_HF_MODEL)
        space = HF_SPACES.get(model_id)
        if space is None or not space.arguments:
            space = HF_SPACES[DEFAULT_HF_MODEL]
        return space

    async def generate(self, request: ProviderGenerateRequest) -> GenerateSuccessResponse:
        prefix = self._get_log_prefix()
        space = self.resolve_space(request.model)
        data = self._build_data(space, request)
        logger.info(
            f"🎨 {prefix} Generating via {space.base_url} ({space.endpoint}), "
            f"size={request.size}, token={'yes' if request.auth_token else 'no'}"
        )

        start_time = time.time()
        result = await self.gradio_client.call(
            space.base_url, space.endpoint, data, request.auth_token
        )
        response = self._extract_image(result)
        logger.info(f"✅ {prefix} Image generated in {time.time() - start_time:.2f}s")
        return response

    def _build_data(self, space: HuggingFaceSpace, request: ProviderGenerateRequest) -> List[Any]:
        values: Dict[str, Any] = {
            "prompt": request.prompt,
            "width": request.width,
            "height": request.height,
            "steps": request.steps if request.steps is not None else DEFAULT_STEPS,
            "seed": request.seed if request.seed is not None else 0,
            "randomize_seed": request.seed is None,
        }
        return [values[name] for name in space.arguments]

    def _extract_image(self, result: Any) -> GenerateSuccessResponse:
        if not isinstance(result, list) or not result:
            raise ProviderError(f"No image returned from {self.name}")

        image = result[0]
        url = None
        if isinstance(image, dict):
            url = image.get("url")
        elif isinstance(image, str):
            url = image
        if not url:
            raise ProviderError(f"No image returned from {self.name}")

        seed = result[1] if len(result) > 1 else None
        if isinstance(seed, float) and seed.is_integer():
            seed = int(seed)
        return GenerateSuccessResponse(
            url=url,
            seed=seed if isinstance(seed, int) and not isinstance(seed, bool) else None,
        )
