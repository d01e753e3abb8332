from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Optional

from ..models.schemas import GenerateSuccessResponse


@dataclass
class ProviderGenerateRequest:
    """Unified generate request handed to an adapter, plus the caller's token."""

    prompt: str
    width: int = 1024
    height: int = 1024
    model: Optional[str] = None
    negative_prompt: Optional[str] = None
    steps: Optional[int] = None
    seed: Optional[int] = None
    guidance_scale: Optional[float] = None
    auth_token: Optional[str] = None

    @property
    def size(self) -> str:
        return f"{self.width}x{self.height}"


class ImageProvider(abc.ABC):
    """Adapter between the unified contract and one provider's API."""

    id: str = ""
    name: str = ""

    @abc.abstractmethod
    async def generate(self, request: ProviderGenerateRequest) -> GenerateSuccessResponse:
        """Generate one image; raise ProviderError when no image comes back."""

    def _get_log_prefix(self) -> str:
        return f"[{self.name or self.id}]"
