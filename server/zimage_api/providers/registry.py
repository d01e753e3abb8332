"""
Provider registry.

The registry is built once during application startup, filled with the
default adapters (plus any extra ones passed to ``create_app``) and then
frozen. Request handlers only read from it.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from ..clients.gradio import GradioClient
from ..clients.service_client import ServiceClient
from ..core.config import Settings
from ..core.exceptions import UnknownProviderError
from .base import ImageProvider
from .gitee import GiteeProvider
from .huggingface import HuggingFaceProvider
from .modelscope import ModelScopeProvider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Mapping of provider id to adapter instance."""

    def __init__(self, providers: Optional[Iterable[ImageProvider]] = None) -> None:
        self._providers: Dict[str, ImageProvider] = {}
        self._frozen = False
        for provider in providers or ():
            self.register_provider(provider)

    def get_provider(self, provider_id: str) -> ImageProvider:
        """
        Get provider by id.

        Raises:
            UnknownProviderError: If no adapter is registered under ``provider_id``
        """
        provider = self._providers.get(provider_id)
        if provider is None:
            raise UnknownProviderError(provider_id)
        return provider

    def has_provider(self, provider_id: str) -> bool:
        return provider_id in self._providers

    def provider_ids(self) -> List[str]:
        return list(self._providers)

    def register_provider(self, provider: ImageProvider) -> None:
        """
        Register (or replace) an adapter.

        Raises:
            RuntimeError: If the registry has been frozen
        """
        if self._frozen:
            raise RuntimeError(
                f"Cannot register provider '{provider.id}': registry is frozen after startup"
            )
        if provider.id in self._providers:
            logger.info(f"🔁 [Registry] Replacing provider '{provider.id}'")
        self._providers[provider.id] = provider

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen


def build_default_registry(
    settings: Settings,
    service_client: ServiceClient,
    extra_providers: Optional[Iterable[ImageProvider]] = None,
) -> ProviderRegistry:
    """
    Build the registry with Gitee, HuggingFace and ModelScope adapters.

    Args:
        settings: Application settings (retry policy for Gradio calls)
        service_client: Shared upstream HTTP client
        extra_providers: Adapters registered after the defaults (may replace them)

    Returns:
        Unfrozen ProviderRegistry
    """
    gradio_client = GradioClient(
        service_client,
        max_attempts=settings.upstream_max_attempts,
        retry_backoff=settings.upstream_retry_backoff,
    )
    registry = ProviderRegistry([
        GiteeProvider(service_client),
        HuggingFaceProvider(gradio_client),
        ModelScopeProvider(service_client),
    ])
    for provider in extra_providers or ():
        registry.register_provider(provider)
    return registry
