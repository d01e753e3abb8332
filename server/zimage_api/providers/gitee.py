"""Gitee AI provider (OpenAI-compatible images API)."""

from __future__ import annotations

from ..models.catalog import PROVIDER_CONFIGS
from .openai_compatible import OpenAICompatibleProvider


class GiteeProvider(OpenAICompatibleProvider):
    id = "gitee"
    name = "Gitee AI"

    base_url = PROVIDER_CONFIGS["gitee"].base_url
    default_model = "z-image-turbo"
