"""
Image provider adapters.

- base: ImageProvider interface and ProviderGenerateRequest
- gitee / modelscope: OpenAI-compatible images APIs
- huggingface: Gradio spaces
- registry: ProviderRegistry built at startup
"""

from .base import ImageProvider, ProviderGenerateRequest
from .gitee import GiteeProvider
from .huggingface import HuggingFaceProvider
from .modelscope import ModelScopeProvider
from .registry import ProviderRegistry, build_default_registry

__all__ = [
    "GiteeProvider",
    "HuggingFaceProvider",
    "ImageProvider",
    "ModelScopeProvider",
    "ProviderGenerateRequest",
    "ProviderRegistry",
    "build_default_registry",
]
