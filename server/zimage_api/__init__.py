"""Z-Image API: unified gateway for Gitee AI, HuggingFace and ModelScope image generation."""

from __future__ import annotations

from .main import create_app

__all__ = ["create_app"]
