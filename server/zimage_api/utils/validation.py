"""
Input validation for generation and upscale requests.

All checks are pure and run before any provider is contacted, so an invalid
request never costs an upstream call.
"""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Real
from typing import Any, Optional
from urllib.parse import urlsplit

MAX_PROMPT_LENGTH = 10000

MIN_DIMENSION = 256
MAX_DIMENSION = 2048
DIMENSION_ALIGNMENT = 8

MIN_STEPS = 1
MAX_STEPS = 50

MIN_SCALE = 1
MAX_SCALE = 4

# Upscale sources must live on one of these hosts (or a subdomain)
ALLOWED_IMAGE_HOSTS = (
    "hf.space",
    "huggingface.co",
    "gitee.com",
    "giteeai.com",
    "modelscope.cn",
    "aliyuncs.com",
)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None


_OK = ValidationResult(valid=True)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_prompt(prompt: Any) -> ValidationResult:
    if prompt is None or not isinstance(prompt, str):
        return ValidationResult(False, "Prompt is required")
    if not prompt.strip():
        return ValidationResult(False, "Prompt cannot be empty")
    if len(prompt) > MAX_PROMPT_LENGTH:
        return ValidationResult(
            False, f"Prompt exceeds maximum length of {MAX_PROMPT_LENGTH} characters"
        )
    return _OK


def validate_dimensions(width: Any, height: Any) -> ValidationResult:
    """
    Validate output size.

    Both sides must be integers in [MIN_DIMENSION, MAX_DIMENSION] and a
    multiple of DIMENSION_ALIGNMENT.
    """
    for name, value in (("Width", width), ("Height", height)):
        if not _is_int(value):
            return ValidationResult(False, f"{name} must be an integer")
        if value <= 0:
            return ValidationResult(False, f"{name} must be positive")
        if value < MIN_DIMENSION or value > MAX_DIMENSION:
            return ValidationResult(
                False, f"{name} must be between {MIN_DIMENSION} and {MAX_DIMENSION}"
            )
        if value % DIMENSION_ALIGNMENT != 0:
            return ValidationResult(
                False, f"{name} must be a multiple of {DIMENSION_ALIGNMENT}"
            )
    return _OK


def validate_steps(steps: Any) -> ValidationResult:
    if not _is_int(steps) or steps < MIN_STEPS or steps > MAX_STEPS:
        return ValidationResult(
            False, f"Steps must be an integer between {MIN_STEPS} and {MAX_STEPS}"
        )
    return _OK


def validate_scale(scale: Any) -> ValidationResult:
    if (
        not isinstance(scale, Real)
        or isinstance(scale, bool)
        or scale < MIN_SCALE
        or scale > MAX_SCALE
    ):
        return ValidationResult(
            False, f"Scale must be between {MIN_SCALE} and {MAX_SCALE}"
        )
    return _OK


def is_allowed_image_url(url: Any) -> bool:
    """Only https URLs on allow-listed hosts, without embedded credentials."""
    if not isinstance(url, str) or not url:
        return False
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
        # Accessing .port raises on malformed ports
        parts.port
    except ValueError:
        return False
    if parts.scheme != "https" or not hostname:
        return False
    if parts.username or parts.password:
        return False
    hostname = hostname.lower().rstrip(".")
    return any(
        hostname == allowed or hostname.endswith("." + allowed)
        for allowed in ALLOWED_IMAGE_HOSTS
    )
