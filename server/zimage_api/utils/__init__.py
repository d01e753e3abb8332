"""
Utility modules for the Z-Image API.

- validation: Prompt, dimension, step, scale and URL checks
"""

from .validation import (
    ValidationResult,
    is_allowed_image_url,
    validate_dimensions,
    validate_prompt,
    validate_scale,
    validate_steps,
)

__all__ = [
    "ValidationResult",
    "is_allowed_image_url",
    "validate_dimensions",
    "validate_prompt",
    "validate_scale",
    "validate_steps",
]
