"""
Services package for the Z-Image API.

- model_resolver: Maps OpenAI-style model strings to provider + model id
- upscale_service: Real-ESRGAN upscaling through a HuggingFace space
"""
