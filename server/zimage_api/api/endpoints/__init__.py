"""
API Endpoints Package

Available Endpoints:
- system: Liveness probe, health and model catalog
- generation: Unified and legacy image generation
- upscale: Image upscaling
- openai_compat: OpenAI-compatible images API under /v1
"""
