"""
API package for the Z-Image API.

Route handlers live in ``endpoints``; ``dependencies`` exposes the objects
wired at startup (provider registry, upscale service, settings).
"""
