"""
Core package for the Z-Image API.

This package contains:
- config: Application settings loaded from the environment
- exceptions: Error types raised by providers and clients
"""
