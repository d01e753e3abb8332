"""Exception hierarchy shared by providers, clients and endpoints."""

from __future__ import annotations


class ZImageError(Exception):
    """Base exception for Z-Image API errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ProviderError(ZImageError):
    """An upstream provider failed or returned an unusable result."""


class QuotaExhaustedError(ProviderError):
    """The upstream space reported an error event (quota or token problem)."""


class AuthenticationError(ZImageError):
    """A provider that needs a credential was called without one."""


class UnknownProviderError(ZImageError, LookupError):
    """Lookup of a provider id that is not registered."""

    def __init__(self, provider_id: str):
        self.provider_id = provider_id
        super().__init__(f"Unknown provider: {provider_id}")
