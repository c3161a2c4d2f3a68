"""
Social login identity providers.

Usage:
    from authentication.providers import get_provider

    provider = get_provider("google")
    url = provider.authorization_url(state)
    identity = provider.authenticate(code)
"""

from __future__ import annotations

from authentication.providers.apple import AppleProvider
from authentication.providers.base import IdentityProvider, ProviderError, SocialIdentity
from authentication.providers.facebook import FacebookProvider
from authentication.providers.google import GoogleProvider

PROVIDERS: dict[str, type[IdentityProvider]] = {
    provider.name: provider
    for provider in (GoogleProvider, FacebookProvider, AppleProvider)
}


def get_provider(name: str) -> IdentityProvider | None:
    """Return a provider instance by slug, or None if unknown."""
    provider_class = PROVIDERS.get(name)
    return provider_class() if provider_class else None


def configured_providers() -> dict[str, bool]:
    """Map each provider slug to whether its credentials are configured."""
    return {name: provider_class().is_configured for name, provider_class in PROVIDERS.items()}


__all__ = [
    "AppleProvider",
    "FacebookProvider",
    "GoogleProvider",
    "IdentityProvider",
    "ProviderError",
    "SocialIdentity",
    "configured_providers",
    "get_provider",
]
