"""
Identity provider interface for social login.

Each provider turns an OAuth authorization code into a SocialIdentity,
the only shape the authentication flows depend on. Provider-specific
payloads never leave this package.

Flow:
    1. authorization_url(state) -> redirect the browser to the provider
    2. provider redirects back with ?code=...&state=...
    3. authenticate(code) -> exchange the code, fetch the identity

Related files:
    - google.py, facebook.py, apple.py: Concrete providers
    - services/auth_service.py: AuthService.social_login consumes identities
    - views.py: SocialLoginView / SocialCallbackView
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import httpx
from django.conf import settings

from core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SocialIdentity:
    """Normalized identity returned by every provider."""

    email: str
    verified_email: bool
    given_name: str = ""
    family_name: str = ""


class ProviderError(ExternalServiceError):
    """
    Raised when a provider exchange fails.

    The reason is a short slug (config, token_error, token_missing,
    profile_error, email_missing, invalid_response) that the callback view
    turns into ``<provider>_<reason>`` on the sign-in redirect.
    """

    def __init__(self, provider: str, reason: str, message: str | None = None):
        self.provider = provider
        self.reason = reason
        super().__init__(
            message or f"{provider} login failed ({reason})",
            error_code=f"{provider}_{reason}",
            details={"provider": provider},
        )


class IdentityProvider(ABC):
    """
    Base class for OAuth 2.0 authorization-code providers.

    Subclasses declare their endpoints and implement exchange_code() and
    fetch_identity(). Credentials come from settings.OAUTH_PROVIDERS[name].

    Attributes:
        name: Provider slug used in URLs, cookies and error codes
        authorization_endpoint: Provider consent page
        scope: Space-separated scopes requested
        required_settings: Keys of OAUTH_PROVIDERS[name] that must be set
    """

    name: str = ""
    authorization_endpoint: str = ""
    scope: str = ""
    required_settings: tuple[str, ...] = ("client_id", "client_secret")

    @property
    def config(self) -> dict[str, str]:
        return settings.OAUTH_PROVIDERS.get(self.name, {})

    @property
    def is_configured(self) -> bool:
        return all(self.config.get(key) for key in self.required_settings)

    @property
    def redirect_uri(self) -> str:
        return f"{settings.BACKEND_URL}/api/v1/auth/{self.name}/callback/"

    def extra_authorization_params(self) -> dict[str, str]:
        """Provider-specific query parameters for the consent page."""
        return {}

    def authorization_url(self, state: str) -> str:
        """
        Build the provider consent URL.

        Args:
            state: Random value echoed back by the provider and checked
                against the state cookie

        Raises:
            ProviderError: config, if credentials are missing
        """
        self.ensure_configured()
        params = {
            "client_id": self.config["client_id"],
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": self.scope,
            "state": state,
            **self.extra_authorization_params(),
        }
        return f"{self.authorization_endpoint}?{urlencode(params)}"

    def ensure_configured(self) -> None:
        if not self.is_configured:
            logger.error(f"{self.name} OAuth credentials are not configured")
            raise ProviderError(
                self.name,
                "config",
                f"{self.name.capitalize()} login is not available right now.",
            )

    def authenticate(
        self, code: str, callback_data: Mapping[str, Any] | None = None
    ) -> SocialIdentity:
        """
        Exchange an authorization code for a normalized identity.

        Args:
            code: Authorization code from the callback
            callback_data: Other callback parameters (Apple posts the
                user's name here on first sign-in)

        Raises:
            ProviderError: On any configuration, transport or payload failure
        """
        self.ensure_configured()
        token_data = self.exchange_code(code)
        identity = self.fetch_identity(token_data, callback_data or {})
        logger.info(f"{self.name} identity resolved (verified={identity.verified_email})")
        return identity

    @abstractmethod
    def exchange_code(self, code: str) -> dict[str, Any]:
        """Trade the authorization code for the provider's token response."""

    @abstractmethod
    def fetch_identity(
        self, token_data: dict[str, Any], callback_data: Mapping[str, Any]
    ) -> SocialIdentity:
        """Build a SocialIdentity from the token response."""

    def _request_json(
        self, method: str, url: str, failure_reason: str, **kwargs
    ) -> dict[str, Any]:
        """
        Perform one HTTP call to the provider and decode its JSON body.

        Args:
            method: HTTP method
            url: Endpoint URL
            failure_reason: Reason slug used when the call fails
            **kwargs: Passed to httpx.Client.request

        Raises:
            ProviderError: failure_reason on transport errors or non-2xx
                responses; invalid_response if the body is not a JSON object
        """
        try:
            with httpx.Client(timeout=settings.OAUTH_HTTP_TIMEOUT) as client:
                response = client.request(method, url, **kwargs)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"{self.name} {failure_reason}: HTTP {e.response.status_code} "
                f"{e.response.text[:200]}"
            )
            raise ProviderError(self.name, failure_reason) from e
        except httpx.HTTPError as e:
            logger.warning(f"{self.name} {failure_reason}: {e}")
            raise ProviderError(self.name, failure_reason) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderError(self.name, "invalid_response") from e
        if not isinstance(payload, dict):
            raise ProviderError(self.name, "invalid_response")
        return payload

    def _require_access_token(self, token_data: dict[str, Any]) -> str:
        access_token = token_data.get("access_token")
        if not access_token:
            logger.warning(f"{self.name} token response missing access_token")
            raise ProviderError(self.name, "token_missing")
        return access_token
