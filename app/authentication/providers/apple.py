"""
Sign in with Apple provider.

Apple differs from the other providers in three ways:
    - The client secret is a short-lived ES256 JWT signed with the team's
      private key instead of a static string
    - The identity comes from the id_token returned by the token endpoint;
      there is no userinfo endpoint
    - The callback is a cross-site form POST (response_mode=form_post), and
      the user's name is only posted on the very first sign-in
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Mapping
from typing import Any

import jwt

from authentication.providers.base import IdentityProvider, ProviderError, SocialIdentity

logger = logging.getLogger(__name__)

APPLE_ISSUER = "https://appleid.apple.com"
CLIENT_SECRET_LIFETIME_SECONDS = 60 * 60 * 24


class AppleProvider(IdentityProvider):
    name = "apple"
    authorization_endpoint = "https://appleid.apple.com/auth/authorize"
    token_endpoint = "https://appleid.apple.com/auth/token"
    scope = "name email"
    required_settings = ("client_id", "team_id", "key_id", "private_key")

    def extra_authorization_params(self) -> dict[str, str]:
        return {"response_mode": "form_post"}

    def client_secret(self) -> str:
        """Sign the client secret JWT Apple expects at the token endpoint."""
        now = int(time.time())
        private_key = self.config["private_key"].replace("\\n", "\n")
        try:
            return jwt.encode(
                {
                    "iss": self.config["team_id"],
                    "iat": now,
                    "exp": now + CLIENT_SECRET_LIFETIME_SECONDS,
                    "aud": APPLE_ISSUER,
                    "sub": self.config["client_id"],
                },
                private_key,
                algorithm="ES256",
                headers={"kid": self.config["key_id"]},
            )
        except (jwt.PyJWTError, ValueError) as e:
            logger.error(f"Could not sign Apple client secret: {e}")
            raise ProviderError(self.name, "config") from e

    def exchange_code(self, code: str) -> dict[str, Any]:
        return self._request_json(
            "POST",
            self.token_endpoint,
            "token_error",
            data={
                "client_id": self.config["client_id"],
                "client_secret": self.client_secret(),
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": self.redirect_uri,
            },
        )

    def fetch_identity(
        self, token_data: dict[str, Any], callback_data: Mapping[str, Any]
    ) -> SocialIdentity:
        id_token = token_data.get("id_token")
        if not id_token:
            logger.warning("apple token response missing id_token")
            raise ProviderError(self.name, "token_missing")

        # The token came straight from Apple over TLS, so the signature is
        # not re-verified here
        try:
            claims = jwt.decode(id_token, options={"verify_signature": False})
        except jwt.PyJWTError as e:
            raise ProviderError(self.name, "invalid_response") from e

        email = claims.get("email")
        if not email:
            raise ProviderError(self.name, "email_missing")

        given_name, family_name = self._posted_name(callback_data)
        return SocialIdentity(
            email=email,
            verified_email=str(claims.get("email_verified", "")).lower() == "true",
            given_name=given_name,
            family_name=family_name,
        )

    @staticmethod
    def _posted_name(callback_data: Mapping[str, Any]) -> tuple[str, str]:
        """Read ``user={"name": {"firstName", "lastName"}}`` from the callback form."""
        raw = callback_data.get("user")
        if not raw:
            return "", ""
        try:
            name = json.loads(raw).get("name") or {}
        except (TypeError, ValueError, AttributeError):
            logger.debug("Ignoring malformed Apple user payload")
            return "", ""
        if not isinstance(name, dict):
            logger.debug("Ignoring Apple user payload without a name object")
            return "", ""
        return name.get("firstName") or "", name.get("lastName") or ""
