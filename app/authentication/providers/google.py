"""Google OAuth 2.0 provider."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from authentication.providers.base import IdentityProvider, ProviderError, SocialIdentity


class GoogleProvider(IdentityProvider):
    name = "google"
    authorization_endpoint = "https://accounts.google.com/o/oauth2/v2/auth"
    token_endpoint = "https://oauth2.googleapis.com/token"
    userinfo_endpoint = "https://www.googleapis.com/oauth2/v2/userinfo"
    scope = "openid email profile"

    def extra_authorization_params(self) -> dict[str, str]:
        return {"access_type": "offline", "prompt": "consent"}

    def exchange_code(self, code: str) -> dict[str, Any]:
        return self._request_json(
            "POST",
            self.token_endpoint,
            "token_error",
            data={
                "code": code,
                "client_id": self.config["client_id"],
                "client_secret": self.config["client_secret"],
                "redirect_uri": self.redirect_uri,
                "grant_type": "authorization_code",
            },
        )

    def fetch_identity(
        self, token_data: dict[str, Any], callback_data: Mapping[str, Any]
    ) -> SocialIdentity:
        access_token = self._require_access_token(token_data)
        userinfo = self._request_json(
            "GET",
            self.userinfo_endpoint,
            "profile_error",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        email = userinfo.get("email")
        if not email:
            raise ProviderError(self.name, "email_missing")
        return SocialIdentity(
            email=email,
            verified_email=bool(userinfo.get("verified_email")),
            given_name=userinfo.get("given_name") or "",
            family_name=userinfo.get("family_name") or "",
        )
