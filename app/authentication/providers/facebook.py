"""
Facebook Login provider.

Facebook only exposes confirmed email addresses through the Graph API, so
any email it returns is treated as verified.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from authentication.providers.base import IdentityProvider, ProviderError, SocialIdentity

GRAPH_API_VERSION = "v16.0"


class FacebookProvider(IdentityProvider):
    name = "facebook"
    authorization_endpoint = f"https://www.facebook.com/{GRAPH_API_VERSION}/dialog/oauth"
    token_endpoint = f"https://graph.facebook.com/{GRAPH_API_VERSION}/oauth/access_token"
    userinfo_endpoint = "https://graph.facebook.com/me"
    scope = "email public_profile"

    def extra_authorization_params(self) -> dict[str, str]:
        # Ask again for the email permission if it was declined before
        return {"auth_type": "rerequest"}

    def exchange_code(self, code: str) -> dict[str, Any]:
        return self._request_json(
            "GET",
            self.token_endpoint,
            "token_error",
            params={
                "client_id": self.config["client_id"],
                "client_secret": self.config["client_secret"],
                "redirect_uri": self.redirect_uri,
                "code": code,
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
            params={
                "access_token": access_token,
                "fields": "id,email,first_name,last_name",
            },
        )
        email = userinfo.get("email")
        if not email:
            raise ProviderError(self.name, "email_missing")
        return SocialIdentity(
            email=email,
            verified_email=True,
            given_name=userinfo.get("first_name") or "",
            family_name=userinfo.get("last_name") or "",
        )
