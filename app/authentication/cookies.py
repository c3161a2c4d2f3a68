"""
Cookie helpers for the refresh token and the OAuth state.

Refresh token cookie:
    refreshToken=<token>; HttpOnly; SameSite=Strict; Path=/; Max-Age=604800
    (Secure when REFRESH_TOKEN_COOKIE_SECURE, on by default outside DEBUG)

OAuth state cookie:
    <provider>_oauth_state=<state>; HttpOnly; Path=/; Max-Age=600; SameSite=Lax
    Apple posts its callback cross-site, so its state cookie is
    SameSite=None and always Secure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings

if TYPE_CHECKING:
    from django.http import HttpRequest, HttpResponse

OAUTH_STATE_MAX_AGE = 600


def _refresh_cookie_max_age() -> int:
    return int(settings.REFRESH_TOKEN_LIFETIME.total_seconds())


def set_refresh_cookie(response: HttpResponse, refresh_token: str) -> None:
    response.set_cookie(
        settings.REFRESH_TOKEN_COOKIE_NAME,
        refresh_token,
        max_age=_refresh_cookie_max_age(),
        path="/",
        secure=settings.REFRESH_TOKEN_COOKIE_SECURE,
        httponly=True,
        samesite="Strict",
    )


def clear_refresh_cookie(response: HttpResponse) -> None:
    response.delete_cookie(
        settings.REFRESH_TOKEN_COOKIE_NAME,
        path="/",
        samesite="Strict",
    )


def get_refresh_token(request, body_token: str | None = None) -> str | None:
    """Refresh token from the cookie, falling back to the request body."""
    return request.COOKIES.get(settings.REFRESH_TOKEN_COOKIE_NAME) or body_token or None


def oauth_state_cookie_name(provider: str) -> str:
    return f"{provider}_oauth_state"


def _state_cookie_attrs(provider: str) -> dict:
    if provider == "apple":
        return {"samesite": "None", "secure": True}
    return {"samesite": "Lax", "secure": settings.REFRESH_TOKEN_COOKIE_SECURE}


def set_oauth_state_cookie(response: HttpResponse, provider: str, state: str) -> None:
    response.set_cookie(
        oauth_state_cookie_name(provider),
        state,
        max_age=OAUTH_STATE_MAX_AGE,
        path="/",
        httponly=True,
        **_state_cookie_attrs(provider),
    )


def clear_oauth_state_cookie(response: HttpResponse, provider: str) -> None:
    attrs = _state_cookie_attrs(provider)
    response.delete_cookie(
        oauth_state_cookie_name(provider),
        path="/",
        samesite=attrs["samesite"],
    )


def get_oauth_state(request: HttpRequest, provider: str) -> str | None:
    return request.COOKIES.get(oauth_state_cookie_name(provider))
