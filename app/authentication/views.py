"""
Authentication views.

This module provides API views for:
- Session lifecycle: register, login, refresh, logout
- Email verification and password reset (token and 6-digit code variants)
- Social login redirects and callbacks (Google, Facebook, Apple)
- Current user's profile and role changes
- Demo endpoints gated by authentication and role

Related files:
    - serializers.py: Request/response serialization
    - services/: Business logic (AuthService, TokenService)
    - providers/: Social identity providers
    - cookies.py: Refresh token and OAuth state cookies
    - urls.py: URL routing

Note:
    Public endpoints disable authentication entirely, so a stale or
    malformed Authorization header never blocks login or refresh.
    Business errors are raised as core.exceptions and rendered by
    core.exception_handler as ``{"error": ..., "code": ...}``.
"""

from __future__ import annotations

import base64
import json
import logging
import re
from urllib.parse import quote

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.http import HttpResponseRedirect
from django.utils import timezone
from django.utils.crypto import constant_time_compare
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.cookies import (
    clear_oauth_state_cookie,
    clear_refresh_cookie,
    get_oauth_state,
    get_refresh_token,
    set_oauth_state_cookie,
    set_refresh_cookie,
)
from authentication.models import Profile, User
from authentication.permissions import IsAdmin
from authentication.providers import ProviderError, configured_providers, get_provider
from authentication.serializers import (
    ChangeRoleResponseSerializer,
    ChangeRoleSerializer,
    EmailSerializer,
    ErrorResponseSerializer,
    LoginResponseSerializer,
    LoginSerializer,
    MessageResponseSerializer,
    ProfileResponseSerializer,
    ProfileSerializer,
    ProfileUpdateResponseSerializer,
    ProfileUpdateSerializer,
    ProvidersResponseSerializer,
    RefreshResponseSerializer,
    RefreshTokenSerializer,
    RegisterResponseSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    ResetTokenResponseSerializer,
    TokenSerializer,
    UserSerializer,
    VerifyCodeConfirmSerializer,
)
from authentication.services import AuthService
from core.exceptions import AuthenticationError, NotFoundError
from core.helpers import generate_token

logger = logging.getLogger(__name__)

# Same body whether or not the account exists
RESET_REQUESTED_MESSAGE = (
    "If an account with that email exists, a password reset link has been sent."
)
VERIFY_CODE_REQUESTED_MESSAGE = (
    "If an account with that email exists, a verification code has been sent."
)
VERIFICATION_RESENT_MESSAGE = (
    "If an unverified account with that email exists, a new verification "
    "email has been sent."
)

ERROR_RESPONSES = {
    400: ErrorResponseSerializer,
    401: ErrorResponseSerializer,
}


class PublicAPIView(APIView):
    """Endpoint reachable without an access token."""

    authentication_classes = []
    permission_classes = []


# =============================================================================
# Session Lifecycle Views
# =============================================================================


class RegisterView(PublicAPIView):
    """
    POST /api/v1/auth/register/

    Creates a pending account and emails a verification link. The account
    cannot log in until the link is used.
    """

    throttle_scope = "auth"

    @extend_schema(
        summary="Register",
        request=RegisterSerializer,
        responses={
            201: RegisterResponseSerializer,
            400: ErrorResponseSerializer,
            409: ErrorResponseSerializer,
        },
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user = AuthService.register(
            email=data["email"],
            password=data["password"],
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
        )

        return Response(
            {
                "message": "User registered successfully. Please check your email for verification.",
                "user": UserSerializer(user).data,
            },
            status=status.HTTP_201_CREATED,
        )


class LoginView(PublicAPIView):
    """
    POST /api/v1/auth/login/

    Returns the access token in the body and sets the refresh token as an
    HttpOnly cookie. Pending and suspended accounts get 401 with
    ACCOUNT_PENDING / ACCOUNT_SUSPENDED so the client can show the right
    screen.
    """

    throttle_scope = "auth"

    @extend_schema(
        summary="Log in with email and password",
        request=LoginSerializer,
        responses={200: LoginResponseSerializer, **ERROR_RESPONSES},
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user, tokens = AuthService.login(
            serializer.validated_data["email"],
            serializer.validated_data["password"],
        )

        response = Response(
            {
                "message": "Login successful",
                "accessToken": tokens.access_token,
                "user": UserSerializer(user).data,
            }
        )
        set_refresh_cookie(response, tokens.refresh_token)
        return response


class RefreshView(PublicAPIView):
    """
    POST /api/v1/auth/refresh/

    Rotates the refresh token (cookie first, then body ``refreshToken``).
    The presented token stops working immediately.
    """

    @extend_schema(
        summary="Rotate refresh token",
        request=RefreshTokenSerializer,
        responses={200: RefreshResponseSerializer, 401: ErrorResponseSerializer},
    )
    def post(self, request):
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        raw_token = get_refresh_token(
            request, serializer.validated_data.get("refresh_token")
        )

        user, tokens = AuthService.refresh(raw_token)

        response = Response(
            {"accessToken": tokens.access_token, "user": UserSerializer(user).data}
        )
        set_refresh_cookie(response, tokens.refresh_token)
        return response


class LogoutView(PublicAPIView):
    """
    POST /api/v1/auth/logout/

    Revokes the refresh token if one is presented and clears the cookie.
    Always succeeds.
    """

    @extend_schema(
        summary="Log out",
        request=RefreshTokenSerializer,
        responses={200: MessageResponseSerializer},
    )
    def post(self, request):
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        raw_token = get_refresh_token(
            request, serializer.validated_data.get("refresh_token")
        )

        AuthService.logout(raw_token)

        response = Response({"message": "Logged out successfully"})
        clear_refresh_cookie(response)
        return response


# =============================================================================
# Email Verification & Password Reset Views
# =============================================================================


class VerifyEmailView(PublicAPIView):
    """POST /api/v1/auth/verify/ - Redeem an email verification token."""

    @extend_schema(
        summary="Verify email address",
        request=TokenSerializer,
        responses={200: MessageResponseSerializer, 400: ErrorResponseSerializer},
    )
    def post(self, request):
        serializer = TokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = AuthService.verify_email(serializer.validated_data["token"])

        if user.status != User.Status.ACTIVE:
            # Verification never lifts a suspension
            return Response({"message": "Email verified successfully."})
        return Response(
            {"message": "Email verified successfully. Your account is now active."}
        )


class ResendVerificationView(PublicAPIView):
    """POST /api/v1/auth/resend-verification/ - Re-send the verification email."""

    throttle_scope = "auth"

    @extend_schema(
        summary="Resend verification email",
        request=EmailSerializer,
        responses={200: MessageResponseSerializer},
    )
    def post(self, request):
        serializer = EmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        AuthService.resend_verification(serializer.validated_data["email"])

        return Response({"message": VERIFICATION_RESENT_MESSAGE})


class ForgotPasswordView(PublicAPIView):
    """
    POST /api/v1/auth/forgot-password/

    Responds identically whether or not the email belongs to an account.
    """

    throttle_scope = "auth"

    @extend_schema(
        summary="Request password reset email",
        request=EmailSerializer,
        responses={200: MessageResponseSerializer},
    )
    def post(self, request):
        serializer = EmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        AuthService.request_password_reset(serializer.validated_data["email"])

        return Response({"message": RESET_REQUESTED_MESSAGE})


class ResetPasswordView(PublicAPIView):
    """POST /api/v1/auth/reset-password/ - Set a new password with a reset token."""

    throttle_scope = "auth"

    @extend_schema(
        summary="Reset password",
        request=ResetPasswordSerializer,
        responses={200: MessageResponseSerializer, 400: ErrorResponseSerializer},
    )
    def post(self, request):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        AuthService.reset_password(
            serializer.validated_data["token"],
            serializer.validated_data["password"],
        )

        return Response(
            {"message": "Password reset successfully. You can now login with your new password."}
        )


class VerifyCodeRequestView(PublicAPIView):
    """
    POST /api/v1/auth/verify-password/

    Emails a 6-digit code. Responds identically whether or not the email
    belongs to an account.
    """

    throttle_scope = "auth"

    @extend_schema(
        summary="Request a verification code",
        request=EmailSerializer,
        responses={200: MessageResponseSerializer},
    )
    def post(self, request):
        serializer = EmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        AuthService.request_verify_code(serializer.validated_data["email"])

        return Response({"message": VERIFY_CODE_REQUESTED_MESSAGE})


class VerifyCodeConfirmView(PublicAPIView):
    """
    POST /api/v1/auth/verify-password/confirm/

    Exchanges a valid code for a reset token usable with reset-password.
    """

    throttle_scope = "auth"

    @extend_schema(
        summary="Confirm a verification code",
        request=VerifyCodeConfirmSerializer,
        responses={200: ResetTokenResponseSerializer, 400: ErrorResponseSerializer},
    )
    def post(self, request):
        serializer = VerifyCodeConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        reset_token = AuthService.confirm_verify_code(
            serializer.validated_data["email"],
            serializer.validated_data["code"],
        )

        return Response({"message": "Code verified", "resetToken": reset_token})


# =============================================================================
# Social Authentication Views
# =============================================================================


def _get_provider_or_404(name: str):
    provider = get_provider(name)
    if provider is None:
        raise NotFoundError(f"Unknown provider: {name}", error_code="PROVIDER_NOT_FOUND")
    return provider


class ProvidersView(PublicAPIView):
    """GET /api/v1/auth/providers/ - Which social logins are configured."""

    @extend_schema(
        summary="List social login providers",
        responses={200: ProvidersResponseSerializer},
    )
    def get(self, request):
        return Response(configured_providers())


class SocialLoginView(PublicAPIView):
    """
    GET /api/v1/auth/{provider}/

    Redirects the browser to the provider's consent page and stores a
    random state value in a short-lived cookie.
    """

    @extend_schema(
        summary="Start social login",
        responses={302: OpenApiResponse(description="Redirect to the provider")},
    )
    def get(self, request, provider):
        identity_provider = _get_provider_or_404(provider)
        state = generate_token()

        url = identity_provider.authorization_url(state)

        response = HttpResponseRedirect(url)
        set_oauth_state_cookie(response, identity_provider.name, state)
        return response


class SocialCallbackView(PublicAPIView):
    """
    GET (Apple: POST) /api/v1/auth/{provider}/callback/

    Completes social login and redirects to the frontend:
        success: /auth/social-callback?provider=<p>&data=<base64 JSON>
                 where the JSON is {accessToken, user, profile}; the refresh
                 token is set as a cookie
        failure: /auth/sign-in?error=<p>_<reason>
    """

    parser_classes = [FormParser, JSONParser]

    @extend_schema(
        summary="Social login callback",
        request=None,
        responses={302: OpenApiResponse(description="Redirect to the frontend")},
    )
    def get(self, request, provider):
        return self._complete(request, provider, request.query_params)

    @extend_schema(
        summary="Social login callback (form post)",
        request=None,
        responses={302: OpenApiResponse(description="Redirect to the frontend")},
    )
    def post(self, request, provider):
        return self._complete(request, provider, request.data)

    def _complete(self, request, provider_name, params):
        provider = _get_provider_or_404(provider_name)
        name = provider.name

        if not provider.is_configured:
            logger.error(f"{name} callback hit without OAuth configuration")
            return self._error_redirect(name, f"{name}_config")

        provider_error = params.get("error")
        if provider_error:
            reason = re.sub(r"[^a-z0-9_]", "", str(provider_error).lower()) or "unknown"
            logger.info(f"{name} returned error: {reason}")
            return self._error_redirect(name, f"{name}_{reason}")

        code = params.get("code")
        state = params.get("state")
        if not code or not state:
            return self._error_redirect(name, f"{name}_invalid_response")

        expected_state = get_oauth_state(request, name)
        if not expected_state or not constant_time_compare(expected_state, state):
            logger.warning(f"{name} OAuth state mismatch")
            return self._error_redirect(name, f"{name}_state_mismatch")

        try:
            identity = provider.authenticate(code, params)
            user, profile, tokens = AuthService.social_login(identity)
        except ProviderError as e:
            return self._error_redirect(name, f"{name}_{e.reason}")
        except AuthenticationError as e:
            if e.error_code == "ACCOUNT_SUSPENDED":
                return self._error_redirect(name, "account_suspended")
            return self._error_redirect(name, f"{name}_email_unverified")
        except Exception:
            logger.exception(f"{name} login failed")
            return self._error_redirect(name, f"{name}_unknown")

        payload = {
            "accessToken": tokens.access_token,
            "user": UserSerializer(user).data,
            "profile": ProfileSerializer(profile).data,
        }
        encoded = base64.b64encode(
            json.dumps(payload, cls=DjangoJSONEncoder).encode()
        ).decode()

        response = HttpResponseRedirect(
            f"{settings.FRONTEND_URL}/auth/social-callback"
            f"?provider={name}&data={quote(encoded, safe='')}"
        )
        set_refresh_cookie(response, tokens.refresh_token)
        clear_oauth_state_cookie(response, name)
        logger.info(f"{name} login succeeded for user_id={user.pk}")
        return response

    @staticmethod
    def _error_redirect(provider_name: str, error_code: str) -> HttpResponseRedirect:
        response = HttpResponseRedirect(
            f"{settings.FRONTEND_URL}/auth/sign-in?error={quote(error_code)}"
        )
        clear_oauth_state_cookie(response, provider_name)
        return response


# =============================================================================
# User Views
# =============================================================================


class ProfileView(APIView):
    """
    API view for the current user's profile.

    GET: {user, profile} (profile is null until first written)
    PUT: Replace all editable fields; omitted fields are cleared
    PATCH: Update only the fields sent

    URL: /api/v1/user/profile/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Get current user's profile",
        responses={200: ProfileResponseSerializer, 401: ErrorResponseSerializer},
    )
    def get(self, request):
        profile = Profile.objects.filter(user=request.user).first()
        return Response(
            {
                "user": UserSerializer(request.user).data,
                "profile": ProfileSerializer(profile).data if profile else None,
            }
        )

    @extend_schema(
        summary="Replace profile",
        request=ProfileUpdateSerializer,
        responses={200: ProfileUpdateResponseSerializer, **ERROR_RESPONSES},
    )
    def put(self, request):
        return self._update_profile(request, partial=False)

    @extend_schema(
        summary="Partially update profile",
        request=ProfileUpdateSerializer,
        responses={200: ProfileUpdateResponseSerializer, **ERROR_RESPONSES},
    )
    def patch(self, request):
        return self._update_profile(request, partial=True)

    def _update_profile(self, request, partial=False):
        serializer = ProfileUpdateSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        profile = AuthService.update_profile(
            request.user, serializer.validated_data, partial=partial
        )

        return Response(
            {
                "message": "Profile updated successfully",
                "profile": ProfileSerializer(profile).data,
            }
        )


class ChangeRoleView(APIView):
    """
    PUT /api/v1/user/change-role/

    Admin only. ``userId`` selects the target user and defaults to the
    caller.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Change a user's role",
        request=ChangeRoleSerializer,
        responses={
            200: ChangeRoleResponseSerializer,
            400: ErrorResponseSerializer,
            403: ErrorResponseSerializer,
            404: ErrorResponseSerializer,
        },
    )
    def put(self, request):
        serializer = ChangeRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = AuthService.change_role(
            request.user,
            serializer.validated_data["role"],
            serializer.validated_data.get("user_id"),
        )

        return Response(
            {
                "message": "Role updated successfully",
                "userId": user.pk,
                "newRole": user.role,
            }
        )


# =============================================================================
# Protected Demo Views
# =============================================================================


class ProtectedDemoView(APIView):
    """GET /api/v1/protected/demo/ - Any active user."""

    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Protected demo endpoint")
    def get(self, request):
        user = request.user
        return Response(
            {
                "message": "This is a protected endpoint",
                "user": UserSerializer(user).data,
                "timestamp": timezone.now(),
                "serverMessage": f"Hello {user.email}! You have {user.role} role access.",
            }
        )


class AdminDemoView(APIView):
    """GET /api/v1/protected/admin/ - Admin role only."""

    permission_classes = [IsAuthenticated, IsAdmin]

    @extend_schema(summary="Admin-only demo endpoint")
    def get(self, request):
        return Response(
            {
                "message": "This is an admin-only endpoint",
                "user": UserSerializer(request.user).data,
                "timestamp": timezone.now(),
            }
        )
