"""
URL configuration for authentication app.

Included at /api/v1/ by config/urls.py.

URL structure:
    auth/register/                      - Create account
    auth/login/                         - Email/password login
    auth/refresh/                       - Rotate refresh token
    auth/logout/                        - Revoke refresh token
    auth/verify/                        - Verify email
    auth/resend-verification/           - Re-send verification email
    auth/forgot-password/               - Request reset email
    auth/reset-password/                - Set new password with reset token
    auth/verify-password/               - Request 6-digit code
    auth/verify-password/confirm/       - Exchange code for reset token
    auth/providers/                     - Configured social providers
    auth/<provider>/                    - Start social login
    auth/<provider>/callback/           - Social login callback
    user/profile/                       - Profile (GET/PUT/PATCH)
    user/change-role/                   - Change role (admin only)
    protected/demo/                     - Any active user
    protected/admin/                    - Admin only
"""

from django.urls import path

from authentication.providers import PROVIDERS
from authentication.views import (
    AdminDemoView,
    ChangeRoleView,
    ForgotPasswordView,
    LoginView,
    LogoutView,
    ProfileView,
    ProtectedDemoView,
    ProvidersView,
    RefreshView,
    RegisterView,
    ResendVerificationView,
    ResetPasswordView,
    SocialCallbackView,
    SocialLoginView,
    VerifyCodeConfirmView,
    VerifyCodeRequestView,
    VerifyEmailView,
)

app_name = "authentication"

urlpatterns = [
    # Session lifecycle
    path("auth/register/", RegisterView.as_view(), name="register"),
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    # Verification & password reset
    path("auth/verify/", VerifyEmailView.as_view(), name="verify-email"),
    path(
        "auth/resend-verification/",
        ResendVerificationView.as_view(),
        name="resend-verification",
    ),
    path("auth/forgot-password/", ForgotPasswordView.as_view(), name="forgot-password"),
    path("auth/reset-password/", ResetPasswordView.as_view(), name="reset-password"),
    path("auth/verify-password/", VerifyCodeRequestView.as_view(), name="verify-code"),
    path(
        "auth/verify-password/confirm/",
        VerifyCodeConfirmView.as_view(),
        name="verify-code-confirm",
    ),
    # Social login
    path("auth/providers/", ProvidersView.as_view(), name="providers"),
    # User
    path("user/profile/", ProfileView.as_view(), name="profile"),
    path("user/change-role/", ChangeRoleView.as_view(), name="change-role"),
    # Protected demos
    path("protected/demo/", ProtectedDemoView.as_view(), name="protected-demo"),
    path("protected/admin/", AdminDemoView.as_view(), name="protected-admin"),
]

# One literal route per provider keeps operation ids distinct in the schema
for provider in PROVIDERS:
    urlpatterns += [
        path(
            f"auth/{provider}/",
            SocialLoginView.as_view(),
            {"provider": provider},
            name=f"{provider}-login",
        ),
        path(
            f"auth/{provider}/callback/",
            SocialCallbackView.as_view(),
            {"provider": provider},
            name=f"{provider}-callback",
        ),
    ]
