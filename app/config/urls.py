"""
URL configuration for the auth service.

URL Structure:
    /                                   - ReDoc API documentation
    /admin/                             - Django admin interface
    /health/                            - Health check endpoint (for load balancers, Docker)
    /schema/                            - OpenAPI schema (YAML)
    /api/v1/auth/                       - Session lifecycle
        register/                       - Create account (pending until verified)
        login/                          - Email/password login, sets refresh cookie
        refresh/                        - Rotate refresh token, new access token
        logout/                         - Revoke refresh token, clear cookie
        verify/                         - Redeem email verification token
        resend-verification/            - Re-send verification email
        forgot-password/                - Request password reset email
        reset-password/                 - Redeem reset token, set new password
        verify-password/                - Request 6-digit verify code
        verify-password/confirm/        - Exchange verify code for reset token
        providers/                      - Configured social login providers
        {google,facebook,apple}/        - Start social login (redirect)
        {google,facebook,apple}/callback/ - Provider callback
    /api/v1/user/
        profile/                        - Current user's profile (GET/PUT/PATCH)
        change-role/                    - Change a user's role (admin only)
    /api/v1/protected/
        demo/                           - Any active user
        admin/                          - Admin role only
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
api_v1_patterns = [
    path("", include("authentication.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Auth Service Admin"
admin.site.site_title = "Auth Service"
admin.site.index_title = "Users and sessions"
