"""
Test configuration and fixtures for authentication tests.

This module provides:
- Users in every status and role
- API client helpers for authenticated requests
- Issued tokens (access, refresh, verification)
- Mocked Celery tasks

Usage:
    def test_example(user, authenticated_client):
        response = authenticated_client.get('/api/v1/user/profile/')
        assert response.status_code == 200
"""

from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from authentication.models import User, VerificationToken
from authentication.services import TokenService
from authentication.tests.factories import (
    DEFAULT_PASSWORD,
    ProfileFactory,
    UserFactory,
    VerificationTokenFactory,
)


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def password():
    """The password every factory user is created with."""
    return DEFAULT_PASSWORD


@pytest.fixture
def user(db):
    """Create an active user with the default role."""
    return UserFactory(email="member@example.com")


@pytest.fixture
def pending_user(db):
    """Create a registered user who has not verified their email."""
    return UserFactory(email="pending@example.com", status=User.Status.PENDING)


@pytest.fixture
def suspended_user(db):
    """Create a suspended user."""
    return UserFactory(email="suspended@example.com", status=User.Status.SUSPENDED)


@pytest.fixture
def admin_user(db):
    """Create an active user with the admin role (no Django admin access)."""
    return UserFactory(email="admin@example.com", role=User.Role.ADMIN)


@pytest.fixture
def superuser(db):
    """Create a superuser with Django admin access."""
    return User.objects.create_superuser(
        email="root@example.com", password="AdminPass123"
    )


@pytest.fixture
def profile(user):
    """Create a profile for the default user fixture."""
    return ProfileFactory(
        user=user,
        first_name="Ada",
        last_name="Lovelace",
        title="Analyst",
        pen_name="Countess",
    )


# =============================================================================
# Token Fixtures
# =============================================================================


@pytest.fixture
def token_pair(user):
    """Issue an access/refresh token pair for the default user."""
    return TokenService.issue_tokens(user)


@pytest.fixture
def verification_token(pending_user):
    """Create a valid email verification token for the pending user."""
    return VerificationTokenFactory(
        user=pending_user,
        purpose=VerificationToken.Purpose.EMAIL_VERIFICATION,
    )


@pytest.fixture
def expired_verification_token(pending_user):
    """Create an expired email verification token."""
    return VerificationTokenFactory(
        user=pending_user,
        purpose=VerificationToken.Purpose.EMAIL_VERIFICATION,
        expires_at=timezone.now() - timedelta(minutes=1),
    )


@pytest.fixture
def password_reset_token(user):
    """Create a valid password reset token for the default user."""
    return VerificationTokenFactory(
        user=user,
        purpose=VerificationToken.Purpose.PASSWORD_RESET,
    )


@pytest.fixture
def verify_code(user):
    """Create a valid 6-digit verify-password code for the default user."""
    return VerificationTokenFactory(
        user=user,
        purpose=VerificationToken.Purpose.VERIFY_PASSWORD,
        token="123456",
    )


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated API client for public endpoints."""
    return APIClient()


@pytest.fixture
def authenticated_client_factory(db):
    """
    Factory to create authenticated clients for any user.

    Usage:
        def test_example(authenticated_client_factory, admin_user):
            client = authenticated_client_factory(admin_user)
            response = client.get('/api/v1/protected/admin/')
    """

    def _make_client(user):
        client = APIClient()
        access_token = TokenService.create_access_token(user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {access_token}")
        return client

    return _make_client


@pytest.fixture
def authenticated_client(authenticated_client_factory, user):
    """API client carrying a valid access token for the default user."""
    return authenticated_client_factory(user)


@pytest.fixture
def admin_client(authenticated_client_factory, admin_user):
    """API client carrying a valid access token for the admin user."""
    return authenticated_client_factory(admin_user)


# =============================================================================
# Mock Fixtures for External Services
# =============================================================================


@pytest.fixture
def mock_celery_tasks(mocker):
    """
    Mock all email tasks to prevent actual task execution.

    Tasks are queued on transaction commit; wrap the call under test in
    ``django_capture_on_commit_callbacks(execute=True)`` to run the
    callbacks and assert on the mocks.

    Returns:
        Dict of task name to the mocked ``delay``
    """
    return {
        "send_verification_email": mocker.patch(
            "authentication.tasks.send_verification_email.delay"
        ),
        "send_password_reset_email": mocker.patch(
            "authentication.tasks.send_password_reset_email.delay"
        ),
        "send_verify_code_email": mocker.patch(
            "authentication.tasks.send_verify_code_email.delay"
        ),
    }


# =============================================================================
# Test Data Fixtures
# =============================================================================


@pytest.fixture
def valid_registration_data():
    """Valid data for the registration endpoint."""
    return {
        "email": "newuser@example.com",
        "password": "SecurePass123",
        "firstName": "New",
        "lastName": "User",
    }


@pytest.fixture
def valid_profile_data():
    """Every editable profile field, as the frontend sends it."""
    return {
        "firstName": "Grace",
        "lastName": "Hopper",
        "title": "Rear Admiral",
        "function": "Engineering",
        "geoId": 42,
        "avatarId": 7,
        "penName": "Amazing Grace",
        "location": "Arlington",
    }
