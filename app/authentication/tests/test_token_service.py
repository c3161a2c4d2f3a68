"""
Tests for TokenService.

Covers access token claims and verification, refresh token storage,
rotation (including reuse and concurrent reuse), and revocation.
"""

from datetime import timedelta

import pytest
from django.utils import timezone
from freezegun import freeze_time
from rest_framework_simplejwt.tokens import AccessToken

from authentication.models import RefreshToken, User
from authentication.services import TokenPair, TokenService
from authentication.tests.factories import RefreshTokenFactory, UserFactory
from core.exceptions import AuthenticationError


# =============================================================================
# TestAccessTokens
# =============================================================================


@pytest.mark.django_db
class TestAccessTokens:
    """Tests for access token creation and decoding."""

    def test_access_token_carries_user_id_email_and_role(self, user):
        """
        The access token embeds userId, email and role.

        Why it matters: Clients read these claims to render the session
        without an extra request.
        """
        token = AccessToken(TokenService.create_access_token(user))

        assert token["userId"] == user.pk
        assert isinstance(token["userId"], int)
        assert token["email"] == user.email
        assert token["role"] == user.role

    def test_access_token_expires_after_fifteen_minutes(self, user):
        """
        Access tokens are short-lived.

        Why it matters: A leaked access token is only useful for the
        access token lifetime.
        """
        with freeze_time("2026-01-01 12:00:00"):
            raw = TokenService.create_access_token(user)

        with freeze_time("2026-01-01 12:14:00"):
            TokenService.decode_access_token(raw)

        with freeze_time("2026-01-01 12:16:00"):
            with pytest.raises(AuthenticationError) as exc_info:
                TokenService.decode_access_token(raw)

        assert exc_info.value.error_code == "TOKEN_INVALID"

    def test_tampered_access_token_is_rejected(self, user):
        """
        Changing any character invalidates the signature.

        Why it matters: Clients must not be able to edit their role claim.
        """
        raw = TokenService.create_access_token(user)
        header, payload, signature = raw.split(".")
        tampered = ".".join([header, payload, signature[::-1]])

        with pytest.raises(AuthenticationError):
            TokenService.decode_access_token(tampered)


# =============================================================================
# TestIssueTokens
# =============================================================================


@pytest.mark.django_db
class TestIssueTokens:
    """Tests for issuing token pairs."""

    def test_issue_tokens_stores_refresh_token(self, user):
        """
        The refresh token is persisted with a 7 day expiry.

        Why it matters: Refresh tokens are only valid while their row
        exists, which is what makes logout and rotation work.
        """
        with freeze_time("2026-03-01 08:00:00"):
            pair = TokenService.issue_tokens(user)
            expected_expiry = timezone.now() + timedelta(days=7)

        stored = RefreshToken.objects.get(token=pair.refresh_token)

        assert isinstance(pair, TokenPair)
        assert stored.user == user
        assert stored.expires_at == expected_expiry
        assert len(pair.refresh_token) == 64

    def test_each_login_gets_its_own_refresh_token(self, user):
        """
        A user may hold several sessions at once.

        Why it matters: Logging in on a second device must not log out the
        first one.
        """
        first = TokenService.issue_tokens(user)
        second = TokenService.issue_tokens(user)

        assert first.refresh_token != second.refresh_token
        assert RefreshToken.objects.filter(user=user).count() == 2

    def test_validate_refresh_token_returns_owner(self, token_pair, user):
        """
        A live refresh token maps to its user id.

        Why it matters: Used by rotation to find the session owner.
        """
        assert TokenService.validate_refresh_token(token_pair.refresh_token) == user.pk

    def test_validate_refresh_token_ignores_expired(self, user):
        """
        Expired refresh tokens do not validate.

        Why it matters: Sessions end after seven days even if the row has
        not been cleaned up yet.
        """
        stale = RefreshTokenFactory(user=user, expires_at=timezone.now() - timedelta(seconds=1))

        assert TokenService.validate_refresh_token(stale.token) is None
        assert TokenService.validate_refresh_token(None) is None


# =============================================================================
# TestRotateRefreshToken
# =============================================================================


@pytest.mark.django_db
class TestRotateRefreshToken:
    """Tests for refresh token rotation."""

    def test_rotation_replaces_the_token(self, token_pair, user):
        """
        Rotation deletes the presented token and issues a new pair.

        Why it matters: Each refresh token can be used only once, so a
        stolen token stops working after the legitimate client refreshes.
        """
        rotated_user, new_pair = TokenService.rotate_refresh_token(token_pair.refresh_token)

        assert rotated_user == user
        assert new_pair.refresh_token != token_pair.refresh_token
        assert not RefreshToken.objects.filter(token=token_pair.refresh_token).exists()
        assert RefreshToken.objects.filter(token=new_pair.refresh_token).exists()

    def test_reusing_a_rotated_token_fails(self, token_pair):
        """
        The old token is rejected after rotation.

        Why it matters: Replaying a captured refresh token must not mint
        new sessions.
        """
        TokenService.rotate_refresh_token(token_pair.refresh_token)

        with pytest.raises(AuthenticationError) as exc_info:
            TokenService.rotate_refresh_token(token_pair.refresh_token)

        assert exc_info.value.error_code == "REFRESH_TOKEN_INVALID"

    def test_missing_token_is_reported_separately(self):
        """
        A request without any refresh token gets REFRESH_TOKEN_MISSING.

        Why it matters: Clients distinguish "never logged in" from
        "session ended".
        """
        with pytest.raises(AuthenticationError) as exc_info:
            TokenService.rotate_refresh_token(None)

        assert exc_info.value.error_code == "REFRESH_TOKEN_MISSING"

    def test_expired_token_cannot_be_rotated(self, user):
        """
        Expired refresh tokens are rejected.

        Why it matters: The seven day limit is absolute, rotation does not
        extend a dead session.
        """
        stale = RefreshTokenFactory(user=user, expires_at=timezone.now() - timedelta(seconds=1))

        with pytest.raises(AuthenticationError):
            TokenService.rotate_refresh_token(stale.token)

    def test_rotation_loses_race_when_row_already_deleted(self, token_pair, mocker):
        """
        Only the request whose delete removed the row succeeds.

        Why it matters: Two tabs refreshing with the same token at the same
        moment must not both receive new sessions.
        """
        # The competing request deletes the row between lookup and delete
        original = TokenService.validate_refresh_token

        def validate_then_lose_race(raw_token):
            user_id = original(raw_token)
            RefreshToken.objects.filter(token=raw_token).delete()
            return user_id

        mocker.patch.object(
            TokenService, "validate_refresh_token", side_effect=validate_then_lose_race
        )

        with pytest.raises(AuthenticationError) as exc_info:
            TokenService.rotate_refresh_token(token_pair.refresh_token)

        assert exc_info.value.error_code == "REFRESH_TOKEN_INVALID"
        # The failed rotation rolls back; no replacement token was issued
        assert list(RefreshToken.objects.values_list("token", flat=True)) == [
            token_pair.refresh_token
        ]

    @pytest.mark.parametrize("status", [User.Status.PENDING, User.Status.SUSPENDED])
    def test_rotation_rejects_inactive_user(self, status):
        """
        A refresh token of a non-active user cannot be rotated.

        Why it matters: Suspension must end sessions even if a refresh
        token row survived.
        """
        user = UserFactory()
        stored = RefreshTokenFactory(user=user)
        User.objects.filter(pk=user.pk).update(status=status)

        with pytest.raises(AuthenticationError) as exc_info:
            TokenService.rotate_refresh_token(stored.token)

        assert exc_info.value.error_code == "USER_INACTIVE"


# =============================================================================
# TestRevocation
# =============================================================================


@pytest.mark.django_db
class TestRevocation:
    """Tests for refresh token revocation."""

    def test_revoke_refresh_token_is_idempotent(self, token_pair):
        """
        Revoking twice is not an error.

        Why it matters: Logout must always succeed, even on retry.
        """
        assert TokenService.revoke_refresh_token(token_pair.refresh_token) is True
        assert TokenService.revoke_refresh_token(token_pair.refresh_token) is False
        assert TokenService.revoke_refresh_token(None) is False

    def test_revoke_all_for_user_only_touches_that_user(self, user):
        """
        Revoking a user's sessions leaves other users alone.

        Why it matters: A password reset for one account must not log out
        anybody else.
        """
        other = UserFactory()
        TokenService.issue_tokens(user)
        TokenService.issue_tokens(user)
        TokenService.issue_tokens(other)

        assert TokenService.revoke_all_for_user(user) == 2
        assert RefreshToken.objects.filter(user=other).count() == 1
