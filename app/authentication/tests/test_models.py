"""
Tests for authentication models, managers and password rules.

Covers:
- User: email normalization, status-derived is_active, roles
- UserManager: create_user / create_superuser defaults
- Profile: one row per user, display helpers
- RefreshToken / VerificationToken: expiry-aware querysets
- validate_password_strength: length and character-class rules
"""

from datetime import timedelta

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.management import call_command
from django.db import IntegrityError
from django.utils import timezone

from authentication.models import Profile, RefreshToken, User, VerificationToken
from authentication.tests.factories import (
    ProfileFactory,
    RefreshTokenFactory,
    UserFactory,
    VerificationTokenFactory,
)
from authentication.validators import (
    MixedCharacterPasswordValidator,
    validate_password_strength,
)


# =============================================================================
# TestUserModel
# =============================================================================


@pytest.mark.django_db
class TestUserModel:
    """Tests for the User model and UserManager."""

    def test_create_user_defaults_to_pending_user_role(self):
        """
        New accounts start pending with the user role.

        Why it matters: Email/password accounts must not log in before the
        email is verified, and nobody self-registers into a privileged role.
        """
        user = User.objects.create_user(email="a@example.com", password="Passw0rd1")

        assert user.status == User.Status.PENDING
        assert user.role == User.Role.USER
        assert user.is_active is False
        assert user.is_staff is False

    def test_create_user_lowercases_whole_email(self):
        """
        Emails are stored lowercased, local part included.

        Why it matters: Login and registration compare emails
        case-insensitively; storing one canonical form keeps the unique
        constraint and lookups consistent.
        """
        user = User.objects.create_user(email="  Mixed.Case@Example.COM ", password="Passw0rd1")

        assert user.email == "mixed.case@example.com"

    def test_create_user_hashes_password(self):
        """
        The stored password is a hash, never the plaintext.

        Why it matters: A database leak must not reveal passwords.
        """
        user = User.objects.create_user(email="a@example.com", password="Passw0rd1")

        assert user.password != "Passw0rd1"
        assert user.check_password("Passw0rd1")

    def test_create_user_without_password_is_unusable(self):
        """
        OAuth-only accounts get an unusable password.

        Why it matters: Nobody can log in with email/password to an account
        that was created by a social provider.
        """
        user = User.objects.create_user(email="oauth@example.com")

        assert not user.has_usable_password()

    def test_create_user_requires_email(self):
        """
        Email is mandatory.

        Why it matters: Email is the only identifier of an account.
        """
        with pytest.raises(ValueError):
            User.objects.create_user(email="", password="Passw0rd1")

    def test_duplicate_email_differing_in_case_is_rejected(self):
        """
        Two accounts cannot share an email regardless of case.

        Why it matters: Otherwise one person could own two accounts and
        password resets would reach the wrong one.
        """
        UserFactory(email="dup@example.com")

        with pytest.raises(IntegrityError):
            User.objects.create_user(email="DUP@example.com", password="Passw0rd1")

    def test_create_superuser_is_active_admin(self):
        """
        Superusers are active admins with Django admin access.

        Why it matters: The first operator account must be usable
        immediately without going through email verification.
        """
        admin = User.objects.create_superuser(email="root@example.com", password="Passw0rd1")

        assert admin.status == User.Status.ACTIVE
        assert admin.role == User.Role.ADMIN
        assert admin.is_staff is True
        assert admin.is_superuser is True

    def test_create_superuser_rejects_is_staff_false(self):
        """
        Superusers must be staff.

        Why it matters: Prevents creating a superuser who cannot reach the
        admin site.
        """
        with pytest.raises(ValueError):
            User.objects.create_superuser(
                email="root@example.com", password="Passw0rd1", is_staff=False
            )

    @pytest.mark.parametrize(
        "status,expected",
        [
            (User.Status.PENDING, False),
            (User.Status.ACTIVE, True),
            (User.Status.SUSPENDED, False),
        ],
    )
    def test_is_active_follows_status(self, status, expected):
        """
        is_active is derived from status.

        Why it matters: Django and simplejwt read is_active; it must never
        disagree with the status column.
        """
        user = UserFactory(status=status)

        assert user.is_active is expected

    def test_is_admin_reflects_role(self):
        """
        is_admin is true only for the admin role.

        Why it matters: Role checks in services use this property.
        """
        assert UserFactory(role=User.Role.ADMIN).is_admin is True
        assert UserFactory(role=User.Role.MODERATOR).is_admin is False

    def test_get_by_natural_key_is_case_insensitive(self):
        """
        Admin login finds users regardless of email case.

        Why it matters: The Django admin authenticates through the natural
        key lookup.
        """
        user = UserFactory(email="natural@example.com")

        assert User.objects.get_by_natural_key("Natural@Example.com") == user

    def test_get_full_name_falls_back_to_email(self):
        """
        Without a profile the email is the display name.

        Why it matters: The admin and logs call get_full_name on users who
        never filled in a profile.
        """
        user = UserFactory(email="noname@example.com")

        assert user.get_full_name() == "noname@example.com"
        assert user.get_short_name() == "noname"


# =============================================================================
# TestProfileModel
# =============================================================================


@pytest.mark.django_db
class TestProfileModel:
    """Tests for the Profile model."""

    def test_profile_uses_user_as_primary_key(self):
        """
        The profile is keyed by its user's id.

        Why it matters: There is exactly one profile per user and it is
        addressed by user id.
        """
        profile = ProfileFactory()

        assert profile.pk == profile.user_id

    def test_second_profile_for_same_user_is_rejected(self):
        """
        A user cannot have two profiles.

        Why it matters: Profile upserts rely on the one-to-one relation.
        """
        profile = ProfileFactory()

        with pytest.raises(IntegrityError):
            Profile.objects.create(user=profile.user)

    def test_full_name_joins_names(self):
        """
        full_name joins first and last name.

        Why it matters: Used for display in the admin and as the user's
        full name.
        """
        profile = ProfileFactory(first_name="Ada", last_name="Lovelace")

        assert profile.full_name == "Ada Lovelace"
        assert profile.user.get_full_name() == "Ada Lovelace"

    def test_optional_fields_default_to_empty(self):
        """
        Text fields default to empty, id references to null.

        Why it matters: A registration stub must be valid without any
        profile data.
        """
        profile = Profile.objects.create(user=UserFactory())

        assert profile.title == ""
        assert profile.geo_id is None
        assert profile.avatar_id is None

    def test_deleting_user_deletes_profile(self):
        """
        Profiles are removed with their user.

        Why it matters: No orphaned personal data is left behind.
        """
        profile = ProfileFactory()
        user_id = profile.user_id

        profile.user.delete()

        assert not Profile.objects.filter(pk=user_id).exists()


# =============================================================================
# TestTokenModels
# =============================================================================


@pytest.mark.django_db
class TestTokenModels:
    """Tests for RefreshToken and VerificationToken expiry handling."""

    def test_unexpired_excludes_expired_refresh_tokens(self):
        """
        unexpired() only returns tokens whose expiry is in the future.

        Why it matters: Every redemption query goes through unexpired(), so
        expiry is enforced in the database.
        """
        live = RefreshTokenFactory()
        RefreshTokenFactory(expires_at=timezone.now() - timedelta(seconds=1))

        assert list(RefreshToken.objects.unexpired()) == [live]

    def test_expired_returns_only_expired_tokens(self):
        """
        expired() is the complement of unexpired().

        Why it matters: The cleanup task deletes exactly these rows.
        """
        VerificationTokenFactory()
        stale = VerificationTokenFactory(expires_at=timezone.now() - timedelta(hours=1))

        assert list(VerificationToken.objects.expired()) == [stale]

    def test_is_expired_property(self):
        """
        is_expired compares expires_at with now.

        Why it matters: The admin shows this flag to operators.
        """
        assert RefreshTokenFactory().is_expired is False
        assert (
            RefreshTokenFactory(expires_at=timezone.now() - timedelta(seconds=1)).is_expired
            is True
        )

    def test_tokens_are_deleted_with_user(self):
        """
        Tokens cascade with their user.

        Why it matters: A deleted account must not leave redeemable tokens.
        """
        user = UserFactory()
        RefreshTokenFactory(user=user)
        VerificationTokenFactory(user=user)

        user.delete()

        assert RefreshToken.objects.count() == 0
        assert VerificationToken.objects.count() == 0


# =============================================================================
# TestPasswordValidators
# =============================================================================


class TestPasswordValidators:
    """Tests for the password strength rules."""

    @pytest.mark.parametrize("password", ["Passw0rd", "Abcdefg1", "ZZZZzzzz9"])
    def test_strong_passwords_pass(self, password):
        """
        Eight characters with upper, lower and digit are accepted.

        Why it matters: The rule must not reject valid passwords.
        """
        validate_password_strength(password)

    @pytest.mark.parametrize(
        "password",
        ["Pass0rd", "password1", "PASSWORD1", "Password", ""],
    )
    def test_weak_passwords_fail(self, password):
        """
        Short passwords or missing character classes are rejected.

        Why it matters: Registration and reset share this rule.
        """
        with pytest.raises(DjangoValidationError):
            validate_password_strength(password)

    def test_every_broken_rule_is_reported(self):
        """
        All failures are listed at once.

        Why it matters: The client can show every requirement in one round
        trip instead of one per attempt.
        """
        with pytest.raises(DjangoValidationError) as exc_info:
            validate_password_strength("abc")

        assert len(exc_info.value.messages) == 3

    def test_django_validator_wraps_character_rules(self):
        """
        The AUTH_PASSWORD_VALIDATORS entry applies the character rules.

        Why it matters: Passwords set through the admin follow the same
        policy as the API.
        """
        validator = MixedCharacterPasswordValidator()

        validator.validate("Passw0rd1")
        with pytest.raises(DjangoValidationError):
            validator.validate("alllowercase")


# =============================================================================
# TestMigrations
# =============================================================================


@pytest.mark.django_db
class TestMigrations:
    """Models and migration files agree."""

    def test_no_pending_model_changes(self):
        """
        makemigrations --check finds nothing to write.

        Why it matters: A missing migration means production schemas and
        managers drift from the code.
        """
        call_command("makemigrations", "--check", "--dry-run", verbosity=0)
