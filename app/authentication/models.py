"""
Authentication models.

This module defines the persisted state of the auth service:
- User: Credential record with role and lifecycle status (table ``users``)
- Profile: 1:1 profile extension of User (table ``profiles``)
- RefreshToken: Opaque, rotating refresh tokens (table ``refresh_tokens``)
- VerificationToken: Single-use, purpose-tagged tokens (table ``user_tokens``)

Related files:
    - managers.py: UserManager and expiry-aware token querysets
    - services/: Business logic operating on these models

Security:
    - Passwords hashed with bcrypt (BCryptSHA256PasswordHasher, cost 12)
    - Refresh and verification tokens are cryptographically random
    - Expiry is enforced in queries at redemption time
"""

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models
from django.db.models.functions import Lower
from django.utils import timezone

from authentication.managers import ExpiringTokenQuerySet, UserManager
from core.models import BaseModel


class User(AbstractBaseUser, PermissionsMixin):
    """
    Identity record using email as the primary identifier.

    Fields:
        email: Unique (case-insensitive) login identifier, stored lowercased
        role: Coarse authorization label (user/admin/moderator/premium/provider)
        status: Lifecycle state (pending until verified, active, suspended)
        is_staff: Whether the user can access Django admin
        created_at: When the account was created

    Status transitions:
        pending -> active: email verification or verified social login
        any -> suspended: administrative action only

    Usage:
        user = User.objects.create_user(email='a@x.com', password='Passw0rd1')
        user.status  # "pending"
        user.is_active  # False until the email is verified
    """

    class Role(models.TextChoices):
        USER = "user", "User"
        ADMIN = "admin", "Admin"
        MODERATOR = "moderator", "Moderator"
        PREMIUM = "premium", "Premium"
        PROVIDER = "provider", "Provider"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        ACTIVE = "active", "Active"
        SUSPENDED = "suspended", "Suspended"

    email = models.EmailField(
        unique=True,
        max_length=254,
        help_text="User's email address (primary identifier, lowercased)",
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.USER,
        help_text="Authorization role",
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
        help_text="Account lifecycle status",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )
    created_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the user account was created",
    )

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        db_table = "users"
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                Lower("email"),
                name="unique_user_email_case_insensitive",
            ),
        ]

    def __str__(self):
        return self.email

    def save(self, *args, **kwargs):
        self.email = User.objects.normalize_email(self.email)
        super().save(*args, **kwargs)

    @property
    def is_active(self):
        """Only active accounts may authenticate (read by Django and simplejwt)."""
        return self.status == self.Status.ACTIVE

    @property
    def is_admin(self):
        return self.role == self.Role.ADMIN

    def get_full_name(self):
        try:
            return self.profile.full_name or self.email
        except Profile.DoesNotExist:
            return self.email

    def get_short_name(self):
        return self.email.split("@")[0]


class Profile(BaseModel):
    """
    Optional personal details for a user.

    One row per user, keyed by the user id. Created with the user at
    registration (stub) or lazily by the first profile write, and upserted
    afterwards.

    Fields:
        user: OneToOne link to User (also serves as primary key)
        first_name, last_name: Name fields
        title: Professional title
        function: Role or function description
        geo_id: Reference to a geographic entity
        avatar_id: Reference to an uploaded avatar file
        pen_name: Public display name
        location: Free-text location
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
        primary_key=True,
        help_text="User this profile belongs to",
    )
    first_name = models.CharField(max_length=150, blank=True, default="")
    last_name = models.CharField(max_length=150, blank=True, default="")
    title = models.CharField(max_length=150, blank=True, default="")
    function = models.CharField(max_length=150, blank=True, default="")
    geo_id = models.IntegerField(null=True, blank=True)
    avatar_id = models.IntegerField(null=True, blank=True)
    pen_name = models.CharField(max_length=150, blank=True, default="")
    location = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "profiles"
        verbose_name = "profile"
        verbose_name_plural = "profiles"

    def __str__(self):
        return self.pen_name or self.full_name or str(self.user)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


class RefreshToken(models.Model):
    """
    Server-side record of an opaque refresh token.

    A user may hold several live refresh tokens (one per device or tab).
    Rows are deleted on logout, on rotation, and by the periodic cleanup
    task once expired.

    Fields:
        token: 64-character random hex string presented by the client
        user: Owner of the session
        expires_at: Absolute expiry (issuance + REFRESH_TOKEN_LIFETIME)
        created_at: Issuance time
    """

    token = models.CharField(
        max_length=128,
        unique=True,
        help_text="Opaque refresh token value",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="refresh_tokens",
    )
    expires_at = models.DateTimeField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ExpiringTokenQuerySet.as_manager()

    class Meta:
        db_table = "refresh_tokens"
        verbose_name = "refresh token"
        verbose_name_plural = "refresh tokens"

    def __str__(self):
        return f"Refresh token for {self.user_id}"

    @property
    def is_expired(self):
        return self.expires_at <= timezone.now()


class VerificationToken(models.Model):
    """
    Single-use token for out-of-band confirmation.

    Purposes:
        email_verification: proves email ownership (pending -> active)
        password_reset: authorizes a password rewrite without logging in
        verify_password: 6-digit code for the verify-code flow

    Redemption deletes the row, so a token can succeed at most once.
    Unknown, expired and already-used tokens look the same to callers.
    """

    class Purpose(models.TextChoices):
        EMAIL_VERIFICATION = "email_verification", "Email Verification"
        PASSWORD_RESET = "password_reset", "Password Reset"
        VERIFY_PASSWORD = "verify_password", "Verify Password Code"

    token = models.CharField(
        max_length=64,
        primary_key=True,
        help_text="Token or numeric code value",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="verification_tokens",
    )
    purpose = models.CharField(
        max_length=32,
        choices=Purpose.choices,
        db_column="token_type",
    )
    expires_at = models.DateTimeField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ExpiringTokenQuerySet.as_manager()

    class Meta:
        db_table = "user_tokens"
        verbose_name = "verification token"
        verbose_name_plural = "verification tokens"
        indexes = [
            models.Index(
                fields=["user", "purpose"],
                name="user_tokens_user_purpose_idx",
            ),
        ]

    def __str__(self):
        return f"{self.get_purpose_display()} for {self.user_id}"

    @property
    def is_expired(self):
        return self.expires_at <= timezone.now()
