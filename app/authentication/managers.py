"""
Custom managers for the authentication models.

This module provides:
- UserManager: email-based user creation (lowercased emails, bcrypt hashes)
- ExpiringTokenQuerySet: chainable expiry filters shared by refresh tokens
  and verification tokens

Related files:
    - models.py: User, RefreshToken and VerificationToken use these managers

Security:
    - Passwords are hashed via set_password() with the configured hasher
    - OAuth-only accounts get an unusable password
"""

from __future__ import annotations

from django.contrib.auth.models import BaseUserManager
from django.db import models
from django.utils import timezone


class UserManager(BaseUserManager):
    """
    Custom manager for User model with email-based authentication.

    Emails are stored lowercased in full (not only the domain part), so
    lookups and the case-insensitive unique constraint agree.

    Usage:
        # Email/password registration (status defaults to pending)
        user = User.objects.create_user(
            email='user@example.com',
            password='Passw0rd1'
        )

        # OAuth user: no local password, already verified by the provider
        user = User.objects.create_user(
            email='user@example.com',
            status=User.Status.ACTIVE,
        )

        # Superuser (admin role, active)
        admin = User.objects.create_superuser(
            email='admin@example.com',
            password='AdminPass1'
        )
    """

    use_in_migrations = True

    @classmethod
    def normalize_email(cls, email):
        return (email or "").strip().lower()

    def get_by_natural_key(self, username):
        return self.get(email__iexact=username)

    def create_user(self, email, password=None, **extra_fields):
        """
        Create and save a user with the given email and password.

        Args:
            email: User's email address (required)
            password: Plaintext password (None for OAuth users)
            **extra_fields: Additional fields (role, status, ...)

        Returns:
            User: The created user instance

        Raises:
            ValueError: If email is not provided
            IntegrityError: If the email is already registered
        """
        if not email:
            raise ValueError("The Email field must be set")

        email = self.normalize_email(email)

        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)

        user = self.model(email=email, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create and save an active admin with Django admin access.

        Raises:
            ValueError: If is_staff or is_superuser is not True
        """
        from authentication.models import User

        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.Role.ADMIN)
        extra_fields.setdefault("status", User.Status.ACTIVE)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(email, password, **extra_fields)


class ExpiringTokenQuerySet(models.QuerySet):
    """
    QuerySet for rows carrying an ``expires_at`` column.

    Expiry is always evaluated against the database at query time, so a
    token that expires between issue and use is simply not matched.

    Usage:
        RefreshToken.objects.unexpired().filter(token=raw)
        VerificationToken.objects.expired().delete()
    """

    def unexpired(self):
        """Rows whose expiry is still in the future."""
        return self.filter(expires_at__gt=timezone.now())

    def expired(self):
        """Rows that can no longer be redeemed."""
        return self.filter(expires_at__lte=timezone.now())
