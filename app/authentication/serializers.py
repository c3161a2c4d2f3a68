"""
Serializers for the authentication API.

This module provides DRF serializers for:
- User and Profile projections (responses)
- Request bodies of every auth, profile and role endpoint

Request serializers reject undeclared keys (RejectUnknownFieldsMixin) and
missing required fields, so each endpoint accepts exactly one shape. Request
keys are camelCase, matching the JSON the frontend sends; response
projections mirror the stored columns.

Related files:
    - models.py: User and Profile models
    - views.py: Views that use these serializers
    - services/auth_service.py: Business rules applied after validation

Security:
    - Password fields are write-only
    - The password hash is never part of any projection
"""

from rest_framework import serializers

from authentication.models import Profile, User
from core.serializer_mixins import RejectUnknownFieldsMixin


class StrictSerializer(RejectUnknownFieldsMixin, serializers.Serializer):
    """Plain request serializer that rejects unknown keys."""


# =============================================================================
# Projections
# =============================================================================


class UserSerializer(serializers.ModelSerializer):
    """
    Public projection of a user.

    Used in login, refresh, registration and profile responses.
    """

    class Meta:
        model = User
        fields = ["id", "email", "role", "status", "created_at"]
        read_only_fields = fields


class ProfileSerializer(serializers.ModelSerializer):
    """Profile row as stored."""

    user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Profile
        fields = [
            "user_id",
            "first_name",
            "last_name",
            "title",
            "function",
            "geo_id",
            "avatar_id",
            "pen_name",
            "location",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


# =============================================================================
# Auth request bodies
# =============================================================================


class RegisterSerializer(StrictSerializer):
    """
    Registration body.

    Password strength (length and character classes) is checked by
    AuthService.register so the same rule covers password resets.
    """

    email = serializers.EmailField(max_length=254)
    password = serializers.CharField(
        write_only=True,
        trim_whitespace=False,
        style={"input_type": "password"},
        help_text="At least 8 characters with upper-case, lower-case and a digit.",
    )
    firstName = serializers.CharField(
        source="first_name", max_length=150, required=False, allow_blank=True
    )
    lastName = serializers.CharField(
        source="last_name", max_length=150, required=False, allow_blank=True
    )


class LoginSerializer(StrictSerializer):
    email = serializers.EmailField(max_length=254)
    password = serializers.CharField(
        write_only=True, trim_whitespace=False, style={"input_type": "password"}
    )


class RefreshTokenSerializer(StrictSerializer):
    """Optional body fallback for clients that cannot send the cookie."""

    refreshToken = serializers.CharField(
        source="refresh_token", required=False, allow_blank=True
    )


class EmailSerializer(StrictSerializer):
    email = serializers.EmailField(max_length=254)


class TokenSerializer(StrictSerializer):
    token = serializers.CharField(max_length=64)


class ResetPasswordSerializer(StrictSerializer):
    token = serializers.CharField(max_length=64)
    password = serializers.CharField(
        write_only=True, trim_whitespace=False, style={"input_type": "password"}
    )


class VerifyCodeConfirmSerializer(StrictSerializer):
    email = serializers.EmailField(max_length=254)
    code = serializers.RegexField(
        r"^\d{6}$", error_messages={"invalid": "Code must be 6 digits."}
    )


# =============================================================================
# User request bodies
# =============================================================================


class ProfileUpdateSerializer(StrictSerializer):
    """
    Profile fields accepted by PUT (full replace) and PATCH (partial).

    Keys map to Profile columns through ``source``; validated_data is keyed
    by column name, ready for AuthService.update_profile.
    """

    firstName = serializers.CharField(
        source="first_name", max_length=150, required=False, allow_blank=True, allow_null=True
    )
    lastName = serializers.CharField(
        source="last_name", max_length=150, required=False, allow_blank=True, allow_null=True
    )
    title = serializers.CharField(
        max_length=150, required=False, allow_blank=True, allow_null=True
    )
    function = serializers.CharField(
        max_length=150, required=False, allow_blank=True, allow_null=True
    )
    geoId = serializers.IntegerField(source="geo_id", required=False, allow_null=True)
    avatarId = serializers.IntegerField(
        source="avatar_id", required=False, allow_null=True
    )
    penName = serializers.CharField(
        source="pen_name", max_length=150, required=False, allow_blank=True, allow_null=True
    )
    location = serializers.CharField(
        max_length=255, required=False, allow_blank=True, allow_null=True
    )


class ChangeRoleSerializer(StrictSerializer):
    """Role is checked against User.Role by the service, after the admin check."""

    role = serializers.CharField(max_length=20, help_text=f"One of: {', '.join(User.Role.values)}")
    userId = serializers.IntegerField(source="user_id", required=False, min_value=1)


# =============================================================================
# Response shapes (OpenAPI only)
# =============================================================================


class MessageResponseSerializer(serializers.Serializer):
    message = serializers.CharField()


class RegisterResponseSerializer(MessageResponseSerializer):
    user = UserSerializer()


class LoginResponseSerializer(MessageResponseSerializer):
    accessToken = serializers.CharField()
    user = UserSerializer()


class RefreshResponseSerializer(serializers.Serializer):
    accessToken = serializers.CharField()
    user = UserSerializer()


class ResetTokenResponseSerializer(MessageResponseSerializer):
    resetToken = serializers.CharField()


class ProvidersResponseSerializer(serializers.Serializer):
    google = serializers.BooleanField()
    facebook = serializers.BooleanField()
    apple = serializers.BooleanField()


class ProfileResponseSerializer(serializers.Serializer):
    user = UserSerializer()
    profile = ProfileSerializer(allow_null=True)


class ProfileUpdateResponseSerializer(MessageResponseSerializer):
    profile = ProfileSerializer()


class ChangeRoleResponseSerializer(MessageResponseSerializer):
    userId = serializers.IntegerField()
    newRole = serializers.CharField()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()
    code = serializers.CharField()
    details = serializers.DictField(required=False)
