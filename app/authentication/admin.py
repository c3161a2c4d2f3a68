"""
Django admin configuration for authentication models.

This module registers User, Profile, RefreshToken and VerificationToken
with the Django admin site for management. Changing a user's status to
suspended here is the administrative suspension path; signals.py revokes
the user's refresh tokens when that happens.

Related files:
    - models.py: Model definitions
    - signals.py: Session revocation on suspension
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import BaseUserCreationForm, UserChangeForm

from authentication.models import Profile, RefreshToken, User, VerificationToken
from authentication.services import AuthService


class UserCreationForm(BaseUserCreationForm):
    class Meta:
        model = User
        fields = ("email", "role", "status")


class UserUpdateForm(UserChangeForm):
    class Meta:
        model = User
        fields = "__all__"


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin configuration for User model.

    Customized for email-based authentication with role and status.
    Profile data is managed via ProfileAdmin.
    """

    form = UserUpdateForm
    add_form = UserCreationForm
    list_display = (
        "email",
        "role",
        "status",
        "is_staff",
        "created_at",
        "last_login",
    )
    list_filter = ("status", "role", "is_staff", "is_superuser", "created_at")
    search_fields = ("email",)
    ordering = ("-created_at",)
    actions = ("activate_users", "suspend_users")

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Access", {"fields": ("role", "status")}),
        (
            "Admin site",
            {"fields": ("is_staff", "is_superuser", "groups", "user_permissions")},
        ),
        ("Important dates", {"fields": ("created_at", "last_login")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "role", "status", "password1", "password2"),
            },
        ),
    )

    readonly_fields = ("created_at", "last_login")

    @admin.action(description="Activate selected users")
    def activate_users(self, request, queryset):
        users = queryset.exclude(status=User.Status.ACTIVE)
        count = 0
        for user in users:
            AuthService.activate_user(user)
            count += 1
        self.message_user(request, f"Activated {count} user(s).")

    @admin.action(description="Suspend selected users")
    def suspend_users(self, request, queryset):
        users = queryset.exclude(status=User.Status.SUSPENDED)
        count = 0
        for user in users:
            AuthService.suspend_user(user)
            count += 1
        self.message_user(request, f"Suspended {count} user(s).")


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = (
        "user",
        "first_name",
        "last_name",
        "pen_name",
        "title",
        "created_at",
    )
    search_fields = ("user__email", "first_name", "last_name", "pen_name")
    ordering = ("-created_at",)

    raw_id_fields = ("user",)
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        ("User", {"fields": ("user",)}),
        ("Identity", {"fields": ("first_name", "last_name", "pen_name")}),
        ("Work", {"fields": ("title", "function")}),
        ("References", {"fields": ("geo_id", "avatar_id", "location")}),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )


@admin.register(RefreshToken)
class RefreshTokenAdmin(admin.ModelAdmin):
    """
    Live sessions. Deleting a row logs that session out at its next refresh.
    """

    list_display = ("user", "created_at", "expires_at", "is_expired_display")
    list_filter = ("created_at", "expires_at")
    search_fields = ("user__email",)
    ordering = ("-created_at",)

    raw_id_fields = ("user",)
    exclude = ("token",)
    readonly_fields = ("user", "created_at", "expires_at")

    def has_add_permission(self, request):
        return False

    @admin.display(boolean=True, description="Expired")
    def is_expired_display(self, obj):
        return obj.is_expired


@admin.register(VerificationToken)
class VerificationTokenAdmin(admin.ModelAdmin):
    list_display = ("user", "purpose", "created_at", "expires_at", "is_expired_display")
    list_filter = ("purpose", "created_at", "expires_at")
    search_fields = ("user__email",)
    ordering = ("-created_at",)

    raw_id_fields = ("user",)
    exclude = ("token",)
    readonly_fields = ("user", "purpose", "created_at", "expires_at")

    def has_add_permission(self, request):
        return False

    @admin.display(boolean=True, description="Expired")
    def is_expired_display(self, obj):
        return obj.is_expired
