"""
Role-based permission classes.

Roles are read from the user loaded by ActiveUserJWTAuthentication, never
from the access token claims, so a role change applies immediately.

Usage:
    from authentication.permissions import HasRole, IsAdmin

    class AdminOnlyView(APIView):
        permission_classes = [IsAdmin]

    class StaffView(APIView):
        permission_classes = [HasRole("admin", "moderator")]
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


class HasRole(permissions.BasePermission):
    """
    Allows access only to authenticated users holding one of the roles.

    Instances are callable, so ``HasRole("admin")`` can be listed in
    ``permission_classes`` next to permission classes.
    """

    message = "Insufficient permissions"

    def __init__(self, *roles: str):
        self.roles = frozenset(roles)

    def __call__(self):
        return self

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.role in self.roles


IsAdmin = HasRole("admin")
