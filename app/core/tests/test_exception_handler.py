"""
Tests for the application exception hierarchy and the API error envelope.

These tests verify that:
- Every BaseApplicationError subclass maps to its HTTP status
- DRF exceptions are rewritten into {"error", "code"[, "details"]}
- Unexpected exceptions become a generic 500 without leaking internals
"""

from __future__ import annotations

import pytest
from rest_framework import exceptions
from rest_framework.test import APIRequestFactory
from rest_framework.views import APIView

from core.exception_handler import api_exception_handler
from core.exceptions import (
    AuthenticationError,
    BaseApplicationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


def _handle(exc):
    request = APIRequestFactory().get("/")
    return api_exception_handler(exc, {"view": APIView(), "request": request})


class TestApplicationErrors:
    """Tests for core.exceptions."""

    @pytest.mark.parametrize(
        "error_class,status_code,default_code",
        [
            (ValidationError, 400, "VALIDATION_ERROR"),
            (AuthenticationError, 401, "UNAUTHORIZED"),
            (PermissionDeniedError, 403, "PERMISSION_DENIED"),
            (NotFoundError, 404, "NOT_FOUND"),
            (ConflictError, 409, "CONFLICT"),
            (ExternalServiceError, 502, "EXTERNAL_SERVICE_ERROR"),
        ],
    )
    def test_error_classes_carry_status_and_default_code(
        self, error_class, status_code, default_code
    ):
        """
        Each error class has a fixed status and default code.

        Why it matters: Services raise by meaning; the status follows.
        """
        error = error_class("Something happened")

        assert error.status_code == status_code
        assert error.error_code == default_code
        assert isinstance(error, BaseApplicationError)

    def test_to_dict_omits_empty_details(self):
        """
        details only appears when there is something to say.

        Why it matters: Keeps the common envelope to two keys.
        """
        assert ConflictError("Email already exists", error_code="EMAIL_EXISTS").to_dict() == {
            "error": "Email already exists",
            "code": "EMAIL_EXISTS",
        }
        assert ValidationError("Bad", details={"field": ["x"]}).to_dict()["details"] == {
            "field": ["x"]
        }


class TestApiExceptionHandler:
    """Tests for api_exception_handler."""

    def test_application_error_uses_its_status(self):
        """
        Application errors are rendered with their own status and code.

        Why it matters: Clients switch on the code.
        """
        response = _handle(AuthenticationError("Nope", error_code="ACCOUNT_PENDING"))

        assert response.status_code == 401
        assert response.data == {"error": "Nope", "code": "ACCOUNT_PENDING"}

    def test_serializer_errors_become_validation_error(self):
        """
        DRF validation errors keep field details under details.

        Why it matters: Forms highlight the offending fields.
        """
        response = _handle(exceptions.ValidationError({"email": ["Enter a valid email address."]}))

        assert response.status_code == 400
        assert response.data["code"] == "VALIDATION_ERROR"
        assert response.data["details"] == {"email": ["Enter a valid email address."]}

    def test_not_authenticated_keeps_status(self):
        """
        DRF authentication errors stay 401 with an upper-case code.

        Why it matters: Every error body has the same keys.
        """
        response = _handle(exceptions.NotAuthenticated())

        assert response.status_code == 401
        assert response.data["code"] == "NOT_AUTHENTICATED"
        assert response.data["error"]

    def test_permission_denied_message_is_kept(self):
        """
        Permission messages reach the client.

        Why it matters: Role gates explain why access was refused.
        """
        response = _handle(exceptions.PermissionDenied("Insufficient permissions"))

        assert response.status_code == 403
        assert response.data == {
            "error": "Insufficient permissions",
            "code": "PERMISSION_DENIED",
        }

    def test_unexpected_exception_is_generic_500(self):
        """
        Unknown exceptions become INTERNAL_ERROR without details.

        Why it matters: Stack traces and messages must not leak.
        """
        response = _handle(RuntimeError("database password is hunter2"))

        assert response.status_code == 500
        assert response.data == {"error": "Internal server error", "code": "INTERNAL_ERROR"}
