"""
DRF exception handler producing the service's error envelope.

Every error response has the shape::

    {"error": "<human readable>", "code": "<MACHINE_CODE>", "details": {...}}

``details`` is only present for validation failures and application errors
that carry extra context.

Mapping:
    - core.exceptions.BaseApplicationError subclasses use their own
      ``status_code`` and ``error_code``
    - DRF serializer ValidationError -> 400 VALIDATION_ERROR with field errors
    - Other DRF APIExceptions (NotAuthenticated, InvalidToken, PermissionDenied,
      MethodNotAllowed, Throttled, ...) keep their status and headers
    - Anything else is logged with its traceback and collapsed into a generic
      500 INTERNAL_ERROR so internals never reach the client

Configured in settings.REST_FRAMEWORK["EXCEPTION_HANDLER"].
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)

INTERNAL_ERROR_BODY = {"error": "Internal server error", "code": "INTERNAL_ERROR"}


def _error_code(exc: exceptions.APIException, data: Any) -> str:
    """Pick the most specific machine code DRF knows for the exception."""
    # simplejwt puts its own code next to the detail
    if isinstance(data, dict) and isinstance(data.get("code"), str):
        return data["code"].upper()
    codes = exc.get_codes()
    if isinstance(codes, str):
        return codes.upper()
    if isinstance(codes, dict) and isinstance(codes.get("detail"), str):
        return codes["detail"].upper()
    return str(exc.default_code).upper()


def _error_message(data: Any) -> str:
    if isinstance(data, dict) and "detail" in data:
        return str(data["detail"])
    if isinstance(data, list) and data:
        return str(data[0])
    return str(data)


def api_exception_handler(exc: Exception, context: dict) -> Response:
    """
    Translate any exception raised in a DRF view into the error envelope.

    Args:
        exc: The raised exception
        context: DRF handler context (contains ``view`` and ``request``)

    Returns:
        Response with the error envelope and an appropriate status code
    """
    view = context.get("view")
    view_name = view.__class__.__name__ if view is not None else "unknown"

    if isinstance(exc, BaseApplicationError):
        if exc.status_code >= 500:
            logger.error(f"{view_name}: {exc}")
        return Response(exc.to_dict(), status=exc.status_code)

    response = exception_handler(exc, context)

    if response is None:
        logger.exception(f"Unhandled error in {view_name}", exc_info=exc)
        return Response(INTERNAL_ERROR_BODY, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, exceptions.ValidationError):
        response.data = {
            "error": "Invalid input",
            "code": "VALIDATION_ERROR",
            "details": response.data,
        }
    elif isinstance(exc, exceptions.APIException):
        response.data = {
            "error": _error_message(response.data),
            "code": _error_code(exc, response.data),
        }
    else:
        # Http404 and django PermissionDenied are converted by DRF
        response.data = {
            "error": _error_message(response.data),
            "code": "NOT_FOUND"
            if response.status_code == status.HTTP_404_NOT_FOUND
            else "PERMISSION_DENIED",
        }
    return response
