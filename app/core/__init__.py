"""
Core Application - Infrastructure & Base Classes

Generic, reusable pieces with no knowledge of users or sessions:

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes and HTTP status
    - ValidationError, AuthenticationError, PermissionDeniedError,
      NotFoundError, ConflictError, ExternalServiceError

Exception handling (core.exception_handler):
    - api_exception_handler: DRF EXCEPTION_HANDLER producing {error, code}

Helpers (import from core.helpers):
    - generate_token, generate_numeric_code

Views (core.views):
    - health_check: Liveness/readiness endpoint

OpenAPI (core.openapi):
    - group_auth_endpoints: drf-spectacular postprocessing hook
"""
