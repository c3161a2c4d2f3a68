"""
Service layer for the authentication app.

- AuthService: registration, login, verification, reset, social and profile flows
- TokenService: access/refresh token issuance and rotation
- VerificationTokenService: single-use verification tokens and codes

Usage:
    from authentication.services import AuthService, TokenService
"""

from authentication.services.auth_service import AuthService
from authentication.services.token_service import TokenPair, TokenService
from authentication.services.verification_service import VerificationTokenService

__all__ = [
    "AuthService",
    "TokenPair",
    "TokenService",
    "VerificationTokenService",
]
