"""
Authentication application.

Accounts, sessions and access control:

    - models.py: User (email login, role, status), Profile, RefreshToken,
      VerificationToken
    - services/: TokenService (access JWTs, refresh rotation),
      VerificationTokenService (single-use links and codes), AuthService
      (register, login, reset, social login, profile, roles)
    - providers/: Google, Facebook and Apple code exchange
    - authentication.py / permissions.py: DRF authentication and role checks
    - signals.py: suspension ends every session

Usage:
    from authentication.models import User, Profile
    from authentication.services import AuthService, TokenService
"""
