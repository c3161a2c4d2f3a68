"""
Tests for authentication app.

This package contains test modules for:
- test_models.py: User, Profile, token models, managers and password rules
- test_token_service.py: Access/refresh token issuance and rotation
- test_verification_service.py: Single-use verification tokens and codes
- test_services.py: AuthService flows
- test_serializers.py: Request validation
- test_authentication.py: Bearer authentication and role permissions
- test_providers.py: Social identity providers (HTTP mocked)
- test_views.py: API endpoint tests
- test_integration.py: End-to-end user journeys
- test_tasks.py: Celery task tests
- test_signals.py / test_admin.py: Suspension handling

Usage:
    pytest app/authentication/tests/
    pytest app/authentication/tests/test_views.py
"""
