"""
Tests for toolkit app.

This package contains test modules for:
- test_helpers.py: mask_email
- test_email_service.py: EmailService

Usage:
    pytest app/toolkit/tests/
"""
