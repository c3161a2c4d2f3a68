"""
Helper functions for common infrastructure operations.

This module provides domain-agnostic utility functions for:
- Token generation (cryptographic)
- Numeric one-time codes

These utilities are pure infrastructure - they have no knowledge
of users, sessions, or business logic.

Usage:
    from core.helpers import generate_token, generate_numeric_code

    token = generate_token(32)
    code = generate_numeric_code(6)
"""

from __future__ import annotations

import secrets


def generate_token(length: int = 32) -> str:
    """
    Generate a cryptographically secure random token.

    Args:
        length: Number of bytes (resulting string is 2x length in hex)

    Returns:
        Hexadecimal token string

    Example:
        token = generate_token(32)  # Returns 64-character hex string
    """
    return secrets.token_hex(length)


def generate_numeric_code(digits: int = 6) -> str:
    """
    Generate a random numeric code of a fixed width.

    Leading zeros are kept, so every code has exactly ``digits`` characters.

    Args:
        digits: Number of digits in the code

    Returns:
        Zero-padded numeric string

    Example:
        code = generate_numeric_code()  # e.g. "042917"
    """
    return str(secrets.randbelow(10**digits)).zfill(digits)
