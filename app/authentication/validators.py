"""
Password strength rules.

Registration and password reset require at least 8 characters with at least
one upper-case letter, one lower-case letter and one digit. The same rule is
registered in AUTH_PASSWORD_VALIDATORS so the admin and createsuperuser
enforce it too.

Usage:
    from authentication.validators import validate_password_strength

    validate_password_strength("Passw0rd1")  # OK
    validate_password_strength("password")   # raises ValidationError
"""

import re

from django.core.exceptions import ValidationError

MIN_PASSWORD_LENGTH = 8

PASSWORD_RULES = (
    (re.compile(r"[A-Z]"), "Password must contain an upper-case letter."),
    (re.compile(r"[a-z]"), "Password must contain a lower-case letter."),
    (re.compile(r"[0-9]"), "Password must contain a digit."),
)


def validate_password_strength(password: str) -> None:
    """
    Raise ValidationError listing every rule the password breaks.

    Raises:
        django.core.exceptions.ValidationError: With one message per
            failed rule
    """
    errors = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
        )
    errors.extend(message for pattern, message in PASSWORD_RULES if not pattern.search(password))
    if errors:
        raise ValidationError(errors)


class MixedCharacterPasswordValidator:
    """Django password validator wrapping the mixed-character rules."""

    def validate(self, password, user=None):
        missing = [message for pattern, message in PASSWORD_RULES if not pattern.search(password)]
        if missing:
            raise ValidationError(missing, code="password_too_simple")

    def get_help_text(self):
        return "Your password must mix upper-case letters, lower-case letters and digits."
