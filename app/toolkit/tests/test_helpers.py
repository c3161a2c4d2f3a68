"""
Tests for toolkit helpers.
"""

from __future__ import annotations

import pytest

from toolkit.helpers import mask_email


class TestMaskEmail:
    """Tests for mask_email."""

    @pytest.mark.parametrize(
        "email,expected",
        [
            ("john.doe@example.com", "j***@example.com"),
            ("a@example.com", "***@example.com"),
            ("first@sub.example.co.uk", "f***@sub.example.co.uk"),
            ("", "***"),
            ("not-an-email", "***"),
        ],
    )
    def test_masks_local_part(self, email, expected):
        """
        Only the first character and the domain survive.

        Why it matters: Log lines must not carry full addresses.
        """
        assert mask_email(email) == expected
