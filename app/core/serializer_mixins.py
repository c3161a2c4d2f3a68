"""
Serializer mixins providing reusable functionality for DRF serializers.

This module contains mixin classes that can be combined with
DRF serializers to add specific functionality.

Available Mixins:
    RejectUnknownFieldsMixin: Fail validation on undeclared input keys

Usage:
    from core.serializer_mixins import RejectUnknownFieldsMixin

    class LoginSerializer(RejectUnknownFieldsMixin, serializers.Serializer):
        email = serializers.EmailField()
        password = serializers.CharField()

    LoginSerializer(data={"email": "a@x.com", "password": "x", "admin": True})
    # is_valid() -> False, errors: {"admin": ["Unknown field."]}

Note:
    - These are generic infrastructure patterns, not domain-specific
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import serializers

if TYPE_CHECKING:
    from typing import Any


class RejectUnknownFieldsMixin:
    """
    Reject request payloads carrying keys the serializer does not declare.

    DRF silently drops unknown keys by default. With this mixin every
    unexpected key is reported as a field error, so clients learn about
    typos and cannot smuggle fields (such as ``role`` or ``status``) into
    a request.

    Read-only fields count as unknown on input.
    """

    unknown_field_message = "Unknown field."

    def to_internal_value(self, data: Any) -> Any:
        if hasattr(data, "keys"):
            writable = {
                name
                for name, field in self.fields.items()  # type: ignore[attr-defined]
                if not field.read_only
            }
            unknown = sorted(set(data.keys()) - writable)
            if unknown:
                raise serializers.ValidationError(
                    {key: [self.unknown_field_message] for key in unknown}
                )
        return super().to_internal_value(data)  # type: ignore[misc]
