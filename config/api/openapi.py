"""drf-spectacular schemas for the response envelope.

Runtime responses come from `config.api.responses` and
`config.api.exceptions.custom_exception_handler`; these builders only
document the same shapes.
"""

from __future__ import annotations

from drf_spectacular.utils import inline_serializer
from rest_framework import serializers
from rest_framework.serializers import Serializer


def _envelope(name: str, data: serializers.Field) -> Serializer:
    return inline_serializer(
        name=name,
        fields={
            "status": serializers.IntegerField(
                help_text="0 on success, 1 on error"
            ),
            "message": serializers.CharField(),
            "data": data,
            "errors": serializers.JSONField(allow_null=True),
        },
    )


def success_envelope_serializer(
    name: str,
    *,
    data: serializers.Field,
) -> Serializer:
    """Schema for `success_response(data)`."""

    return _envelope(name, data)


def error_envelope_serializer(name: str) -> Serializer:
    """Schema for error responses: `data` is always null and `errors`
    carries field errors or `{detail, code}`."""

    return _envelope(name, serializers.JSONField(allow_null=True))
