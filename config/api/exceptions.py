from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .responses import JSONValue

if TYPE_CHECKING:
    from rest_framework.response import Response

logger = logging.getLogger(__name__)


def _to_json_value(value: object) -> JSONValue:
    if value is None or isinstance(value, str | int | float | bool):
        return value
    if isinstance(value, Mapping):
        return {str(k): _to_json_value(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_to_json_value(v) for v in value]
    return str(value)


def custom_exception_handler(
    exc: Exception,
    context: dict[str, Any],
) -> Response:
    """Wrap DRF error responses in the `{status, message, data, errors}`
    envelope; anything DRF does not handle becomes a logged 500."""

    # Lazy imports: safe even if settings aren't configured at import time.
    from rest_framework import status
    from rest_framework.exceptions import APIException
    from rest_framework.response import Response
    from rest_framework.views import exception_handler as drf_exception_handler

    response = drf_exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "api.unhandled_error view=%s err=%s",
            view.__class__.__name__ if view is not None else None,
            exc,
            exc_info=exc,
        )
        return Response(
            {
                "status": 1,
                "message": "Internal server error",
                "data": None,
                "errors": None,
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    detail = _to_json_value(response.data)
    message = "Request failed"
    if isinstance(detail, dict):
        maybe = detail.get("detail")
        if isinstance(maybe, str):
            message = maybe
        if isinstance(exc, APIException) and "detail" in detail:
            codes = exc.get_codes()
            if isinstance(codes, str):
                detail["code"] = codes

    response.data = {
        "status": 1,
        "message": message,
        "data": None,
        "errors": detail,
    }
    return response
