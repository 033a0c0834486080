"""Response envelope shared by every JSON endpoint.

`{"status": 0 | 1, "message": str, "data": ..., "errors": ...}`; status 0
means success. Error responses raised as exceptions get the same shape from
`config.api.exceptions.custom_exception_handler`.
"""

from __future__ import annotations

from typing import Final, TypeAlias

from rest_framework import status
from rest_framework.response import Response

JSONScalar: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

STATUS_OK: Final[int] = 0
STATUS_ERROR: Final[int] = 1


def success_response(
    data: JSONValue | None,
    message: str = "OK",
    *,
    status_code: int = status.HTTP_200_OK,
) -> Response:
    payload: dict[str, JSONValue] = {
        "status": STATUS_OK,
        "message": message,
        "data": data,
        "errors": None,
    }
    return Response(payload, status=status_code)


def error_response(
    message: str,
    *,
    errors: JSONValue | None = None,
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> Response:
    payload: dict[str, JSONValue] = {
        "status": STATUS_ERROR,
        "message": message,
        "data": None,
        "errors": errors,
    }
    return Response(payload, status=status_code)
