# backend/responses.py

"""
RESPONSE ENVELOPE

Every JSON endpoint answers with the same outer shape:

    success: {"success": true,  "message": "...", "data": {...}}
    failure: {"success": false, "message": "...", "errors": {...}}

`errors` is present only for request-shape validation failures.
"""

from __future__ import annotations

from typing import Any, Optional

from rest_framework import status as http
from rest_framework.response import Response


def ok(data: Any = None, message: str = "", *, status: int = http.HTTP_200_OK) -> Response:
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return Response(body, status=status)


def created(data: Any = None, message: str = "") -> Response:
    return ok(data, message, status=http.HTTP_201_CREATED)


def fail(
    message: str,
    *,
    status: int = http.HTTP_400_BAD_REQUEST,
    errors: Optional[Any] = None,
) -> Response:
    body = {"success": False, "message": message}
    if errors is not None:
        body["errors"] = errors
    return Response(body, status=status)


def first_error_message(errors: Any, default: str = "Validation failed") -> str:
    """Pick a human-readable message out of a DRF `serializer.errors` tree."""
    if isinstance(errors, dict):
        for value in errors.values():
            msg = first_error_message(value, "")
            if msg:
                return msg
    elif isinstance(errors, (list, tuple)):
        for value in errors:
            msg = first_error_message(value, "")
            if msg:
                return msg
    elif errors:
        return str(errors)
    return default
