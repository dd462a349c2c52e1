# backend/exceptions.py

"""
DRF exception handler that renders every API error in the same failure
envelope the domain endpoints use: {"success": false, "message": "...",
"errors": {...}}.

- framework errors (auth, permission, 404, serializer validation) keep
  their status code
- anything else is logged with its traceback and answered with a 500
  envelope
"""

import logging

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.views import exception_handler, set_rollback

from backend.responses import fail, first_error_message

logger = logging.getLogger(__name__)


def envelope_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.exception(
            "Unhandled API error",
            exc_info=exc,
            extra={"view": view.__class__.__name__ if view is not None else None},
        )
        set_rollback()
        return fail("Internal server error", status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    data = response.data
    body = {"success": False}

    if isinstance(exc, ValidationError):
        body["message"] = first_error_message(data)
        body["errors"] = data
    elif isinstance(data, dict) and "detail" in data:
        body["message"] = str(data["detail"])
    else:
        body["message"] = first_error_message(data, default="Request failed")

    response.data = body
    return response
