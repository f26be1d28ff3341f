import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Internal server error."


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The resource conflicts with an existing one."
    default_code = "conflict"


def _first_message(detail):
    if isinstance(detail, dict):
        if "detail" in detail:
            return _first_message(detail["detail"])
        for field_name, value in detail.items():
            message = _first_message(value)
            if field_name == "non_field_errors":
                return message
            return f"{field_name}: {message}"
        return ""
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def envelope_exception_handler(exc, context):
    """
    Render every API error as {"success": false, "error": {"message", "details"}}.
    Exceptions DRF does not know about are logged and turned into a generic 500.
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception("Unhandled error in %s", view.__class__.__name__ if view else "view", exc_info=exc)
        return Response(
            {"success": False, "error": {"message": GENERIC_ERROR_MESSAGE}},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    details = response.data
    response.data = {
        "success": False,
        "error": {"message": _first_message(details), "details": details},
    }
    return response
