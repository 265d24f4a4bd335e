"""
Error taxonomy shared by every service module, and the DRF exception
handler that renders all failures in the ``{success: false, message}``
envelope.
"""

import logging

from django.conf import settings
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"

    def __init__(self, message=None, **extra):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)


class InvalidInput(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class Unauthenticated(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Access denied. No token provided."


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied."


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class BusinessRuleViolation(ServiceError):
    """A state-machine or invariant check rejected the operation."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Operation not allowed"


def _flatten_errors(detail, prefix=""):
    """Turn DRF's nested ValidationError detail into ``[{field, message}]``."""
    if isinstance(detail, dict):
        items = []
        for field, value in detail.items():
            name = field if not prefix else f"{prefix}.{field}"
            items.extend(_flatten_errors(value, name))
        return items
    if isinstance(detail, list):
        items = []
        for value in detail:
            items.extend(_flatten_errors(value, prefix))
        return items
    return [{"field": prefix or "non_field_errors", "message": str(detail)}]


def api_exception_handler(exc, context):
    """
    DRF EXCEPTION_HANDLER.

    ServiceError subclasses carry their own status and message. DRF's own
    exceptions keep their status code. Anything else is logged and turned
    into a 500 whose detail is only exposed when DEBUG is on.
    """
    if isinstance(exc, ServiceError):
        return Response(
            {"success": False, "message": exc.message, **exc.extra},
            status=exc.status_code,
        )

    if isinstance(exc, exceptions.ValidationError):
        return Response(
            {
                "success": False,
                "message": "Validation failed",
                "errors": _flatten_errors(exc.detail),
            },
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, exceptions.Throttled):
        view = context.get("view")
        message = getattr(view, "throttled_message", None) or "Too many requests. Please try again later."
        response = Response({"success": False, "message": message}, status=exc.status_code)
        if exc.wait is not None:
            response["Retry-After"] = str(int(exc.wait))
        return response

    response = exception_handler(exc, context)
    if response is not None:
        detail = response.data.get("detail") if isinstance(response.data, dict) else response.data
        if isinstance(exc, Http404):
            detail = "Not found"
        response.data = {"success": False, "message": str(detail)}
        return response

    view = context.get("view")
    logger.exception("Unhandled error in %s", view.__class__.__name__ if view else "request")
    payload = {"success": False, "message": "Server error"}
    if settings.DEBUG:
        payload["error"] = str(exc)
    return Response(payload, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
