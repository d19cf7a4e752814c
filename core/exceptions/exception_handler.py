"""
Global exception handler for the NEUQueue platform.

This module provides a custom exception handler for DRF that handles
custom exceptions and provides consistent error responses.
"""

import logging
import traceback
from typing import Any, Dict, Optional

from django.core.exceptions import ObjectDoesNotExist, PermissionDenied
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.utils import DatabaseError, IntegrityError
from django.http import Http404
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import (
    APIException as DRFAPIException,
    NotAuthenticated,
    NotFound,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from .custom_exceptions import APIException

logger = logging.getLogger(__name__)


def get_error_code(exception: Exception) -> str:
    """
    Get standardized error code from exception.

    Args:
        exception: The exception to get code for

    Returns:
        str: Standardized error code
    """
    if isinstance(exception, APIException):
        return exception.error_code
    elif isinstance(exception, ValidationError):
        return "validation_error"
    elif isinstance(exception, NotAuthenticated):
        return "unauthorized"
    elif isinstance(exception, PermissionDenied):
        return "forbidden"
    elif isinstance(exception, (Http404, NotFound, ObjectDoesNotExist)):
        return "not_found"
    elif isinstance(exception, IntegrityError):
        return "conflict"
    elif isinstance(exception, DRFAPIException):
        return str(exception.default_code)
    return "internal"


def get_error_message(exception: Exception) -> str:
    """
    Get a human readable message for exception.

    Args:
        exception: The exception

    Returns:
        str: Error message
    """
    if isinstance(exception, APIException):
        return str(exception.message)

    if isinstance(exception, ValidationError):
        return str(_("Invalid input."))

    if hasattr(exception, "detail") and isinstance(exception.detail, str):
        return str(exception.detail)

    if isinstance(exception, IntegrityError):
        return str(_("A conflict occurred with existing data."))
    elif isinstance(exception, ObjectDoesNotExist):
        return str(_("The requested resource was not found."))

    return str(exception)


def get_error_details(exception: Exception) -> Optional[Dict[str, Any]]:
    """
    Get detailed error information from exception.

    Args:
        exception: The exception

    Returns:
        Optional[Dict]: Error details if available
    """
    if isinstance(exception, APIException):
        return exception.details

    if (
        isinstance(exception, ValidationError)
        and hasattr(exception, "detail")
        and not isinstance(exception.detail, str)
    ):
        if isinstance(exception.detail, list):
            return {"validation_errors": exception.detail}
        return exception.detail

    return None


def exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """
    Custom exception handler for DRF views.

    Handles both DRF and custom exceptions, providing consistent response format.

    Args:
        exc: The exception
        context: The exception context

    Returns:
        Response: Consistent error response
    """
    # Handle Django ValidationError by converting to DRF ValidationError
    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, "message_dict"):
            exc = ValidationError(detail=exc.message_dict)
        else:
            exc = ValidationError(detail=exc.messages)

    error_code = get_error_code(exc)
    error_message = get_error_message(exc)
    error_details = get_error_details(exc)

    view = context.get("view")
    view_name = view.__class__.__name__ if view is not None else "unknown"

    if isinstance(exc, (APIException, DRFAPIException, Http404, PermissionDenied)):
        logger.warning(f"{view_name}: {error_code} - {error_message}")
    else:
        logger.error(
            f"{view_name}: {error_code} - {error_message}\n"
            f"Traceback: {traceback.format_exc()}"
        )

    if isinstance(exc, APIException):
        return Response(exc.to_dict(), status=exc.status_code)

    payload = {
        "error": error_code,
        "message": error_message,
        **({"details": error_details} if error_details is not None else {}),
    }

    if isinstance(exc, IntegrityError):
        return Response(payload, status=status.HTTP_409_CONFLICT)
    elif isinstance(exc, DatabaseError):
        return Response(payload, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    # Let DRF pick status and headers (e.g. WWW-Authenticate), then standardize
    response = drf_exception_handler(exc, context)
    if response is not None:
        response.data = payload
        return response

    return Response(payload, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
