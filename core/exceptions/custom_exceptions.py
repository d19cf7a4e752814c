"""
Custom exceptions for the NEUQueue platform.

Services raise these and the DRF exception handler turns them into
``{"error", "message", "details"}`` responses with the matching status code.
"""

from django.utils.translation import gettext_lazy as _
from rest_framework import status


class APIException(Exception):
    """Base exception for all API-related exceptions."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "internal"
    default_message = _("An unexpected error occurred.")

    def __init__(self, message=None, status_code=None, details=None):
        self.message = message or self.default_message
        if status_code:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message)

    def to_dict(self):
        """Convert exception to the response payload."""
        error_dict = {
            "error": self.error_code,
            "message": str(self.message),
        }

        if self.details:
            error_dict["details"] = self.details

        return error_dict


class InvalidDataException(APIException):
    """Exception raised when request data is invalid."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "bad_request"
    default_message = _("Invalid data provided.")


class PurposeMismatchException(InvalidDataException):
    """Exception raised when a customer's purpose does not match the station type."""

    error_code = "purpose_mismatch"
    default_message = _("Purpose does not match the station type.")


class AuthenticationException(APIException):
    """Exception raised for authentication errors."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "unauthorized"
    default_message = _("Authentication failed.")


class PermissionDeniedException(APIException):
    """Exception raised when the caller is not allowed to perform an action."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "forbidden"
    default_message = _("You do not have permission to perform this action.")


class ResourceNotFoundException(APIException):
    """Exception raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"
    default_message = _("The requested resource was not found.")


class DuplicateResourceException(APIException):
    """Exception raised when attempting to create a duplicate resource."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "conflict"
    default_message = _("A resource with this identifier already exists.")


class InvalidOperationException(APIException):
    """Exception raised when an operation is invalid in the current state."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "invalid_operation"
    default_message = _("This operation is not valid in the current state.")


class InvalidStateTransitionException(InvalidOperationException):
    """Exception raised when a queue entry cannot move to the requested status."""

    error_code = "invalid_state_transition"
    default_message = _("This transition is not allowed from the current status.")

    def __init__(self, message=None, current_status=None):
        self.current_status = current_status
        details = {"current_status": current_status} if current_status else None
        super().__init__(message=message, details=details)
