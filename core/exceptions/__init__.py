"""
NEUQueue – centralised custom exceptions.

Import these from `core.exceptions` across the project instead of redefining
ad-hoc `Exception` subclasses in each app.
"""

from .custom_exceptions import (
    APIException,
    AuthenticationException,
    DuplicateResourceException,
    InvalidDataException,
    InvalidOperationException,
    InvalidStateTransitionException,
    PermissionDeniedException,
    PurposeMismatchException,
    ResourceNotFoundException,
)

__all__ = [
    "APIException",
    "AuthenticationException",
    "DuplicateResourceException",
    "InvalidDataException",
    "InvalidOperationException",
    "InvalidStateTransitionException",
    "PermissionDeniedException",
    "PurposeMismatchException",
    "ResourceNotFoundException",
]
