"""
API Documentation Decorators

This module contains decorators for documenting API endpoints
using drf-yasg (Yet Another Swagger Generator).
"""

import functools
from typing import Any, Dict, List

from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status

BODY_METHODS = ("post", "put", "patch")
HTTP_METHODS = ("get", "post", "put", "patch", "delete")


def _build_parameters(query_params, path_params):
    manual_parameters = []
    seen = set()

    for location, params in ((openapi.IN_QUERY, query_params), (openapi.IN_PATH, path_params)):
        for param in params or []:
            key = (param["name"], location)
            # drf-yasg rejects duplicate (name, in) pairs
            if key in seen:
                continue
            seen.add(key)
            manual_parameters.append(
                openapi.Parameter(
                    param["name"],
                    location,
                    description=param.get("description", ""),
                    type=param.get("type", openapi.TYPE_STRING),
                    required=True if location == openapi.IN_PATH else param.get("required", False),
                )
            )

    return manual_parameters


def document_api_endpoint(
    summary: str = None,
    description: str = None,
    request_body: Any = None,
    responses: Dict = None,
    tags: List[str] = None,
    query_params: List[Dict] = None,
    path_params: List[Dict] = None,
    operation_id: str = None,
):
    """
    Decorator for documenting API endpoints.

    Can wrap a single view method or an APIView class; on a class every HTTP
    handler it defines is documented, and ``request_body`` is only attached
    to handlers that accept one.

    Args:
        summary: Short summary of what the operation does
        description: Verbose explanation of the operation behavior
        request_body: Request body schema
        responses: Response schemas for different HTTP status codes
        tags: A list of tags for API documentation control
        query_params: List of query parameters with name, description, required, and type
        path_params: List of path parameters with name, description, and type
        operation_id: Unique string used to identify the operation

    Returns:
        Decorated function or class with Swagger documentation
    """
    if responses is None:
        responses = {
            status.HTTP_200_OK: "Success",
            status.HTTP_400_BAD_REQUEST: "Bad Request",
            status.HTTP_404_NOT_FOUND: "Not Found",
            status.HTTP_500_INTERNAL_SERVER_ERROR: "Server Error",
        }

    manual_parameters = _build_parameters(query_params, path_params)

    def document(view_func, method_name=None):
        @functools.wraps(view_func)
        def wrapped_view(*args, **kwargs):
            return view_func(*args, **kwargs)

        accepts_body = method_name is None or method_name in BODY_METHODS
        return swagger_auto_schema(
            operation_summary=summary,
            operation_description=description,
            request_body=request_body if accepts_body else None,
            responses=responses,
            tags=tags,
            manual_parameters=manual_parameters or None,
            operation_id=operation_id,
        )(wrapped_view)

    def decorator(view):
        if not isinstance(view, type):
            return document(view)

        for method_name in HTTP_METHODS:
            handler = view.__dict__.get(method_name)
            if handler is not None:
                setattr(view, method_name, document(handler, method_name))
        return view

    return decorator
