"""
Pagination utilities for the NEUQueue platform.

Queue listings page with an opaque "start after" cursor: the id of the last
item of the previous page. Positions change as entries leave the queue, so
offsets would skip or repeat rows between requests.
"""

from collections import OrderedDict
from functools import reduce
import operator

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db.models import Q
from rest_framework.pagination import BasePagination
from rest_framework.response import Response

from core.exceptions import ResourceNotFoundException


class StartAfterCursorPagination(BasePagination):
    """
    Keyset pagination over a fixed ascending ordering.

    Features:
    - Cursor is the primary key of the last row already seen
    - Ordering must end with a unique field so the keyset is total
    - Consistent ``{<results_key>, next_cursor}`` response format
    """

    ordering = ("position", "created_at", "id")
    results_key = "results"
    limit_query_param = "limit"
    cursor_query_param = "cursor"

    def __init__(self, ordering=None, results_key=None):
        if ordering:
            self.ordering = tuple(ordering)
        if results_key:
            self.results_key = results_key

        options = getattr(settings, "NEUQUEUE", {})
        self.default_limit = options.get("DEFAULT_PAGE_SIZE", 10)
        self.max_limit = options.get("MAX_PAGE_SIZE", 100)
        self.next_cursor = None

    def get_limit(self, limit):
        if not limit:
            return self.default_limit
        return max(1, min(int(limit), self.max_limit))

    def _start_after_filter(self, queryset, cursor):
        # The cursor must belong to the listing being paged
        try:
            values = queryset.filter(pk=cursor).values(*self.ordering).first()
        except (ValidationError, ValueError):
            values = None
        if values is None:
            raise ResourceNotFoundException("Cursor not found")

        # (a > x) OR (a = x AND b > y) OR (a = x AND b = y AND c > z) ...
        clauses = []
        for index, field in enumerate(self.ordering):
            equal_part = {name: values[name] for name in self.ordering[:index]}
            clauses.append(Q(**equal_part, **{f"{field}__gt": values[field]}))
        return reduce(operator.or_, clauses)

    def paginate_queryset(self, queryset, request=None, view=None, limit=None, cursor=None):
        """
        Return one page of ``queryset`` and the cursor for the next page.

        Args:
            queryset: Unordered queryset to page through
            request: Optional request to read ``limit`` and ``cursor`` from
            view: Unused, part of the DRF pagination interface
            limit: Page size (clamped to the configured maximum)
            cursor: Primary key of the last row of the previous page

        Returns:
            tuple: (list of rows, next cursor or None for an empty page)
        """
        if request is not None:
            limit = limit or request.query_params.get(self.limit_query_param)
            cursor = cursor or request.query_params.get(self.cursor_query_param)

        queryset = queryset.order_by(*self.ordering)
        if cursor:
            queryset = queryset.filter(self._start_after_filter(queryset, cursor))

        page = list(queryset[: self.get_limit(limit)])
        self.next_cursor = str(page[-1].pk) if page else None
        return page, self.next_cursor

    def get_paginated_response(self, data, next_cursor=None):
        if next_cursor is None:
            next_cursor = self.next_cursor
        return Response(
            OrderedDict(
                [
                    (self.results_key, data),
                    ("next_cursor", next_cursor),
                ]
            )
        )
