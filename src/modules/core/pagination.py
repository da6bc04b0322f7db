"""Shared page-number pagination for list endpoints.

Responses carry ``total``, ``page`` and ``pages`` next to the result
list.  Subclasses rename the list key (``products``, ``orders``) through
``results_key``.
"""

from __future__ import annotations

import math

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardResultsSetPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 100
    results_key = "results"

    def get_paginated_response(self, data) -> Response:
        total = self.page.paginator.count
        page_size = self.page.paginator.per_page
        return Response(
            {
                "total": total,
                "page": self.page.number,
                "pages": math.ceil(total / page_size) if page_size else 0,
                self.results_key: data,
            }
        )

    def get_paginated_response_schema(self, schema: dict) -> dict:
        return {
            "type": "object",
            "required": ["total", "page", "pages", self.results_key],
            "properties": {
                "total": {"type": "integer", "example": 42},
                "page": {"type": "integer", "example": 1},
                "pages": {"type": "integer", "example": 3},
                self.results_key: schema,
            },
        }
