"""Error response helpers shared by the module views.

Every error body carries a human-readable ``detail``; some add
structured fields next to it.
"""

from __future__ import annotations

from typing import Any

from rest_framework import status
from rest_framework.response import Response

from modules.products.exceptions import InsufficientStock


def detail_response(detail: str, status_code: int, **extra: Any) -> Response:
    return Response({"detail": detail, **extra}, status=status_code)


def insufficient_stock_response(exc: InsufficientStock) -> Response:
    """400 naming the product and the exact quantities involved."""
    return detail_response(
        str(exc),
        status.HTTP_400_BAD_REQUEST,
        product=exc.product_name,
        available=exc.available,
        requested=exc.requested,
    )


def pydantic_error_response(exc: Any, detail: str = "Invalid data.") -> Response:
    """400 for a Pydantic ``ValidationError``, keyed by field path."""
    errors = {
        ".".join(str(part) for part in error["loc"]): error["msg"]
        for error in exc.errors()
    }
    return detail_response(detail, status.HTTP_400_BAD_REQUEST, errors=errors)
