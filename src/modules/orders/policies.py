"""Bulk-order classification.

Pure function of the total quantity ordered.
"""

from __future__ import annotations

from dataclasses import dataclass

from modules.orders.constants import BULK_ORDER_THRESHOLD, OrderStatus


@dataclass(frozen=True)
class BulkClassification:
    is_bulk: bool
    status: str


def classify(total_quantity: int) -> BulkClassification:
    """Bulk when ``total_quantity`` exceeds ``BULK_ORDER_THRESHOLD``.

    Bulk orders start in "Quote Requested" and wait for an admin;
    everything else starts in "Pending".

    >>> classify(50).is_bulk
    False
    >>> classify(51).status
    'Quote Requested'
    """
    if total_quantity < 0:
        raise ValueError("Total quantity cannot be negative.")
    if total_quantity > BULK_ORDER_THRESHOLD:
        return BulkClassification(
            is_bulk=True, status=OrderStatus.QUOTE_REQUESTED.value
        )
    return BulkClassification(is_bulk=False, status=OrderStatus.PENDING.value)
