"""Order domain constants.

Status choices, the enforced transition table, payment methods, the
bulk-order threshold and the user-facing messages of the order flow.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "Pending", "Pending"
    QUOTE_REQUESTED = "Quote Requested", "Quote Requested"
    CONFIRMED = "Confirmed", "Confirmed"
    PROCESSING = "Processing", "Processing"
    SHIPPED = "Shipped", "Shipped"
    DELIVERED = "Delivered", "Delivered"
    CANCELLED = "Cancelled", "Cancelled"


class PaymentMethod(models.TextChoices):
    COD = "COD", "Cash on Delivery"
    ONLINE = "Online", "Online"
    BANK_TRANSFER = "Bank Transfer", "Bank Transfer"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.QUOTE_REQUESTED: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATES: set[str] = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

# Statuses from which the owner may still cancel on their own.
CUSTOMER_CANCELLABLE_STATES: set[str] = {
    OrderStatus.PENDING,
    OrderStatus.QUOTE_REQUESTED,
}

# Orders with more units than this (summed over all lines) are bulk orders.
BULK_ORDER_THRESHOLD = 50

ORDER_NUMBER_MAX_RETRIES = 5

BULK_ORDER_MESSAGE = (
    "Bulk order received! Our team will contact you with a quote shortly."
)
ORDER_PLACED_MESSAGE = "Order placed successfully!"
ORDER_CANCELLED_MESSAGE = "Order cancelled."
