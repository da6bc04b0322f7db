"""Order service layer (Use Cases).

The order lifecycle and inventory-consistency engine: cart-to-order
conversion, stock deduction and restoration, bulk-order branching and
the status state machine.  Every command runs in a single database
transaction; any failure leaves no order, no stock change and the cart
untouched.

Business rules enforced:
- Stock never goes negative: product rows are locked in primary-key
  order and every decrement is a conditional atomic update.
- Orders over ``BULK_ORDER_THRESHOLD`` units become "Quote Requested"
  bank-transfer orders and defer stock deduction until an admin confirms.
- Status transitions follow ``VALID_TRANSITIONS``.
- Stock is restored on cancellation only if it was deducted, and at
  most once (``stock_deducted`` under the order row lock).
- Owners may cancel only while "Pending" or "Quote Requested".
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import models, transaction
from django.utils import timezone

from modules.accounts.exceptions import AddressNotFound, NoAddressAvailable
from modules.orders.constants import (
    BULK_ORDER_MESSAGE,
    CUSTOMER_CANCELLABLE_STATES,
    ORDER_PLACED_MESSAGE,
    OrderStatus,
    PaymentMethod,
)
from modules.orders.events import (
    BulkQuoteRequested,
    OrderCancelled,
    OrderCreated,
    OrderStatusChanged,
)
from modules.orders.exceptions import (
    EmptyCart,
    InvalidOrderStatus,
    OrderAccessDenied,
    OrderNotFound,
    ProductGone,
)
from modules.orders.policies import classify
from modules.products.exceptions import InsufficientStock
from modules.products.stock import StockValidator
from shared.infrastructure.bus import event_bus as default_event_bus

if TYPE_CHECKING:
    from modules.accounts.models import Address
    from modules.accounts.repositories.interfaces import IAddressRepository
    from modules.cart.repositories.interfaces import ICartRepository
    from modules.core.principal import Principal
    from modules.orders.dtos import CreateOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository
    from shared.infrastructure.bus import InMemoryEventBus

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OrderPlacement:
    """Result of a checkout.

    ``created`` is ``False`` when an earlier order with the same
    idempotency key was returned instead of placing a new one.
    """

    order: Order
    message: str
    created: bool = True


def placement_message(order: Order) -> str:
    return BULK_ORDER_MESSAGE if order.is_bulk_order else ORDER_PLACED_MESSAGE


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection.  The caller's
    identity arrives as an explicit ``Principal`` on every operation.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        cart_repository: ICartRepository,
        product_repository: IProductRepository,
        address_repository: IAddressRepository,
        stock_validator: Optional[StockValidator] = None,
        event_bus: Optional[InMemoryEventBus] = None,
    ) -> None:
        self._order_repo = order_repository
        self._cart_repo = cart_repository
        self._product_repo = product_repository
        self._address_repo = address_repository
        self._stock = stock_validator or StockValidator(product_repository)
        self._bus = event_bus or default_event_bus

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, principal: Principal, dto: CreateOrderDTO) -> OrderPlacement:
        """Convert the caller's cart into an order.

        Steps:
        1. Lock the cart row (serialises checkouts of the same user).
        2. Replay: an order with the same idempotency key is returned.
        3. Resolve the shipping address (explicit or default).
        4. Lock every product in the cart, sorted by primary key, and
           re-validate stock against the total quantity per product.
        5. Snapshot the lines and classify bulk vs normal.
        6. Persist order, lines and the initial history record.
        7. Normal orders only: deduct stock.
        8. Delete the cart.

        Raises:
            AddressNotFound: ``address_id`` is not one of the caller's.
            NoAddressAvailable: no ``address_id`` and no default address.
            EmptyCart: no cart or no lines.
            ProductGone: a product in the cart was deleted.
            InsufficientStock: a product has fewer units than requested.
        """
        user_id = principal.user_id
        log = logger.bind(user_id=user_id)
        log.info("order.creation_started")

        cart = self._cart_repo.get_by_user(user_id, for_update=True)

        if dto.idempotency_key:
            existing = self._order_repo.get_by_idempotency_key(
                user_id, dto.idempotency_key
            )
            if existing:
                log.info("order.idempotency_hit", order_id=str(existing.id))
                return OrderPlacement(
                    order=existing,
                    message=placement_message(existing),
                    created=False,
                )

        address = self._resolve_address(user_id, dto.address_id)

        if cart is None or cart.is_empty:
            log.warning("order.empty_cart")
            raise EmptyCart("Your cart is empty.")
        lines = cart.lines

        # Stock re-validation under row locks
        requested: Dict[Any, int] = defaultdict(int)
        for line in lines:
            requested[line.product_id] += line.quantity

        locked = self._product_repo.lock_many(requested.keys())
        for product_id in sorted(requested, key=str):
            product = locked.get(product_id)
            if product is None:
                log.warning("order.product_gone", product_id=str(product_id))
                raise ProductGone("A product in your cart no longer exists.")
            self._stock.check_availability(product, requested[product_id])

        # Snapshot lines and classify
        items = [
            {
                "product_id": line.product_id,
                "name": locked[line.product_id].name,
                "size": line.size,
                "quantity": line.quantity,
                "price_at_purchase": line.price_at_addition,
            }
            for line in lines
        ]
        total_quantity = sum(requested.values())
        classification = classify(total_quantity)
        is_bulk = classification.is_bulk

        order = self._order_repo.create(
            {
                "user_id": user_id,
                "status": classification.status,
                "payment_method": (
                    PaymentMethod.BANK_TRANSFER.value if is_bulk else dto.payment_method
                ),
                "is_bulk_order": is_bulk,
                "bulk_order_note": dto.bulk_order_note if is_bulk else "",
                "shipping_address": address.snapshot(),
                "idempotency_key": dto.idempotency_key,
                "items": items,
            }
        )
        self._order_repo.add_history(
            order_id=order.id,
            new_status=classification.status,
            changed_by_id=user_id,
            notes="Order created",
        )

        if not is_bulk:
            for product_id in sorted(requested, key=str):
                self._stock.deduct(
                    product_id,
                    requested[product_id],
                    product_name=locked[product_id].name,
                )
            order.stock_deducted = True
            order.save(update_fields=["stock_deducted"])

        self._cart_repo.delete_for_user(user_id)

        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                user_id=user_id,
                total_price=order.total_price,
                is_bulk=is_bulk,
            )
        )
        if is_bulk:
            order.add_domain_event(
                BulkQuoteRequested(
                    aggregate_id=order.id,
                    user_id=user_id,
                    total_quantity=total_quantity,
                    note=order.bulk_order_note,
                )
            )
        self._bus.publish_on_commit(order.pull_domain_events())

        log.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            status=order.status,
            is_bulk=is_bulk,
            total_quantity=total_quantity,
            total_price=str(order.total_price),
        )
        placed = self._order_repo.get_by_id(order.id) or order
        return OrderPlacement(order=placed, message=placement_message(placed))

    @transaction.atomic
    def update_status(
        self,
        principal: Principal,
        order_id: Any,
        new_status: str,
        tracking_number: Optional[str] = None,
        notes: str = "",
    ) -> Order:
        """Admin transition of an order to ``new_status``.

        - Confirming a bulk order deducts its stock (all or nothing) and
          marks it paid.
        - Delivering marks the order paid, keeping an earlier ``paid_at``.
        - Cancelling restores stock if it had been deducted.

        Raises:
            OrderAccessDenied: caller is not an admin.
            OrderNotFound: order does not exist.
            InvalidOrderStatus: transition is not allowed.
            InsufficientStock: bulk confirmation without enough stock.
        """
        if not principal.is_admin:
            raise OrderAccessDenied("Only admins can update order status.")

        order = self._lock_order(order_id)
        log = logger.bind(
            order_id=str(order.id),
            current_status=order.status,
            new_status=new_status,
        )

        if not order.can_transition_to(new_status):
            log.warning("order.invalid_transition")
            raise InvalidOrderStatus(
                f'Cannot change order status from "{order.status}" to "{new_status}".'
            )

        old_status = order.status
        now = timezone.now()
        stock_restored = False

        if new_status == OrderStatus.CONFIRMED:
            if order.is_bulk_order and not order.stock_deducted:
                self._deduct_order_stock(order)
                order.stock_deducted = True
                order.is_paid = True
                order.paid_at = now
        elif new_status == OrderStatus.DELIVERED:
            order.is_paid = True
            order.paid_at = order.paid_at or now
        elif new_status == OrderStatus.CANCELLED:
            stock_restored = self._restore_order_stock(order)

        order.status = new_status
        if tracking_number:
            order.tracking_number = tracking_number
        self._order_repo.save(order)

        self._order_repo.add_history(
            order_id=order.id,
            new_status=new_status,
            old_status=old_status,
            changed_by_id=principal.user_id,
            notes=notes,
        )
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                old_status=old_status,
                new_status=new_status,
                changed_by=principal.user_id,
            )
        )
        if new_status == OrderStatus.CANCELLED:
            order.add_domain_event(
                OrderCancelled(
                    aggregate_id=order.id,
                    cancelled_by=principal.user_id,
                    stock_restored=stock_restored,
                )
            )
        self._bus.publish_on_commit(order.pull_domain_events())

        log.info("order.status_updated", stock_deducted=order.stock_deducted)
        return self._order_repo.get_by_id(order.id) or order

    @transaction.atomic
    def cancel_order(
        self, principal: Principal, order_id: Any, notes: str = ""
    ) -> Order:
        """Owner cancellation while the order is "Pending" or "Quote Requested".

        The order row is locked first so concurrent cancellations cannot
        restore stock twice.

        Raises:
            OrderNotFound: order does not exist.
            OrderAccessDenied: caller does not own the order (admins too).
            InvalidOrderStatus: the order is past the cancellable states.
        """
        order = self._lock_order(order_id)
        log = logger.bind(order_id=str(order.id), current_status=order.status)

        if not principal.owns(order.user_id):
            log.warning("order.cancel_denied", user_id=principal.user_id)
            raise OrderAccessDenied("Not authorized.")

        if order.status not in CUSTOMER_CANCELLABLE_STATES:
            log.warning("order.cancel_not_allowed")
            raise InvalidOrderStatus(
                f'Cannot cancel an order that is "{order.status}".'
            )

        stock_restored = self._restore_order_stock(order)

        old_status = order.status
        order.status = OrderStatus.CANCELLED
        self._order_repo.save(order)

        self._order_repo.add_history(
            order_id=order.id,
            new_status=OrderStatus.CANCELLED,
            old_status=old_status,
            changed_by_id=principal.user_id,
            notes=notes or "Cancelled by customer",
        )
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                old_status=old_status,
                new_status=OrderStatus.CANCELLED.value,
                changed_by=principal.user_id,
            )
        )
        order.add_domain_event(
            OrderCancelled(
                aggregate_id=order.id,
                cancelled_by=principal.user_id,
                stock_restored=stock_restored,
            )
        )
        self._bus.publish_on_commit(order.pull_domain_events())

        log.info("order.cancelled", stock_restored=stock_restored)
        return self._order_repo.get_by_id(order.id) or order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, principal: Principal, order_id: Any) -> Order:
        """Retrieve an order visible to the caller (owner or admin).

        Raises:
            OrderNotFound: order does not exist.
            OrderAccessDenied: caller is neither owner nor admin.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        if not (principal.is_admin or principal.owns(order.user_id)):
            raise OrderAccessDenied("Not authorized to view this order.")
        return order

    def list_my_orders(self, principal: Principal) -> List[Order]:
        return self._order_repo.list_for_user(principal.user_id)

    def list_orders(
        self, principal: Principal, filters: Optional[Dict[str, Any]] = None
    ) -> models.QuerySet:
        """All orders, newest first (admin only).

        Raises:
            OrderAccessDenied: caller is not an admin.
        """
        if not principal.is_admin:
            raise OrderAccessDenied("Only admins can list all orders.")
        return self._order_repo.list(filters)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock_order(self, order_id: Any) -> Order:
        order = self._order_repo.get_for_update(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def _resolve_address(self, user_id: Any, address_id: Optional[Any]) -> Address:
        if address_id is not None:
            address = self._address_repo.get_for_user(user_id, address_id)
            if not address:
                raise AddressNotFound("Address not found.")
            return address

        address = self._address_repo.get_default(user_id)
        if not address:
            raise NoAddressAvailable(
                "No shipping address provided or set as default."
            )
        return address

    @staticmethod
    def _quantities_by_product(order: Order) -> Dict[Any, int]:
        quantities: Dict[Any, int] = defaultdict(int)
        for item in order.items.all():
            if item.product_id is not None:
                quantities[item.product_id] += item.quantity
        return quantities

    def _deduct_order_stock(self, order: Order) -> None:
        """Deduct every line of ``order`` or raise before writing anything.

        Availability is checked for all products under row locks first, so
        an ``InsufficientStock`` leaves stock untouched even before the
        transaction rolls back.
        """
        items = list(order.items.all())
        for item in items:
            # Hard-deleted products leave lines without a product.
            if item.product_id is None:
                raise InsufficientStock(item.name, 0, item.quantity)

        names = {item.product_id: item.name for item in items}
        quantities = self._quantities_by_product(order)
        locked = self._product_repo.lock_many(quantities.keys())

        for product_id in sorted(quantities, key=str):
            product = locked.get(product_id)
            if product is None:
                # A deleted product has nothing left to sell.
                raise InsufficientStock(names[product_id], 0, quantities[product_id])
            self._stock.check_availability(product, quantities[product_id])

        for product_id in sorted(quantities, key=str):
            self._stock.deduct(
                product_id, quantities[product_id], product_name=names[product_id]
            )

    def _restore_order_stock(self, order: Order) -> bool:
        """Give the order's units back if they were taken. Returns whether it did."""
        if not order.stock_deducted:
            return False
        for product_id, quantity in sorted(
            self._quantities_by_product(order).items(), key=lambda kv: str(kv[0])
        ):
            self._stock.restore(product_id, quantity)
        order.stock_deducted = False
        return True
