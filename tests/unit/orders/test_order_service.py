"""Unit tests for OrderService with mocked repositories.

Covers:
- Checkout: snapshot of cart lines, stock deduction for normal orders,
  deferred deduction and forced bank transfer for bulk orders.
- Checkout failures: empty cart, address resolution, deleted products,
  stock aggregated across lines.
- Idempotent replay.
- Admin transitions: bulk confirmation, delivery payment, cancellation.
- Owner cancellation rules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional
from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest

from modules.accounts.exceptions import AddressNotFound, NoAddressAvailable
from modules.core.principal import Principal
from modules.orders.constants import (
    BULK_ORDER_MESSAGE,
    ORDER_PLACED_MESSAGE,
    VALID_TRANSITIONS,
    OrderStatus,
    PaymentMethod,
)
from modules.orders.dtos import CreateOrderDTO
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
from modules.orders.services import OrderService
from modules.products.exceptions import InsufficientStock
from shared.domain.events import DomainEventMixin

pytestmark = pytest.mark.unit

CUSTOMER = Principal(user_id=1)
STRANGER = Principal(user_id=2)
ADMIN = Principal(user_id=99, is_admin=True)


# ---------------------------------------------------------------------------
# Stubs
# ---------------------------------------------------------------------------


@dataclass
class StubProduct:
    name: str
    stock_quantity: int
    price: Decimal = Decimal("1000.00")
    id: UUID = field(default_factory=uuid4)


@dataclass
class StubLine:
    product_id: UUID
    quantity: int
    size: str = "M"
    price_at_addition: Decimal = Decimal("1000.00")


@dataclass
class StubCart:
    lines: list

    @property
    def is_empty(self) -> bool:
        return not self.lines


@dataclass
class StubOrderItem:
    product_id: Optional[UUID]
    name: str
    quantity: int


class StubItems:
    def __init__(self, items: list) -> None:
        self._items = items

    def all(self) -> list:
        return list(self._items)


@dataclass
class StubOrder(DomainEventMixin):
    user_id: Any
    status: str
    lines: list = field(default_factory=list)
    id: UUID = field(default_factory=uuid4)
    is_bulk_order: bool = False
    stock_deducted: bool = False
    is_paid: bool = False
    paid_at: Optional[datetime] = None
    tracking_number: str = ""
    bulk_order_note: str = ""
    total_price: Decimal = Decimal("0.00")
    order_number: str = "ORD-20260101-ABC123"

    @property
    def items(self) -> StubItems:
        return StubItems(self.lines)

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def save(self, *args, **kwargs) -> None:
        pass


@dataclass
class StubAddress:
    street: str = "12 MG Road"

    def snapshot(self) -> dict:
        return {"street": self.street, "city": "Bengaluru"}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def repos():
    order_repo = MagicMock()
    cart_repo = MagicMock()
    product_repo = MagicMock()
    address_repo = MagicMock()
    bus = MagicMock()

    order_repo.get_by_idempotency_key.return_value = None
    address_repo.get_default.return_value = StubAddress()
    product_repo.decrement_stock.return_value = True
    product_repo.increment_stock.return_value = True

    def _create(data):
        order = StubOrder(
            user_id=data["user_id"],
            status=data["status"],
            is_bulk_order=data["is_bulk_order"],
            bulk_order_note=data["bulk_order_note"],
        )
        order_repo.get_by_id.return_value = order
        return order

    order_repo.create.side_effect = _create

    return {
        "order": order_repo,
        "cart": cart_repo,
        "product": product_repo,
        "address": address_repo,
        "bus": bus,
    }


@pytest.fixture()
def service(repos):
    return OrderService(
        order_repository=repos["order"],
        cart_repository=repos["cart"],
        product_repository=repos["product"],
        address_repository=repos["address"],
        event_bus=repos["bus"],
    )


def _stock_cart(repos, *pairs):
    """Configure the cart and the locked products from ``(product, quantity)``."""
    repos["cart"].get_by_user.return_value = StubCart(
        lines=[
            StubLine(product_id=p.id, quantity=q, price_at_addition=p.price)
            for p, q in pairs
        ]
    )
    repos["product"].lock_many.return_value = {p.id: p for p, _ in pairs}


def _published(repos) -> list:
    events = []
    for call in repos["bus"].publish_on_commit.call_args_list:
        events.extend(call.args[0])
    return events


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


class TestCreateOrder:
    def test_normal_order_deducts_stock_and_deletes_cart(self, service, repos):
        shirt = StubProduct(name="Linen Shirt", stock_quantity=5)
        _stock_cart(repos, (shirt, 2))

        placement = service.create_order(CUSTOMER, CreateOrderDTO())

        data = repos["order"].create.call_args.args[0]
        assert data["status"] == OrderStatus.PENDING
        assert data["is_bulk_order"] is False
        assert data["payment_method"] == PaymentMethod.ONLINE
        assert data["shipping_address"] == StubAddress().snapshot()
        assert data["items"] == [
            {
                "product_id": shirt.id,
                "name": "Linen Shirt",
                "size": "M",
                "quantity": 2,
                "price_at_purchase": Decimal("1000.00"),
            }
        ]
        repos["product"].decrement_stock.assert_called_once_with(shirt.id, 2)
        repos["cart"].delete_for_user.assert_called_once_with(CUSTOMER.user_id)
        assert placement.created is True
        assert placement.message == ORDER_PLACED_MESSAGE
        assert placement.order.stock_deducted is True

    def test_bulk_order_forces_bank_transfer_and_defers_deduction(
        self, service, repos
    ):
        tee = StubProduct(name="Crew Tee", stock_quantity=100)
        _stock_cart(repos, (tee, 51))

        placement = service.create_order(
            CUSTOMER,
            CreateOrderDTO(payment_method="COD", bulk_order_note="Team kit"),
        )

        data = repos["order"].create.call_args.args[0]
        assert data["status"] == OrderStatus.QUOTE_REQUESTED
        assert data["payment_method"] == PaymentMethod.BANK_TRANSFER
        assert data["bulk_order_note"] == "Team kit"
        repos["product"].decrement_stock.assert_not_called()
        repos["cart"].delete_for_user.assert_called_once_with(CUSTOMER.user_id)
        assert placement.message == BULK_ORDER_MESSAGE
        assert placement.order.stock_deducted is False

    def test_bulk_note_is_dropped_for_normal_orders(self, service, repos):
        tee = StubProduct(name="Crew Tee", stock_quantity=100)
        _stock_cart(repos, (tee, 50))

        service.create_order(CUSTOMER, CreateOrderDTO(bulk_order_note="ignored"))

        data = repos["order"].create.call_args.args[0]
        assert data["status"] == OrderStatus.PENDING
        assert data["bulk_order_note"] == ""

    def test_events_are_published_on_commit(self, service, repos):
        tee = StubProduct(name="Crew Tee", stock_quantity=100)
        _stock_cart(repos, (tee, 60))

        service.create_order(CUSTOMER, CreateOrderDTO())

        events = _published(repos)
        assert [type(e) for e in events] == [OrderCreated, BulkQuoteRequested]
        assert events[1].total_quantity == 60

    def test_empty_cart_is_rejected(self, service, repos):
        repos["cart"].get_by_user.return_value = None

        with pytest.raises(EmptyCart, match="Your cart is empty."):
            service.create_order(CUSTOMER, CreateOrderDTO())
        repos["order"].create.assert_not_called()

    def test_cart_without_lines_is_rejected(self, service, repos):
        repos["cart"].get_by_user.return_value = StubCart(lines=[])

        with pytest.raises(EmptyCart):
            service.create_order(CUSTOMER, CreateOrderDTO())

    def test_no_default_address(self, service, repos):
        _stock_cart(repos, (StubProduct(name="Tee", stock_quantity=5), 1))
        repos["address"].get_default.return_value = None

        with pytest.raises(
            NoAddressAvailable,
            match="No shipping address provided or set as default.",
        ):
            service.create_order(CUSTOMER, CreateOrderDTO())

    def test_explicit_address_must_belong_to_caller(self, service, repos):
        _stock_cart(repos, (StubProduct(name="Tee", stock_quantity=5), 1))
        repos["address"].get_for_user.return_value = None
        address_id = uuid4()

        with pytest.raises(AddressNotFound):
            service.create_order(CUSTOMER, CreateOrderDTO(address_id=address_id))
        repos["address"].get_for_user.assert_called_once_with(
            CUSTOMER.user_id, address_id
        )

    def test_deleted_product_aborts_checkout(self, service, repos):
        gone = StubProduct(name="Gone", stock_quantity=5)
        _stock_cart(repos, (gone, 1))
        repos["product"].lock_many.return_value = {}

        with pytest.raises(ProductGone, match="no longer exists"):
            service.create_order(CUSTOMER, CreateOrderDTO())
        repos["order"].create.assert_not_called()
        repos["cart"].delete_for_user.assert_not_called()

    def test_stock_is_checked_against_total_across_sizes(self, service, repos):
        shirt = StubProduct(name="Linen Shirt", stock_quantity=5)
        repos["cart"].get_by_user.return_value = StubCart(
            lines=[
                StubLine(product_id=shirt.id, quantity=3, size="S"),
                StubLine(product_id=shirt.id, quantity=3, size="M"),
            ]
        )
        repos["product"].lock_many.return_value = {shirt.id: shirt}

        with pytest.raises(InsufficientStock) as exc_info:
            service.create_order(CUSTOMER, CreateOrderDTO())

        assert exc_info.value.available == 5
        assert exc_info.value.requested == 6
        repos["order"].create.assert_not_called()

    def test_idempotent_replay_returns_existing_order(self, service, repos):
        existing = StubOrder(user_id=CUSTOMER.user_id, status=OrderStatus.PENDING)
        repos["order"].get_by_idempotency_key.return_value = existing

        placement = service.create_order(
            CUSTOMER, CreateOrderDTO(idempotency_key="key-1")
        )

        assert placement.order is existing
        assert placement.created is False
        repos["order"].create.assert_not_called()
        repos["cart"].delete_for_user.assert_not_called()


# ---------------------------------------------------------------------------
# Admin status updates
# ---------------------------------------------------------------------------


class TestUpdateStatus:
    def _lock(self, repos, order):
        repos["order"].get_for_update.return_value = order
        repos["order"].get_by_id.return_value = order

    def test_customer_cannot_update_status(self, service, repos):
        with pytest.raises(OrderAccessDenied):
            service.update_status(CUSTOMER, uuid4(), OrderStatus.CONFIRMED)
        repos["order"].get_for_update.assert_not_called()

    def test_missing_order(self, service, repos):
        repos["order"].get_for_update.return_value = None

        with pytest.raises(OrderNotFound):
            service.update_status(ADMIN, uuid4(), OrderStatus.CONFIRMED)

    def test_illegal_transition(self, service, repos):
        order = StubOrder(user_id=1, status=OrderStatus.PENDING)
        self._lock(repos, order)

        with pytest.raises(InvalidOrderStatus):
            service.update_status(ADMIN, order.id, OrderStatus.SHIPPED)
        repos["order"].save.assert_not_called()

    def test_confirming_bulk_order_deducts_stock_and_marks_paid(
        self, service, repos
    ):
        tee = StubProduct(name="Crew Tee", stock_quantity=100)
        order = StubOrder(
            user_id=1,
            status=OrderStatus.QUOTE_REQUESTED,
            is_bulk_order=True,
            lines=[StubOrderItem(product_id=tee.id, name="Crew Tee", quantity=51)],
        )
        self._lock(repos, order)
        repos["product"].lock_many.return_value = {tee.id: tee}

        service.update_status(ADMIN, order.id, OrderStatus.CONFIRMED)

        repos["product"].decrement_stock.assert_called_once_with(tee.id, 51)
        assert order.status == OrderStatus.CONFIRMED
        assert order.stock_deducted is True
        assert order.is_paid is True
        assert order.paid_at is not None
        repos["order"].add_history.assert_called_once()

    def test_bulk_confirmation_without_stock_changes_nothing(self, service, repos):
        tee = StubProduct(name="Crew Tee", stock_quantity=40)
        order = StubOrder(
            user_id=1,
            status=OrderStatus.QUOTE_REQUESTED,
            is_bulk_order=True,
            lines=[StubOrderItem(product_id=tee.id, name="Crew Tee", quantity=51)],
        )
        self._lock(repos, order)
        repos["product"].lock_many.return_value = {tee.id: tee}

        with pytest.raises(InsufficientStock) as exc_info:
            service.update_status(ADMIN, order.id, OrderStatus.CONFIRMED)

        assert exc_info.value.available == 40
        assert order.status == OrderStatus.QUOTE_REQUESTED
        repos["product"].decrement_stock.assert_not_called()
        repos["order"].save.assert_not_called()

    def test_bulk_confirmation_with_deleted_product(self, service, repos):
        order = StubOrder(
            user_id=1,
            status=OrderStatus.QUOTE_REQUESTED,
            is_bulk_order=True,
            lines=[StubOrderItem(product_id=uuid4(), name="Old Tee", quantity=60)],
        )
        self._lock(repos, order)
        repos["product"].lock_many.return_value = {}

        with pytest.raises(InsufficientStock) as exc_info:
            service.update_status(ADMIN, order.id, OrderStatus.CONFIRMED)
        assert exc_info.value.available == 0
        assert exc_info.value.product_name == "Old Tee"

    def test_bulk_confirmation_with_line_without_product(self, service, repos):
        tee = StubProduct(name="Crew Tee", stock_quantity=100)
        order = StubOrder(
            user_id=1,
            status=OrderStatus.QUOTE_REQUESTED,
            is_bulk_order=True,
            lines=[
                StubOrderItem(product_id=tee.id, name="Crew Tee", quantity=10),
                StubOrderItem(product_id=None, name="Purged Jacket", quantity=50),
            ],
        )
        self._lock(repos, order)
        repos["product"].lock_many.return_value = {tee.id: tee}

        with pytest.raises(InsufficientStock) as exc_info:
            service.update_status(ADMIN, order.id, OrderStatus.CONFIRMED)

        assert exc_info.value.product_name == "Purged Jacket"
        assert exc_info.value.available == 0
        assert exc_info.value.requested == 50
        assert order.is_paid is False
        repos["product"].decrement_stock.assert_not_called()
        repos["order"].save.assert_not_called()

    def test_confirming_normal_order_does_not_deduct_again(self, service, repos):
        order = StubOrder(
            user_id=1,
            status=OrderStatus.PENDING,
            stock_deducted=True,
            lines=[StubOrderItem(product_id=uuid4(), name="Tee", quantity=2)],
        )
        self._lock(repos, order)

        service.update_status(ADMIN, order.id, OrderStatus.CONFIRMED)

        repos["product"].decrement_stock.assert_not_called()
        assert order.is_paid is False

    def test_delivery_keeps_an_earlier_payment_date(self, service, repos):
        paid_at = datetime(2026, 1, 5, tzinfo=timezone.utc)
        order = StubOrder(
            user_id=1, status=OrderStatus.SHIPPED, is_paid=True, paid_at=paid_at
        )
        self._lock(repos, order)

        service.update_status(ADMIN, order.id, OrderStatus.DELIVERED)

        assert order.is_paid is True
        assert order.paid_at == paid_at

    def test_delivery_marks_unpaid_order_paid(self, service, repos):
        order = StubOrder(user_id=1, status=OrderStatus.SHIPPED)
        self._lock(repos, order)

        service.update_status(
            ADMIN, order.id, OrderStatus.DELIVERED, tracking_number="TRK-1"
        )

        assert order.is_paid is True
        assert order.paid_at is not None
        assert order.tracking_number == "TRK-1"

    def test_admin_cancellation_restores_deducted_stock(self, service, repos):
        product_id = uuid4()
        order = StubOrder(
            user_id=1,
            status=OrderStatus.CONFIRMED,
            stock_deducted=True,
            lines=[StubOrderItem(product_id=product_id, name="Tee", quantity=3)],
        )
        self._lock(repos, order)

        service.update_status(ADMIN, order.id, OrderStatus.CANCELLED)

        repos["product"].increment_stock.assert_called_once_with(product_id, 3)
        assert order.stock_deducted is False
        events = _published(repos)
        assert [type(e) for e in events] == [OrderStatusChanged, OrderCancelled]
        assert events[1].stock_restored is True


# ---------------------------------------------------------------------------
# Owner cancellation
# ---------------------------------------------------------------------------


class TestCancelOrder:
    def test_owner_cancels_pending_order_and_stock_returns(self, service, repos):
        product_id = uuid4()
        order = StubOrder(
            user_id=CUSTOMER.user_id,
            status=OrderStatus.PENDING,
            stock_deducted=True,
            lines=[
                StubOrderItem(product_id=product_id, name="Tee", quantity=1),
                StubOrderItem(product_id=product_id, name="Tee", quantity=2),
            ],
        )
        repos["order"].get_for_update.return_value = order
        repos["order"].get_by_id.return_value = order

        service.cancel_order(CUSTOMER, order.id)

        repos["product"].increment_stock.assert_called_once_with(product_id, 3)
        assert order.status == OrderStatus.CANCELLED
        assert order.stock_deducted is False

    def test_bulk_quote_cancellation_restores_nothing(self, service, repos):
        order = StubOrder(
            user_id=CUSTOMER.user_id,
            status=OrderStatus.QUOTE_REQUESTED,
            is_bulk_order=True,
            lines=[StubOrderItem(product_id=uuid4(), name="Tee", quantity=60)],
        )
        repos["order"].get_for_update.return_value = order
        repos["order"].get_by_id.return_value = order

        service.cancel_order(CUSTOMER, order.id)

        repos["product"].increment_stock.assert_not_called()
        assert order.status == OrderStatus.CANCELLED

    def test_only_the_owner_may_cancel(self, service, repos):
        order = StubOrder(user_id=CUSTOMER.user_id, status=OrderStatus.PENDING)
        repos["order"].get_for_update.return_value = order

        with pytest.raises(OrderAccessDenied, match="Not authorized."):
            service.cancel_order(STRANGER, order.id)

    def test_admin_is_not_the_owner(self, service, repos):
        order = StubOrder(user_id=CUSTOMER.user_id, status=OrderStatus.PENDING)
        repos["order"].get_for_update.return_value = order

        with pytest.raises(OrderAccessDenied):
            service.cancel_order(ADMIN, order.id)

    @pytest.mark.parametrize(
        "status",
        [
            OrderStatus.CONFIRMED,
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
            OrderStatus.CANCELLED,
        ],
    )
    def test_cannot_cancel_after_confirmation(self, service, repos, status):
        order = StubOrder(user_id=CUSTOMER.user_id, status=status.value)
        repos["order"].get_for_update.return_value = order

        with pytest.raises(InvalidOrderStatus) as exc_info:
            service.cancel_order(CUSTOMER, order.id)

        assert str(exc_info.value) == f'Cannot cancel an order that is "{status.value}".'
        repos["product"].increment_stock.assert_not_called()


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class TestQueries:
    def test_owner_and_admin_can_read(self, service, repos):
        order = StubOrder(user_id=CUSTOMER.user_id, status=OrderStatus.PENDING)
        repos["order"].get_by_id.return_value = order

        assert service.get_order(CUSTOMER, order.id) is order
        assert service.get_order(ADMIN, order.id) is order

    def test_stranger_cannot_read(self, service, repos):
        order = StubOrder(user_id=CUSTOMER.user_id, status=OrderStatus.PENDING)
        repos["order"].get_by_id.return_value = order

        with pytest.raises(OrderAccessDenied):
            service.get_order(STRANGER, order.id)

    def test_missing_order(self, service, repos):
        repos["order"].get_by_id.return_value = None

        with pytest.raises(OrderNotFound):
            service.get_order(CUSTOMER, uuid4())

    def test_listing_all_orders_requires_admin(self, service, repos):
        with pytest.raises(OrderAccessDenied):
            service.list_orders(CUSTOMER)

        service.list_orders(ADMIN, {"status": OrderStatus.PENDING})
        repos["order"].list.assert_called_once_with({"status": OrderStatus.PENDING})
