"""Stock concurrency integration test.

Proves that the row locks taken by ``OrderService.create_order`` and the
conditional decrement serialize concurrent checkouts.

Scenario:
- "Linen Oversized Shirt" with **stock = 5**.
- 10 customers, each with one unit in their cart, check out at once.
- Exactly 5 succeed, 5 raise ``InsufficientStock``.
- Final stock is 0 (never negative).

Uses ``TransactionTestCase`` so each thread sees committed data.  Runs on
every backend: PostgreSQL and MySQL through row locks, SQLite through
IMMEDIATE transactions on the file-backed test database.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from decimal import Decimal

import django
from django.contrib.auth import get_user_model
from django.test import TransactionTestCase

from modules.accounts.models import Address
from modules.accounts.repositories.django_repository import AddressDjangoRepository
from modules.cart.models import Cart, CartItem
from modules.cart.repositories.django_repository import CartDjangoRepository
from modules.core.principal import Principal
from modules.orders.dtos import CreateOrderDTO
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.exceptions import InsufficientStock
from modules.products.models import Product, ProductCategory
from modules.products.repositories.django_repository import ProductDjangoRepository

logger = logging.getLogger(__name__)

INITIAL_STOCK = 5
NUM_WORKERS = 10


class TestStockConcurrency(TransactionTestCase):
    """Prove atomic stock deduction under concurrent checkouts."""

    def setUp(self):
        self.product = Product.objects.create(
            name="Linen Oversized Shirt",
            description="Breathable linen shirt",
            price=Decimal("2499.00"),
            category=ProductCategory.MEN,
            sizes=["S", "M", "L"],
            stock_quantity=INITIAL_STOCK,
        )
        User = get_user_model()
        self.user_ids = []
        for i in range(NUM_WORKERS):
            email = f"buyer{i}@example.com"
            user = User.objects.create_user(email, email=email, password="secret123")
            Address.objects.create(
                user=user,
                street="12 MG Road",
                city="Bengaluru",
                state="Karnataka",
                postal_code="560001",
                is_default=True,
            )
            cart = Cart.objects.create(user=user)
            CartItem.objects.create(
                cart=cart,
                product=self.product,
                size="M",
                quantity=1,
                price_at_addition=self.product.price,
            )
            self.user_ids.append(user.pk)

    def _checkout_in_thread(self, user_id: int) -> str:
        """Attempt a checkout. Returns 'success' or 'insufficient'."""
        service = OrderService(
            order_repository=OrderDjangoRepository(),
            cart_repository=CartDjangoRepository(),
            product_repository=ProductDjangoRepository(),
            address_repository=AddressDjangoRepository(),
        )
        try:
            service.create_order(Principal(user_id=user_id), CreateOrderDTO())
            logger.warning("User %s: order created", user_id)
            return "success"
        except InsufficientStock:
            logger.warning("User %s: InsufficientStock (expected)", user_id)
            return "insufficient"
        finally:
            django.db.connections.close_all()

    def _run_all(self, user_ids: list[int] | None = None) -> list[str]:
        results = []
        with ThreadPoolExecutor(max_workers=NUM_WORKERS) as pool:
            futures = [
                pool.submit(self._checkout_in_thread, user_id)
                for user_id in (user_ids or self.user_ids)
            ]
            for future in as_completed(futures):
                results.append(future.result())
        return results

    def test_concurrent_checkouts_exhaust_stock(self):
        results = self._run_all()

        self.assertEqual(results.count("success"), INITIAL_STOCK)
        self.assertEqual(results.count("insufficient"), NUM_WORKERS - INITIAL_STOCK)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 0)

    def test_units_are_conserved(self):
        results = self._run_all()

        self.product.refresh_from_db()
        self.assertGreaterEqual(self.product.stock_quantity, 0)
        # initial = sold + remaining
        self.assertEqual(
            INITIAL_STOCK, results.count("success") + self.product.stock_quantity
        )

    def test_last_unit_goes_to_exactly_one_buyer(self):
        Product.objects.filter(id=self.product.id).update(stock_quantity=1)

        results = self._run_all(self.user_ids[:2])

        self.assertEqual(sorted(results), ["insufficient", "success"])
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 0)
