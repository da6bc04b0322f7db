from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.accounts.models import Address
from modules.cart.models import Cart, CartItem
from modules.products.models import Product, ProductCategory

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def _create_user(email: str, **extra):
    return User.objects.create_user(
        username=email,
        email=email,
        password="secret123",
        first_name=email.split("@")[0].title(),
        **extra,
    )


@pytest.fixture()
def customer():
    return _create_user("alice@example.com")


@pytest.fixture()
def other_customer():
    return _create_user("bob@example.com")


@pytest.fixture()
def admin_user():
    return _create_user("admin@example.com", is_staff=True)


@pytest.fixture()
def auth_client(customer):
    """APIClient force-authenticated as ``customer``."""
    client = APIClient()
    client.force_authenticate(user=customer)
    return client


@pytest.fixture()
def other_client(other_customer):
    client = APIClient()
    client.force_authenticate(user=other_customer)
    return client


@pytest.fixture()
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


# ---------------------------------------------------------------------------
# Catalog, address book and cart factories
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_product():
    def _make(
        name: str = "Linen Oversized Shirt",
        price: str = "1000.00",
        stock: int = 5,
        sizes=None,
        category: str = ProductCategory.MEN,
        **extra,
    ) -> Product:
        return Product.objects.create(
            name=name,
            description=f"{name} description",
            price=Decimal(price),
            category=category,
            sizes=sizes or ["S", "M", "L"],
            stock_quantity=stock,
            **extra,
        )

    return _make


@pytest.fixture()
def make_address():
    def _make(user, is_default: bool = True, label: str = "Home") -> Address:
        return Address.objects.create(
            user=user,
            label=label,
            street="12 MG Road",
            city="Bengaluru",
            state="Karnataka",
            postal_code="560001",
            is_default=is_default,
        )

    return _make


@pytest.fixture()
def fill_cart():
    """Put ``(product, quantity[, size])`` lines straight into a user's cart."""

    def _fill(user, *lines) -> Cart:
        cart, _ = Cart.objects.get_or_create(user=user)
        for line in lines:
            product, quantity, *rest = line
            CartItem.objects.create(
                cart=cart,
                product=product,
                size=rest[0] if rest else "M",
                quantity=quantity,
                price_at_addition=product.price,
            )
        return cart

    return _fill
