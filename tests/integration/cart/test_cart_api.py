"""Integration tests for the per-user cart endpoints."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.cart.models import Cart, CartItem

pytestmark = pytest.mark.integration

URL = "/api/v1/cart/"


@pytest.fixture()
def shirt(make_product):
    return make_product(price="2499.00", stock=5)


def _add(client, product, quantity=1, size="M"):
    return client.post(
        URL,
        {"product_id": str(product.id), "quantity": quantity, "size": size},
        format="json",
    )


class TestReadCart:
    def test_no_cart_yet(self, auth_client):
        response = auth_client.get(URL)

        assert response.status_code == 200
        assert response.data["cart"]["items"] == []
        assert response.data["cart"]["total_items"] == 0
        assert response.data["cart"]["total_price"] == "0.00"

    def test_emptied_cart_keeps_decimal_totals(self, auth_client, customer, shirt):
        _add(auth_client, shirt)
        line_id = CartItem.objects.get(cart__user=customer).id

        response = auth_client.delete(f"{URL}{line_id}/")

        assert response.data["cart"]["total_price"] == "0.00"

    def test_anonymous_is_rejected(self, api_client):
        assert api_client.get(URL).status_code == 401


class TestAddItem:
    def test_add_creates_cart_with_price_snapshot(self, auth_client, customer, shirt):
        response = _add(auth_client, shirt, quantity=2)

        assert response.status_code == 200
        assert response.data["message"] == "Item added to cart."
        cart = response.data["cart"]
        [line] = cart["items"]
        assert line["product"]["name"] == "Linen Oversized Shirt"
        assert line["size"] == "M"
        assert line["quantity"] == 2
        assert Decimal(line["price_at_addition"]) == Decimal("2499.00")
        assert Decimal(cart["total_price"]) == Decimal("4998.00")
        assert cart["total_items"] == 2

    def test_same_product_and_size_merges_lines(self, auth_client, customer, shirt):
        _add(auth_client, shirt, quantity=1)
        _add(auth_client, shirt, quantity=2)

        assert CartItem.objects.filter(cart__user=customer).count() == 1
        assert CartItem.objects.get(cart__user=customer).quantity == 3

    def test_different_size_is_a_separate_line(self, auth_client, customer, shirt):
        _add(auth_client, shirt, size="M")
        _add(auth_client, shirt, size="L")

        assert CartItem.objects.filter(cart__user=customer).count() == 2

    def test_price_snapshot_survives_catalog_changes(
        self, auth_client, customer, shirt
    ):
        _add(auth_client, shirt)
        shirt.price = Decimal("1999.00")
        shirt.save()

        _add(auth_client, shirt)

        line = CartItem.objects.get(cart__user=customer)
        assert line.price_at_addition == Decimal("2499.00")

    def test_size_not_offered(self, auth_client, shirt):
        response = _add(auth_client, shirt, size="XXL")

        assert response.status_code == 400
        assert "XXL" in response.data["detail"]

    def test_insufficient_stock_names_the_quantities(self, auth_client, shirt):
        response = _add(auth_client, shirt, quantity=6)

        assert response.status_code == 400
        assert response.data["product"] == "Linen Oversized Shirt"
        assert response.data["available"] == 5
        assert response.data["requested"] == 6

    def test_merged_quantity_is_checked_against_stock(self, auth_client, shirt):
        assert _add(auth_client, shirt, quantity=4).status_code == 200

        response = _add(auth_client, shirt, quantity=2)

        assert response.status_code == 400
        assert response.data["requested"] == 6

    def test_unknown_or_deleted_product(self, auth_client, shirt):
        shirt.delete()

        assert _add(auth_client, shirt).status_code == 404
        response = auth_client.post(
            URL, {"product_id": str(uuid4()), "size": "M"}, format="json"
        )
        assert response.status_code == 404

    def test_quantity_must_be_positive(self, auth_client, shirt):
        assert _add(auth_client, shirt, quantity=0).status_code == 400


class TestUpdateAndRemove:
    @pytest.fixture()
    def line(self, customer, shirt, fill_cart):
        cart = fill_cart(customer, (shirt, 1))
        return cart.items.get()

    def test_update_quantity(self, auth_client, line):
        response = auth_client.put(f"{URL}{line.id}/", {"quantity": 3}, format="json")

        assert response.status_code == 200
        assert response.data["cart"]["items"][0]["quantity"] == 3

    def test_update_beyond_stock(self, auth_client, line):
        response = auth_client.put(f"{URL}{line.id}/", {"quantity": 9}, format="json")

        assert response.status_code == 400
        assert response.data["available"] == 5
        line.refresh_from_db()
        assert line.quantity == 1

    def test_zero_quantity_removes_the_line(self, auth_client, line):
        response = auth_client.put(f"{URL}{line.id}/", {"quantity": 0}, format="json")

        assert response.status_code == 200
        assert response.data["cart"]["items"] == []

    def test_remove(self, auth_client, line):
        response = auth_client.delete(f"{URL}{line.id}/")

        assert response.status_code == 200
        assert response.data["message"] == "Item removed from cart."
        assert not CartItem.objects.filter(id=line.id).exists()

    def test_unknown_line(self, auth_client, line):
        assert auth_client.delete(f"{URL}{uuid4()}/").status_code == 404

    def test_no_cart(self, auth_client):
        response = auth_client.put(f"{URL}{uuid4()}/", {"quantity": 1}, format="json")
        assert response.status_code == 404

    def test_cannot_touch_another_users_line(self, other_client, line):
        assert other_client.delete(f"{URL}{line.id}/").status_code == 404
        assert CartItem.objects.filter(id=line.id).exists()


class TestClearCart:
    def test_clear(self, auth_client, customer, shirt, fill_cart):
        fill_cart(customer, (shirt, 2))

        response = auth_client.delete(URL)

        assert response.status_code == 200
        assert response.data == {"message": "Cart cleared."}
        assert not Cart.objects.filter(user=customer).exists()

    def test_clear_without_cart_is_fine(self, auth_client):
        assert auth_client.delete(URL).status_code == 200
