"""Cart DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.cart.models import Cart, CartItem
from modules.products.serializers import ProductSummarySerializer

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class AddCartItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    size = serializers.CharField(max_length=10)


class UpdateCartItemSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


# ---------------------------------------------------------------------------
# Output Serializers
# ---------------------------------------------------------------------------


class CartItemSerializer(serializers.ModelSerializer):
    product = ProductSummarySerializer(read_only=True)
    line_total = serializers.DecimalField(
        max_digits=12, decimal_places=2, read_only=True
    )

    class Meta:
        model = CartItem
        fields = [
            "id",
            "product",
            "size",
            "quantity",
            "price_at_addition",
            "line_total",
        ]
        read_only_fields = fields


class CartSerializer(serializers.ModelSerializer):
    items = CartItemSerializer(many=True, read_only=True)
    total_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, read_only=True
    )
    total_items = serializers.IntegerField(read_only=True)

    class Meta:
        model = Cart
        fields = ["id", "items", "total_price", "total_items", "updated_at"]
        read_only_fields = fields
