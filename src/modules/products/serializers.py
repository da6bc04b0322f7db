"""Product DRF serializers for API output.

Input validation for writes lives in the Pydantic DTOs (``dtos.py``);
these serializers only render catalog entries.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class ProductImageSerializer(serializers.Serializer):
    url = serializers.CharField()
    alt_text = serializers.CharField(allow_blank=True, required=False)


class ProductSerializer(serializers.ModelSerializer):
    """Read serializer for the Product resource."""

    images = ProductImageSerializer(many=True, read_only=True)
    discounted_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, read_only=True
    )

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "discounted_price",
            "discount",
            "category",
            "sub_category",
            "sizes",
            "stock_quantity",
            "images",
            "is_featured",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProductSummarySerializer(serializers.ModelSerializer):
    """Compact product view embedded in cart lines."""

    class Meta:
        model = Product
        fields = ["id", "name", "images", "price", "stock_quantity", "sizes"]
        read_only_fields = fields
