from decimal import Decimal

import django.core.validators
import uuid6
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid6.uuid7, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("deleted_at", models.DateTimeField(blank=True, db_index=True, default=None, null=True)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField()),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("Men", "Men"),
                            ("Women", "Women"),
                            ("Kids", "Kids"),
                            ("Accessories", "Accessories"),
                            ("Footwear", "Footwear"),
                        ],
                        max_length=20,
                    ),
                ),
                ("sub_category", models.CharField(blank=True, default="", max_length=100)),
                ("sizes", models.JSONField(default=list)),
                ("stock_quantity", models.PositiveIntegerField(default=0)),
                ("images", models.JSONField(blank=True, default=list)),
                ("is_featured", models.BooleanField(default=False)),
                (
                    "discount",
                    models.PositiveSmallIntegerField(
                        default=0,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
            ],
            options={
                "db_table": "products",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["category"], name="products_category_idx"),
                    models.Index(fields=["price"], name="products_price_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(check=models.Q(price__gte=0), name="products_price_non_negative"),
                    models.CheckConstraint(check=models.Q(stock_quantity__gte=0), name="products_stock_non_negative"),
                    models.CheckConstraint(
                        check=models.Q(discount__gte=0) & models.Q(discount__lte=100),
                        name="products_discount_percentage",
                    ),
                ],
            },
        ),
    ]
