from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from modules.accounts.models import Address
from modules.products.models import Product, ProductCategory

_IMG = "https://images.unsplash.com/{}?w=600&q=80"

# (name, category, sub_category, price, sizes, stock, discount, featured, image)
CATALOG = [
    ("Linen Oversized Shirt", ProductCategory.MEN, "Shirts", "2499",
     ["S", "M", "L", "XL", "XXL"], 80, 0, True, "photo-1596755094514-f87e34085b2c"),
    ("Slim Fit Chino Trousers", ProductCategory.MEN, "Trousers", "3299",
     ["S", "M", "L", "XL"], 60, 10, False, "photo-1473966968600-fa801b869a1a"),
    ("Raw Hem Denim Jacket", ProductCategory.MEN, "Jackets", "4999",
     ["S", "M", "L", "XL", "XXL"], 45, 15, True, "photo-1551537482-f2075a1d41f2"),
    ("Essential Crew Neck Tee", ProductCategory.MEN, "T-Shirts", "999",
     ["XS", "S", "M", "L", "XL", "XXL"], 200, 0, True, "photo-1521572163474-6864f9cf17ab"),
    ("Textured Knit Polo", ProductCategory.MEN, "Polo", "1899",
     ["S", "M", "L", "XL"], 70, 0, False, "photo-1586363104862-3a5e2ab60d99"),
    ("Cargo Utility Pants", ProductCategory.MEN, "Trousers", "3799",
     ["S", "M", "L", "XL", "XXL"], 55, 20, False, "photo-1624378439575-d8705ad7ae80"),
    ("Flowy Maxi Dress", ProductCategory.WOMEN, "Dresses", "3999",
     ["XS", "S", "M", "L", "XL"], 50, 0, True, "photo-1515372039744-b8f02a3ae446"),
    ("Structured Blazer", ProductCategory.WOMEN, "Blazers", "5499",
     ["XS", "S", "M", "L"], 35, 0, True, "photo-1487222477894-8943e31ef7b2"),
    ("High-Rise Wide Leg Jeans", ProductCategory.WOMEN, "Jeans", "4299",
     ["XS", "S", "M", "L", "XL"], 65, 10, False, "photo-1541099649105-f69ad21f3246"),
    ("Ribbed Knit Co-ord Set", ProductCategory.WOMEN, "Co-ords", "3199",
     ["XS", "S", "M", "L"], 40, 0, True, "photo-1509631179647-0177331693ae"),
    ("Cotton Poplin Kurta", ProductCategory.WOMEN, "Ethnic", "1799",
     ["XS", "S", "M", "L", "XL"], 90, 0, False, "photo-1583391733956-6c78276477e2"),
    ("Satin Slip Midi Skirt", ProductCategory.WOMEN, "Skirts", "2799",
     ["XS", "S", "M", "L"], 45, 15, False, "photo-1594938291221-94f18cbb5660"),
    ("Striped Cotton Playsuit", ProductCategory.KIDS, "Playsuits", "1299",
     ["XS", "S", "M", "L"], 100, 0, True, "photo-1622290291468-a28f7a7dc6a8"),
    ("Fleece Hoodie", ProductCategory.KIDS, "Sweatshirts", "1599",
     ["XS", "S", "M", "L"], 120, 0, False, "photo-1471286174890-9c112ffca5b4"),
    ("Organic Denim Shorts", ProductCategory.KIDS, "Shorts", "999",
     ["XS", "S", "M", "L"], 85, 10, False, "photo-1519238263530-99bdd11df2ea"),
    ("Dinosaur Print Pyjama Set", ProductCategory.KIDS, "Nightwear", "1199",
     ["XS", "S", "M", "L"], 75, 0, True, "photo-1596462502278-27bfdc403348"),
    ("Woven Leather Belt", ProductCategory.ACCESSORIES, "Belts", "1499",
     ["Free Size"], 60, 0, False, "photo-1553062407-98eeb64c6a62"),
    ("Merino Wool Beanie", ProductCategory.ACCESSORIES, "Hats", "899",
     ["Free Size"], 110, 0, False, "photo-1576871337622-98d48d1cf531"),
    ("Canvas Tote Bag", ProductCategory.ACCESSORIES, "Bags", "1199",
     ["Free Size"], 90, 20, True, "photo-1544816155-12df9643f363"),
    ("Cashmere Blend Scarf", ProductCategory.ACCESSORIES, "Scarves", "2199",
     ["Free Size"], 40, 0, False, "photo-1601924994987-69e26d50dc26"),
    ("Suede Chelsea Boots", ProductCategory.FOOTWEAR, "Boots", "6999",
     ["S", "M", "L", "XL"], 30, 0, True, "photo-1542291026-7eec264c27ff"),
    ("Slip-On Canvas Sneakers", ProductCategory.FOOTWEAR, "Sneakers", "2499",
     ["XS", "S", "M", "L", "XL"], 80, 0, False, "photo-1525966222134-fcfa99b8ae77"),
]


class Command(BaseCommand):
    help = "Seed database with the demo storefront: users, an address and the catalog."

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset-catalog",
            action="store_true",
            help="Hard-delete every product before seeding.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding development data...")

        if options["reset_catalog"]:
            deleted, _ = Product.objects.all().hard_delete()
            self.stdout.write(self.style.WARNING(f"Cleared {deleted} products."))

        users_created = self._seed_users()
        products = self._seed_products()

        self.stdout.write(
            self.style.SUCCESS(
                f"Seed completed: users={users_created}, products={len(products)}"
            )
        )
        for category in ProductCategory.values:
            count = sum(1 for p in products if p.category == category)
            self.stdout.write(f"   {category:<15} {count} products")

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin@example.com").exists():
            User.objects.create_user(
                "admin@example.com",
                email="admin@example.com",
                password="admin123",
                first_name="Store Admin",
                is_staff=True,
            )
            created += 1
        customer = User.objects.filter(username="customer@example.com").first()
        if customer is None:
            customer = User.objects.create_user(
                "customer@example.com",
                email="customer@example.com",
                password="customer123",
                first_name="Demo Customer",
            )
            created += 1
        Address.objects.get_or_create(
            user=customer,
            label="Home",
            defaults={
                "street": "12 MG Road",
                "city": "Bengaluru",
                "state": "Karnataka",
                "postal_code": "560001",
                "is_default": True,
            },
        )
        return created

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        for (
            name,
            category,
            sub_category,
            price,
            sizes,
            stock,
            discount,
            featured,
            image,
        ) in CATALOG:
            product, _ = Product.objects.alive().get_or_create(
                name=name,
                defaults={
                    "description": f"{name} from our {category} {sub_category} range.",
                    "price": Decimal(price),
                    "category": category,
                    "sub_category": sub_category,
                    "sizes": sizes,
                    "stock_quantity": stock,
                    "discount": discount,
                    "is_featured": featured,
                    "images": [{"url": _IMG.format(image), "alt_text": name}],
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products
