"""Cart URL configuration.

The cart is a singleton per user, so its routes are mapped by hand
instead of through a router.
"""

from __future__ import annotations

from django.urls import path

from modules.cart.views import CartViewSet

cart_root = CartViewSet.as_view(
    {"get": "retrieve_cart", "post": "add_item", "delete": "clear"}
)
cart_item = CartViewSet.as_view({"put": "update_item", "delete": "remove_item"})

urlpatterns = [
    path("cart/", cart_root, name="cart"),
    path("cart/<str:pk>/", cart_item, name="cart-item"),
]
