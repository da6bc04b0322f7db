"""Cart API views.

All endpoints act on the authenticated user's own cart.  Domain
exceptions are caught and translated into HTTP responses.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.cart.dtos import AddCartItemDTO, UpdateCartItemDTO
from modules.cart.exceptions import CartItemNotFound, CartNotFound
from modules.cart.models import Cart
from modules.cart.repositories.django_repository import CartDjangoRepository
from modules.cart.serializers import (
    AddCartItemSerializer,
    CartSerializer,
    UpdateCartItemSerializer,
)
from modules.cart.services import CartService
from modules.core.responses import detail_response, insufficient_stock_response
from modules.products.exceptions import InsufficientStock, InvalidSize, ProductNotFound
from modules.products.repositories.django_repository import ProductDjangoRepository

EMPTY_CART = {"items": [], "total_price": "0.00", "total_items": 0}


class CartViewSet(GenericViewSet):
    """``cart/`` and ``cart/{item_id}/``; see ``urls.py`` for the verb map."""

    permission_classes = [IsAuthenticated]
    serializer_class = CartSerializer
    queryset = Cart.objects.none()
    throttle_scope = "cart"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CartService(
            cart_repository=CartDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )

    def _render(self, cart: Cart | None) -> dict:
        return CartSerializer(cart).data if cart is not None else dict(EMPTY_CART)

    # ------------------------------------------------------------------
    # Whole cart
    # ------------------------------------------------------------------

    def retrieve_cart(self, request: Request) -> Response:
        """GET /api/v1/cart/"""
        cart = self._service.get_cart(request.user.pk)
        return Response({"cart": self._render(cart)})

    def add_item(self, request: Request) -> Response:
        """POST /api/v1/cart/"""
        serializer = AddCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = AddCartItemDTO(**serializer.validated_data)

        try:
            cart = self._service.add_item(request.user.pk, dto)
        except ProductNotFound:
            return detail_response("Product not found.", status.HTTP_404_NOT_FOUND)
        except InvalidSize as exc:
            return detail_response(str(exc), status.HTTP_400_BAD_REQUEST)
        except InsufficientStock as exc:
            return insufficient_stock_response(exc)

        return Response({"cart": self._render(cart), "message": "Item added to cart."})

    def clear(self, request: Request) -> Response:
        """DELETE /api/v1/cart/"""
        self._service.clear(request.user.pk)
        return Response({"message": "Cart cleared."})

    # ------------------------------------------------------------------
    # Single line
    # ------------------------------------------------------------------

    def update_item(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/cart/{item_id}/"""
        serializer = UpdateCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = UpdateCartItemDTO(**serializer.validated_data)

        try:
            cart = self._service.update_item(request.user.pk, pk, dto)
        except (CartNotFound, CartItemNotFound, ProductNotFound) as exc:
            return detail_response(str(exc), status.HTTP_404_NOT_FOUND)
        except InsufficientStock as exc:
            return insufficient_stock_response(exc)

        return Response({"cart": self._render(cart)})

    def remove_item(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/cart/{item_id}/"""
        try:
            cart = self._service.remove_item(request.user.pk, pk)
        except (CartNotFound, CartItemNotFound) as exc:
            return detail_response(str(exc), status.HTTP_404_NOT_FOUND)

        return Response(
            {"cart": self._render(cart), "message": "Item removed from cart."}
        )
