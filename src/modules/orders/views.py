"""Order API views.

Exposes the ``OrderService`` via HTTP using a DRF ViewSet.  Domain
exceptions are caught and translated into HTTP status codes; the view
never swallows generic exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.accounts.exceptions import AddressNotFound, NoAddressAvailable
from modules.accounts.repositories.django_repository import AddressDjangoRepository
from modules.cart.repositories.django_repository import CartDjangoRepository
from modules.core.pagination import StandardResultsSetPagination
from modules.core.principal import Principal
from modules.core.responses import (
    detail_response,
    insufficient_stock_response,
    pydantic_error_response,
)
from modules.orders.constants import ORDER_CANCELLED_MESSAGE
from modules.orders.dtos import CreateOrderDTO, UpdateOrderStatusDTO
from modules.orders.exceptions import (
    EmptyCart,
    InvalidOrderStatus,
    OrderAccessDenied,
    OrderNotFound,
    ProductGone,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CancelOrderSerializer,
    CreateOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
    UpdateOrderStatusSerializer,
)
from modules.orders.services import OrderService
from modules.products.exceptions import InsufficientStock
from modules.products.repositories.django_repository import ProductDjangoRepository


class OrderPagination(StandardResultsSetPagination):
    results_key = "orders"


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories.  Does **not** extend
    ``ModelViewSet``: all ORM access goes through the service/repository
    layer.
    """

    queryset = Order.objects.none()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    filter_backends = [DjangoFilterBackend]
    pagination_class = OrderPagination

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            cart_repository=CartDjangoRepository(),
            product_repository=ProductDjangoRepository(),
            address_repository=AddressDjangoRepository(),
        )

    def get_permissions(self):
        if self.action in {"list", "update_status"}:
            return [IsAdminUser()]
        return [IsAuthenticated()]

    def get_throttles(self) -> list[BaseThrottle]:
        """Scoped throttling per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "checkout"
        elif self.action in {"list", "retrieve", "my_orders"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def get_queryset(self):
        return OrderDjangoRepository().list()

    def _principal(self, request: Request) -> Principal:
        return Principal.from_user(request.user)

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Supports idempotency via the ``Idempotency-Key`` header.
        Returns 200 if the key was already used, 201 for new orders.
        """
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            dto = CreateOrderDTO(
                **serializer.validated_data,
                idempotency_key=request.headers.get("Idempotency-Key"),
            )
        except PydanticValidationError as exc:
            return pydantic_error_response(exc)

        try:
            placement = self._service.create_order(self._principal(request), dto)
        except (EmptyCart, NoAddressAvailable) as exc:
            return detail_response(str(exc), status.HTTP_400_BAD_REQUEST)
        except InsufficientStock as exc:
            return insufficient_stock_response(exc)
        except (AddressNotFound, ProductGone) as exc:
            return detail_response(str(exc), status.HTTP_404_NOT_FOUND)

        return Response(
            {
                "order": OrderSerializer(placement.order).data,
                "message": placement.message,
            },
            status=status.HTTP_201_CREATED if placement.created else status.HTTP_200_OK,
        )

    # ------------------------------------------------------------------
    # Customer reads
    # ------------------------------------------------------------------

    @action(detail=False, methods=["get"], url_path="my-orders")
    def my_orders(self, request: Request) -> Response:
        """GET /api/v1/orders/my-orders/"""
        orders = self._service.list_my_orders(self._principal(request))
        return Response(
            {
                "count": len(orders),
                "orders": OrderListSerializer(orders, many=True).data,
            }
        )

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(self._principal(request), pk)
        except OrderNotFound:
            return detail_response("Order not found.", status.HTTP_404_NOT_FOUND)
        except OrderAccessDenied as exc:
            return detail_response(str(exc), status.HTTP_403_FORBIDDEN)
        return Response({"order": OrderSerializer(order).data})

    @action(detail=True, methods=["put"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/cancel/

        Owner-only; restores stock when it had been deducted.
        """
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = self._service.cancel_order(
                self._principal(request),
                pk,
                notes=serializer.validated_data["notes"],
            )
        except OrderNotFound:
            return detail_response("Order not found.", status.HTTP_404_NOT_FOUND)
        except OrderAccessDenied as exc:
            return detail_response(str(exc), status.HTTP_403_FORBIDDEN)
        except InvalidOrderStatus as exc:
            return detail_response(str(exc), status.HTTP_400_BAD_REQUEST)

        return Response(
            {"order": OrderSerializer(order).data, "message": ORDER_CANCELLED_MESSAGE}
        )

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filtering (``status``, ``is_bulk``, date range) is handled by
        ``OrderFilter``; results are paginated under ``orders``.
        """
        try:
            queryset = self._service.list_orders(self._principal(request))
        except OrderAccessDenied as exc:
            return detail_response(str(exc), status.HTTP_403_FORBIDDEN)

        queryset = self.filter_queryset(queryset)
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @action(detail=True, methods=["put"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/status/"""
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = UpdateOrderStatusDTO(**serializer.validated_data)

        try:
            order = self._service.update_status(
                self._principal(request),
                pk,
                dto.status,
                tracking_number=dto.tracking_number,
                notes=dto.notes,
            )
        except OrderNotFound:
            return detail_response("Order not found.", status.HTTP_404_NOT_FOUND)
        except OrderAccessDenied as exc:
            return detail_response(str(exc), status.HTTP_403_FORBIDDEN)
        except InvalidOrderStatus as exc:
            return detail_response(str(exc), status.HTTP_400_BAD_REQUEST)
        except InsufficientStock as exc:
            return insufficient_stock_response(exc)

        return Response({"order": OrderSerializer(order).data})
