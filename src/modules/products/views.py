"""Product API views.

Exposes the ``ProductService`` via HTTP using DRF ViewSets.  Catalog
reads are public; writes require an admin (``is_staff``) user.
Domain exceptions are caught and translated into HTTP status codes.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import StandardResultsSetPagination
from modules.core.responses import pydantic_error_response
from modules.products.dtos import CreateProductDTO, UpdateProductDTO
from modules.products.exceptions import ProductNotFound
from modules.products.filters import ProductFilter
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer
from modules.products.services import ProductService


class ProductPagination(StandardResultsSetPagination):
    page_size = 12
    results_key = "products"


def _not_found() -> Response:
    return Response(
        {"detail": "Product not found."},
        status=status.HTTP_404_NOT_FOUND,
    )


class ProductViewSet(ListModelMixin, GenericViewSet):
    """Catalog endpoints.

    ``list`` is served by ``ListModelMixin`` over ``get_queryset`` so
    ``ProductFilter`` and ``ProductPagination`` apply; everything else
    goes through ``ProductService``.
    """

    filterset_class = ProductFilter
    filter_backends = [DjangoFilterBackend]
    pagination_class = ProductPagination
    queryset = Product.objects.none()
    serializer_class = ProductSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    def get_permissions(self):
        if self.action in {"list", "retrieve"}:
            return [AllowAny()]
        return [IsAdminUser()]

    def get_queryset(self):
        return self._service.list_products()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        try:
            product = self._service.get_product(pk)
        except ProductNotFound:
            return _not_found()
        return Response(ProductSerializer(product).data)

    # ------------------------------------------------------------------
    # Admin writes
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        try:
            dto = CreateProductDTO.model_validate(dict(request.data))
        except PydanticValidationError as exc:
            return pydantic_error_response(exc, "Invalid product data.")

        product = self._service.create_product(dto)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/products/{pk}/"""
        try:
            dto = UpdateProductDTO.model_validate(dict(request.data))
        except PydanticValidationError as exc:
            return pydantic_error_response(exc, "Invalid product data.")

        try:
            product = self._service.update_product(pk, dto)
        except ProductNotFound:
            return _not_found()
        return Response(ProductSerializer(product).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/"""
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/ (soft delete)"""
        try:
            self._service.delete_product(pk)
        except ProductNotFound:
            return _not_found()
        return Response({"message": "Product deleted."}, status=status.HTTP_200_OK)
