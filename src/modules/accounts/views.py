"""Account API views: signup, token issuance, profile and address book.

Domain exceptions raised by ``AccountService`` are translated into
HTTP responses here.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

from modules.accounts.dtos import CreateAddressDTO, SignupDTO
from modules.accounts.exceptions import AddressNotFound, EmailAlreadyRegistered
from modules.accounts.models import Address
from modules.accounts.repositories.django_repository import (
    AddressDjangoRepository,
    UserDjangoRepository,
)
from modules.accounts.serializers import (
    AddressSerializer,
    EmailTokenObtainPairSerializer,
    UserSerializer,
)
from modules.accounts.services import AccountService
from modules.core.responses import pydantic_error_response


def _build_service() -> AccountService:
    return AccountService(
        user_repository=UserDjangoRepository(),
        address_repository=AddressDjangoRepository(),
    )


class SignupView(APIView):
    """POST /api/v1/auth/signup/"""

    permission_classes = [AllowAny]
    throttle_scope = "signup"

    def post(self, request: Request) -> Response:
        try:
            dto = SignupDTO.model_validate(dict(request.data))
        except PydanticValidationError as exc:
            return pydantic_error_response(exc)

        try:
            user = _build_service().signup(dto)
        except EmailAlreadyRegistered as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        refresh = RefreshToken.for_user(user)
        return Response(
            {
                "message": "Account created successfully.",
                "user": UserSerializer(user).data,
                "access": str(refresh.access_token),
                "refresh": str(refresh),
            },
            status=status.HTTP_201_CREATED,
        )


class EmailTokenObtainPairView(TokenObtainPairView):
    """POST /api/v1/auth/token/ with ``{email, password}``."""

    serializer_class = EmailTokenObtainPairSerializer


class MeView(APIView):
    """GET /api/v1/auth/me/"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        return Response({"user": UserSerializer(request.user).data})


class AddressViewSet(GenericViewSet):
    """The authenticated user's address book."""

    permission_classes = [IsAuthenticated]
    serializer_class = AddressSerializer
    queryset = Address.objects.none()

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = _build_service()

    def _addresses_response(self, request: Request, **kwargs) -> Response:
        addresses = self._service.list_addresses(request.user.pk)
        return Response(
            {"addresses": AddressSerializer(addresses, many=True).data}, **kwargs
        )

    def list(self, request: Request) -> Response:
        """GET /api/v1/auth/addresses/"""
        return self._addresses_response(request)

    def create(self, request: Request) -> Response:
        """POST /api/v1/auth/addresses/"""
        try:
            dto = CreateAddressDTO.model_validate(dict(request.data))
        except PydanticValidationError as exc:
            return pydantic_error_response(exc)

        self._service.add_address(request.user.pk, dto)
        return self._addresses_response(request, status=status.HTTP_201_CREATED)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/auth/addresses/{pk}/"""
        try:
            self._service.delete_address(request.user.pk, pk)
        except AddressNotFound:
            return Response(
                {"detail": "Address not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return self._addresses_response(request)

    @action(detail=True, methods=["put"], url_path="default")
    def set_default(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/auth/addresses/{pk}/default/"""
        try:
            self._service.set_default_address(request.user.pk, pk)
        except AddressNotFound:
            return Response(
                {"detail": "Address not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return self._addresses_response(request)
