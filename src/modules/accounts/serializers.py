"""Account DRF serializers for API input/output."""

from __future__ import annotations

from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from modules.accounts.models import Address


class EmailTokenObtainPairSerializer(TokenObtainPairSerializer):
    """``{email, password}`` in, ``{access, refresh}`` out."""

    username_field = "email"


class AddressSerializer(serializers.ModelSerializer):
    class Meta:
        model = Address
        fields = [
            "id",
            "label",
            "street",
            "city",
            "state",
            "postal_code",
            "country",
            "is_default",
            "created_at",
        ]
        read_only_fields = fields


class UserSerializer(serializers.Serializer):
    """Public view of an account, with its address book."""

    id = serializers.IntegerField(source="pk", read_only=True)
    name = serializers.CharField(source="first_name", read_only=True)
    email = serializers.EmailField(read_only=True)
    role = serializers.SerializerMethodField()
    addresses = AddressSerializer(many=True, read_only=True)

    def get_role(self, user) -> str:
        return "admin" if user.is_staff else "customer"
