"""Account URL configuration (mounted under ``api/v1/auth/``)."""

from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from modules.accounts.views import (
    AddressViewSet,
    EmailTokenObtainPairView,
    MeView,
    SignupView,
)

router = DefaultRouter(trailing_slash=True)
router.include_root_view = False
router.register("addresses", AddressViewSet, basename="address")

urlpatterns = [
    path("signup/", SignupView.as_view(), name="signup"),
    path("token/", EmailTokenObtainPairView.as_view(), name="token_obtain"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("me/", MeView.as_view(), name="me"),
    *router.urls,
]
