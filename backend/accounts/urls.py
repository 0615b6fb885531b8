"""
Accounts app URL configuration.

All routes are namespaced under ``accounts`` and included in the
project-level ``urls.py`` as::

    path('api/accounts/', include('accounts.urls')),

Endpoint Map
------------
Authentication
    POST   /auth/register/              → RegisterView
    POST   /auth/register-admin/        → AdminRegisterView
    POST   /auth/login/                 → LoginView
    POST   /auth/token/refresh/         → TokenRefreshView (SimpleJWT)

Profile / Directory
    GET    /me/                         → MeView
    GET    /offices/                    → OfficeListView
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import AdminRegisterView, LoginView, MeView, OfficeListView, RegisterView

app_name = "accounts"

urlpatterns = [
    # ── Authentication ───────────────────────────────────────────────
    path("auth/register/", RegisterView.as_view(), name="register"),
    path("auth/register-admin/", AdminRegisterView.as_view(), name="register-admin"),
    path("auth/login/", LoginView.as_view(), name="login"),
    path(
        "auth/token/refresh/",
        TokenRefreshView.as_view(),
        name="token-refresh",
    ),

    # ── Profile / Directory ──────────────────────────────────────────
    path("me/", MeView.as_view(), name="me"),
    path("offices/", OfficeListView.as_view(), name="office-list"),
]
