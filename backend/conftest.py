"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``create_user`` factory fixture for creating test users.
  - ``auth_header`` fixture for authenticated requests (JWT).
  - ``media_root`` fixture pointing uploads at a temporary directory.
"""

from __future__ import annotations

import pytest
from rest_framework.test import APIClient


@pytest.fixture()
def api_client() -> APIClient:
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture()
def create_user(db):
    """
    Factory fixture that creates a user with sensible defaults.

    Office roles are approved unless ``is_approved`` is given.

    Usage::

        def test_something(create_user):
            citizen = create_user(username="alice")
            office = create_user(role="stakeholder_office", office_name="Bole Land Office")
    """
    from accounts.models import User, UserRole

    _counter = 0

    def _factory(
        *,
        username: str | None = None,
        password: str = "TestPass123!",
        email: str | None = None,
        id_number: str | None = None,
        phone: str | None = None,
        role: str = UserRole.CITIZEN,
        is_active: bool = True,
        is_approved: bool | None = None,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if username is None:
            username = f"testuser{_counter}"
        if email is None:
            email = f"{username}@test.local"
        if id_number is None:
            id_number = f"ID{_counter:08d}"
        if phone is None:
            phone = f"0911{_counter:06d}"
        if is_approved is None:
            is_approved = role != UserRole.CITIZEN

        return User.objects.create_user(
            username=username,
            password=password,
            email=email,
            id_number=id_number,
            phone=phone,
            role=role,
            is_active=is_active,
            is_approved=is_approved,
            **kwargs,
        )

    return _factory


@pytest.fixture()
def auth_header(create_user, api_client):
    """
    Returns a helper function that creates a user and returns an
    ``Authorization`` header dict with a valid JWT access token.

    Usage::

        def test_protected(auth_header, api_client):
            header = auth_header(role="kentiba_biro")
            api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])
            resp = api_client.get("/api/core/dashboard/")
            assert resp.status_code != 401

    The returned dict looks like::

        {"Authorization": "Bearer eyJ..."}
    """
    from rest_framework_simplejwt.tokens import AccessToken

    def _make(
        *,
        username: str | None = None,
        **user_kwargs,
    ) -> dict[str, str]:
        user = create_user(username=username, **user_kwargs)
        token = AccessToken.for_user(user)
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture()
def media_root(settings, tmp_path):
    """Store uploaded attachments under a per-test temporary directory."""
    settings.MEDIA_ROOT = tmp_path / "media"
    return settings.MEDIA_ROOT
