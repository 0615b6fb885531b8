"""
Accounts Service Layer.

This module is the **single source of truth** for all business logic
within the ``accounts`` app.  Views must remain *thin*: they validate
input through serializers, call a service function / method, and
return the result wrapped in a DRF ``Response``.

Architecture
------------
- ``UserRegistrationService``  — citizen / stakeholder-office sign-up and
                                 code-gated administrator sign-up.
- ``AuthenticationService``    — JWT issuance.
- ``OfficeDirectoryService``   — approved stakeholder offices for the
                                 complaint form.
- ``UserManagementService``    — office approval.
"""

from __future__ import annotations

import hmac
import logging
from typing import Any

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q, QuerySet
from rest_framework_simplejwt.tokens import RefreshToken

from core.domain.exceptions import AuthorizationError, Conflict, ValidationError

from .models import ADMIN_ROLES, OFFICE_ROLES, UserRole

User = get_user_model()
logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Registration Service
# ═══════════════════════════════════════════════════════════════════


class UserRegistrationService:
    """
    Encapsulates the two registration flows.

    * Public registration creates citizens and stakeholder offices.
      Stakeholder offices start unapproved.
    * Administrator registration creates anti-corruption / Kentiba Biro
      accounts and requires the per-role code configured in
      ``settings.ADMIN_REGISTRATION_CODES``.
    """

    @staticmethod
    def register_user(validated_data: dict[str, Any]) -> User:
        """
        Create a citizen or stakeholder-office account.

        Raises
        ------
        core.domain.exceptions.ValidationError
            If an administrator role is requested (those go through
            ``register_admin``).
        core.domain.exceptions.Conflict
            If the email or ID number is already registered.
        """
        role = validated_data.get("role") or UserRole.CITIZEN
        if role in ADMIN_ROLES:
            raise ValidationError(
                "Administrator accounts must be registered with an administrator code."
            )
        validated_data["role"] = role
        return UserRegistrationService._create(validated_data)

    @staticmethod
    def register_admin(validated_data: dict[str, Any]) -> User:
        """
        Create an administrator account after verifying its registration code.

        Raises
        ------
        core.domain.exceptions.ValidationError
            If the role is not an administrator role.
        core.domain.exceptions.AuthorizationError
            If the administrator code does not match the role's code.
        """
        role = validated_data.get("role")
        admin_code = validated_data.pop("admin_code", "")

        if role not in ADMIN_ROLES:
            raise ValidationError("Invalid administrator role.")

        expected = settings.ADMIN_REGISTRATION_CODES.get(role, "")
        if not expected or not hmac.compare_digest(str(admin_code), expected):
            raise AuthorizationError("Invalid administrator registration code.")

        return UserRegistrationService._create(validated_data)

    @staticmethod
    def _create(validated_data: dict[str, Any]) -> User:
        validated_data.pop("password_confirm", None)
        password = validated_data.pop("password")

        conflicts = []
        if User.objects.filter(email__iexact=validated_data.get("email")).exists():
            conflicts.append("email")
        if User.objects.filter(id_number=validated_data.get("id_number")).exists():
            conflicts.append("id_number")
        if conflicts:
            raise Conflict(
                f"The following field(s) already exist: {', '.join(conflicts)}."
            )

        validated_data.setdefault("username", validated_data["email"])

        try:
            with transaction.atomic():
                user = User.objects.create_user(password=password, **validated_data)
        except IntegrityError:
            raise Conflict(
                "A user with one of the provided unique fields already exists."
            )

        logger.info("Registered user id=%s role=%s", user.pk, user.role)
        return user


# ═══════════════════════════════════════════════════════════════════
#  Authentication Service
# ═══════════════════════════════════════════════════════════════════


class AuthenticationService:
    """Issues JWT token pairs carrying the role claims the frontend needs."""

    @staticmethod
    def generate_tokens(user: User) -> dict[str, str]:
        """
        Issue a JWT access/refresh token pair for the given user.

        Returns ``{"access": "<token>", "refresh": "<token>"}``.
        """
        refresh = RefreshToken.for_user(user)
        refresh["role"] = user.role
        refresh["is_approved"] = user.is_approved
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }


# ═══════════════════════════════════════════════════════════════════
#  Office Directory Service
# ═══════════════════════════════════════════════════════════════════


class OfficeDirectoryService:
    """Lists the stakeholder offices citizens can direct complaints to."""

    @staticmethod
    def list_offices(
        *,
        office_type: str | None = None,
        search: str | None = None,
    ) -> QuerySet[User]:
        qs = User.objects.filter(
            role=UserRole.STAKEHOLDER_OFFICE,
            is_approved=True,
            is_active=True,
        )
        if office_type:
            qs = qs.filter(office_type=office_type)
        if search:
            qs = qs.filter(
                Q(office_name__icontains=search)
                | Q(office_address__icontains=search)
            )
        return qs.order_by("office_name", "pk")


# ═══════════════════════════════════════════════════════════════════
#  User Management Service
# ═══════════════════════════════════════════════════════════════════


class UserManagementService:
    """Administrative operations on office accounts."""

    @staticmethod
    def approve_offices(queryset: QuerySet[User]) -> int:
        """
        Approve every office account in ``queryset``.

        Citizens are skipped; they never need approval.  Returns the number
        of accounts updated.
        """
        updated = queryset.filter(role__in=OFFICE_ROLES).update(is_approved=True)
        logger.info("Approved %d office account(s)", updated)
        return updated
