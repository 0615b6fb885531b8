"""
Accounts app serializers.

Contains all Request and Response serializers for the accounts API.
Serializers handle field definitions, read/write constraints, and
basic validation.  **No business logic** lives here — all domain
rules are delegated to ``services.py``.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import ADMIN_ROLES, UserRole

User = get_user_model()

_PUBLIC_ROLES = [
    (UserRole.CITIZEN.value, UserRole.CITIZEN.label),
    (UserRole.STAKEHOLDER_OFFICE.value, UserRole.STAKEHOLDER_OFFICE.label),
]
_ADMIN_ROLE_CHOICES = [(r.value, r.label) for r in UserRole if r in ADMIN_ROLES]


# ═══════════════════════════════════════════════════════════════════
#  Registration Serializers
# ═══════════════════════════════════════════════════════════════════


class RegisterRequestSerializer(serializers.ModelSerializer):
    """
    Validates public registration data for citizens and stakeholder offices.

    Required fields: first_name, last_name, email, phone, password,
    password_confirm, id_number.  Stakeholder offices must also supply
    ``office_name`` and ``office_type``.
    """

    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
        help_text="Minimum 8 characters.",
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
        help_text="Must match 'password'.",
    )
    role = serializers.ChoiceField(
        choices=_PUBLIC_ROLES,
        required=False,
        default=UserRole.CITIZEN,
        help_text="'citizen' (default) or 'stakeholder_office'.",
    )

    class Meta:
        model = User
        fields = [
            "first_name",
            "last_name",
            "email",
            "phone",
            "password",
            "password_confirm",
            "id_number",
            "address",
            "role",
            "office_name",
            "office_type",
            "office_address",
            "office_phone",
            "kifleketema",
            "wereda",
        ]
        extra_kwargs = {
            "first_name": {"required": True, "allow_blank": False},
            "last_name": {"required": True, "allow_blank": False},
            "email": {"required": True},
            "phone": {"required": True},
            "id_number": {"required": True},
        }

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        """
        Cross-field validation:
        1. Ensure password and password_confirm match.
        2. Stakeholder offices must name their office and its type.
        """
        if attrs["password"] != attrs["password_confirm"]:
            raise serializers.ValidationError(
                {"password_confirm": "Passwords do not match."}
            )

        if attrs.get("role") == UserRole.STAKEHOLDER_OFFICE:
            missing = {
                field: "This field is required for stakeholder offices."
                for field in ("office_name", "office_type")
                if not attrs.get(field)
            }
            if missing:
                raise serializers.ValidationError(missing)

        attrs.pop("password_confirm")
        return attrs


class AdminRegisterRequestSerializer(RegisterRequestSerializer):
    """
    Administrator sign-up: anti-corruption tiers and Kentiba Biro.

    The ``admin_code`` is checked by the service layer against
    ``settings.ADMIN_REGISTRATION_CODES[role]``.
    """

    role = serializers.ChoiceField(choices=_ADMIN_ROLE_CHOICES)
    admin_code = serializers.CharField(write_only=True, help_text="Role-specific registration code.")

    class Meta(RegisterRequestSerializer.Meta):
        fields = RegisterRequestSerializer.Meta.fields + ["admin_code"]


# ═══════════════════════════════════════════════════════════════════
#  Authentication Serializers
# ═══════════════════════════════════════════════════════════════════


class LoginRequestSerializer(serializers.Serializer):
    """
    Accepts multi-field login credentials.

    ``identifier`` may be a username, email, ID number, or phone number.
    """

    identifier = serializers.CharField(
        help_text="Email, ID Number, Phone, or Username.",
    )
    password = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
        help_text="User account password.",
    )


# ═══════════════════════════════════════════════════════════════════
#  User Read Serializers
# ═══════════════════════════════════════════════════════════════════


class UserDetailSerializer(serializers.ModelSerializer):
    """Full profile of a user (never includes the password hash)."""

    role_display = serializers.CharField(source="get_role_display", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "first_name",
            "last_name",
            "email",
            "phone",
            "id_number",
            "address",
            "role",
            "role_display",
            "office_name",
            "office_type",
            "office_address",
            "office_phone",
            "kifleketema",
            "wereda",
            "is_approved",
            "date_joined",
        ]
        read_only_fields = fields


class OfficeListSerializer(serializers.ModelSerializer):
    """Public directory entry for a stakeholder office."""

    class Meta:
        model = User
        fields = [
            "id",
            "office_name",
            "office_type",
            "office_address",
            "office_phone",
            "kifleketema",
            "wereda",
        ]
        read_only_fields = fields


class UserSummarySerializer(serializers.ModelSerializer):
    """Compact nested representation used inside complaint payloads."""

    display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "display_name", "role"]
        read_only_fields = fields

    def get_display_name(self, obj: User) -> str:
        """Office name for offices, full name for people."""
        if obj.office_name:
            return obj.office_name
        return obj.get_full_name().strip() or obj.username
