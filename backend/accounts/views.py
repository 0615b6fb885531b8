"""
Accounts app views.

All views follow the **Thin View** pattern: validate input via
serializers, delegate to the service layer, and return the result
wrapped in a DRF ``Response``.  **No business logic** resides here.

View Map
--------
- ``RegisterView``       — POST /auth/register/
- ``AdminRegisterView``  — POST /auth/register-admin/
- ``LoginView``          — POST /auth/login/
- ``MeView``             — GET /me/
- ``OfficeListView``     — GET /offices/
"""

from __future__ import annotations

from django.contrib.auth import authenticate
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import (
    AdminRegisterRequestSerializer,
    LoginRequestSerializer,
    OfficeListSerializer,
    RegisterRequestSerializer,
    UserDetailSerializer,
)
from .services import AuthenticationService, OfficeDirectoryService, UserRegistrationService


# ═══════════════════════════════════════════════════════════════════
#  Authentication Views
# ═══════════════════════════════════════════════════════════════════


class RegisterView(generics.CreateAPIView):
    """
    POST /api/accounts/auth/register/

    Public endpoint.  Creates a citizen (default) or stakeholder-office
    account.  Stakeholder offices must be approved before they appear in
    the office directory.
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    serializer_class = RegisterRequestSerializer

    @extend_schema(
        summary="Register a citizen or stakeholder office",
        responses={
            201: OpenApiResponse(response=UserDetailSerializer, description="User registered."),
            400: OpenApiResponse(description="Validation error."),
            409: OpenApiResponse(description="Email or ID number already registered."),
        },
        tags=["Accounts"],
    )
    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserRegistrationService.register_user(dict(serializer.validated_data))
        return Response(UserDetailSerializer(user).data, status=status.HTTP_201_CREATED)


class AdminRegisterView(generics.CreateAPIView):
    """
    POST /api/accounts/auth/register-admin/

    Public endpoint gated by a role-specific administrator code.
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    serializer_class = AdminRegisterRequestSerializer

    @extend_schema(
        summary="Register an administrator",
        responses={
            201: OpenApiResponse(response=UserDetailSerializer, description="Administrator registered."),
            400: OpenApiResponse(description="Validation error or invalid role."),
            403: OpenApiResponse(description="Invalid administrator code."),
        },
        tags=["Accounts"],
    )
    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserRegistrationService.register_admin(dict(serializer.validated_data))
        return Response(UserDetailSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    POST /api/accounts/auth/login/

    Public endpoint.  Authenticates via any of email / ID number / phone /
    username plus password and returns a JWT pair with the user profile.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Log in",
        request=LoginRequestSerializer,
        responses={
            200: OpenApiResponse(description="Access + refresh tokens and the user profile."),
            401: OpenApiResponse(description="Invalid credentials."),
        },
        tags=["Accounts"],
    )
    def post(self, request: Request) -> Response:
        serializer = LoginRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = authenticate(
            request=request,
            identifier=serializer.validated_data["identifier"],
            password=serializer.validated_data["password"],
        )
        if user is None:
            return Response(
                {"detail": "Invalid credentials."},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        payload = AuthenticationService.generate_tokens(user)
        payload["user"] = UserDetailSerializer(user).data
        return Response(payload, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  Profile / Directory Views
# ═══════════════════════════════════════════════════════════════════


class MeView(APIView):
    """GET /api/accounts/me/ — the authenticated user's profile."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Current user",
        responses={200: UserDetailSerializer},
        tags=["Accounts"],
    )
    def get(self, request: Request) -> Response:
        return Response(UserDetailSerializer(request.user).data, status=status.HTTP_200_OK)


class OfficeListView(APIView):
    """
    GET /api/accounts/offices/

    Approved stakeholder offices a citizen can direct a complaint to.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Stakeholder office directory",
        parameters=[
            OpenApiParameter(name="office_type", type=str, location=OpenApiParameter.QUERY, description="Filter by office type."),
            OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY, description="Search office name / address."),
        ],
        responses={200: OfficeListSerializer(many=True)},
        tags=["Accounts"],
    )
    def get(self, request: Request) -> Response:
        qs = OfficeDirectoryService.list_offices(
            office_type=request.query_params.get("office_type"),
            search=request.query_params.get("search"),
        )
        return Response(OfficeListSerializer(qs, many=True).data, status=status.HTTP_200_OK)
