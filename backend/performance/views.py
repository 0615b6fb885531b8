"""
Performance app ViewSets.

Thin views over ``PerformanceQueryService``; visibility rules live in the
service layer.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from .serializers import (
    OfficePerformanceDetailSerializer,
    OfficePerformanceSerializer,
    PerformanceFilterSerializer,
)
from .services import PerformanceQueryService


class OfficePerformanceViewSet(viewsets.ViewSet):
    """
    Read-only access to office performance.

    Listing is limited to the anti-corruption tiers and the Kentiba Biro;
    an office may always read its own records through ``mine``.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(
        summary="List office performance",
        parameters=[
            OpenApiParameter(name="office_role", type=str, location=OpenApiParameter.QUERY, description="Limit to one office role."),
        ],
        responses={
            200: OfficePerformanceSerializer(many=True),
            403: OpenApiResponse(description="Not an anti-corruption officer or the Kentiba Biro."),
        },
        tags=["Performance"],
    )
    def list(self, request: Request) -> Response:
        """
        GET /api/performance/
        """
        filter_serializer = PerformanceFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        qs = PerformanceQueryService.list_records(
            request.user,
            office_role=filter_serializer.validated_data.get("office_role"),
        )
        return Response(OfficePerformanceSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Retrieve office performance",
        responses={
            200: OfficePerformanceDetailSerializer,
            403: OpenApiResponse(description="Not visible to you."),
            404: OpenApiResponse(description="Record not found."),
        },
        tags=["Performance"],
    )
    def retrieve(self, request: Request, pk: int = None) -> Response:
        """
        GET /api/performance/{id}/
        """
        record = PerformanceQueryService.get_record(request.user, pk)
        return Response(OfficePerformanceDetailSerializer(record).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"], url_path="mine")
    @extend_schema(
        summary="My office performance",
        responses={
            200: OfficePerformanceDetailSerializer(many=True),
            403: OpenApiResponse(description="Not an office account."),
        },
        tags=["Performance"],
    )
    def mine(self, request: Request) -> Response:
        """
        GET /api/performance/mine/
        """
        qs = PerformanceQueryService.records_for_office(request.user)
        return Response(OfficePerformanceDetailSerializer(qs, many=True).data, status=status.HTTP_200_OK)
