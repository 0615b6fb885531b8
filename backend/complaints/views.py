"""
Complaints app ViewSets.

Architecture: Views are intentionally thin.
Every view follows the strict three-step pattern:

    1. Parse / validate input via a serializer.
    2. Delegate all business logic to the appropriate service class.
    3. Serialize the result and return a DRF ``Response``.

No database queries, workflow logic, or metric math lives here.

ViewSets
--------
- ``ComplaintViewSet`` — The single ViewSet for all complaint endpoints.
  Custom @action methods handle the escalation workflow and the
  escalation-history sub-resource.
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from .serializers import (
    AcceptRequestSerializer,
    ComplaintCreateRequestSerializer,
    ComplaintDetailSerializer,
    ComplaintFilterSerializer,
    ComplaintListSerializer,
    EscalateRequestSerializer,
    EscalationHistorySerializer,
    RespondRequestSerializer,
    SecondStageRequestSerializer,
)
from .services import (
    ComplaintEscalationService,
    ComplaintQueryService,
    ComplaintResponseService,
    ComplaintSubmissionService,
)

logger = logging.getLogger(__name__)


class ComplaintViewSet(viewsets.ViewSet):
    """
    Central ViewSet for the complaints app.

    Uses ``viewsets.ViewSet`` (not ``ModelViewSet``) so every action is
    explicitly defined; complaints cannot be edited or deleted through
    the API.

    Permission Strategy
    -------------------
    The base permission is ``IsAuthenticated``.  Role and ownership checks
    are enforced exclusively inside the service layer; domain errors are
    turned into HTTP responses by the project exception handler.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    # ── Helpers ──────────────────────────────────────────────────────

    def _detail_response(self, request: Request, pk: int, http_status: int = status.HTTP_200_OK) -> Response:
        complaint = ComplaintQueryService.get_complaint_detail(request.user, pk)
        out = ComplaintDetailSerializer(complaint, context={"request": request})
        return Response(out.data, status=http_status)

    # ── Standard endpoints ───────────────────────────────────────────

    @extend_schema(
        summary="List complaints",
        description=(
            "List complaints visible to the authenticated user, most recently "
            "updated first.  Citizens see their own complaints, stakeholder "
            "offices the complaints filed with them, anti-corruption tiers the "
            "complaints they currently handle, and the Kentiba Biro all."
        ),
        parameters=[
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY, description="Complaint status or 'all'."),
            OpenApiParameter(name="page", type=int, location=OpenApiParameter.QUERY, description="1-based page number."),
            OpenApiParameter(name="limit", type=int, location=OpenApiParameter.QUERY, description="Page size (max 100)."),
        ],
        responses={
            200: OpenApiResponse(description="{'results': [...], 'pagination': {total, page, limit, pages}}"),
        },
        tags=["Complaints"],
    )
    def list(self, request: Request) -> Response:
        """
        GET /api/complaints/
        """
        filter_serializer = ComplaintFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        filters = filter_serializer.validated_data

        page_qs, pagination = ComplaintQueryService.list_complaints(
            request.user,
            status=filters["status"],
            page=filters["page"],
            limit=filters["limit"],
        )
        results = ComplaintListSerializer(page_qs, many=True, context={"request": request})
        return Response(
            {"results": results.data, "pagination": pagination},
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        summary="Submit a complaint",
        description=(
            "Citizen files a complaint with an approved stakeholder office.  "
            "Up to five files may be attached as repeated 'attachments' "
            "multipart parts."
        ),
        request=ComplaintCreateRequestSerializer,
        responses={
            201: OpenApiResponse(response=ComplaintDetailSerializer, description="Complaint created."),
            400: OpenApiResponse(description="Validation error."),
            403: OpenApiResponse(description="Only citizens can submit complaints."),
            404: OpenApiResponse(description="Stakeholder office not found."),
        },
        tags=["Complaints"],
    )
    def create(self, request: Request) -> Response:
        """
        POST /api/complaints/

        Steps
        -----
        1. Validate with ``ComplaintCreateRequestSerializer``.
        2. Delegate to ``ComplaintSubmissionService.submit_complaint`` with
           the uploaded attachments.
        3. Return the full complaint with HTTP 201.
        """
        serializer = ComplaintCreateRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        complaint = ComplaintSubmissionService.submit_complaint(
            serializer.validated_data,
            request.user,
            request.FILES.getlist("attachments"),
        )
        return self._detail_response(request, complaint.pk, status.HTTP_201_CREATED)

    @extend_schema(
        summary="Retrieve a complaint",
        responses={
            200: OpenApiResponse(response=ComplaintDetailSerializer, description="Complaint detail."),
            403: OpenApiResponse(description="Complaint outside your scope."),
            404: OpenApiResponse(description="Complaint not found."),
        },
        tags=["Complaints"],
    )
    def retrieve(self, request: Request, pk: int = None) -> Response:
        """
        GET /api/complaints/{id}/
        """
        return self._detail_response(request, pk)

    # ── Workflow @actions ─────────────────────────────────────────────

    @action(detail=True, methods=["post"], url_path="second-stage")
    @extend_schema(
        summary="Submit a second-stage complaint",
        description=(
            "After a first-stage response the citizen may open a second-stage "
            "complaint with the same office.  The original is marked "
            "escalated and links to the new complaint."
        ),
        request=SecondStageRequestSerializer,
        responses={
            201: OpenApiResponse(response=ComplaintDetailSerializer, description="Second-stage complaint created."),
            400: OpenApiResponse(description="Original is not eligible."),
            404: OpenApiResponse(description="Original not found."),
        },
        tags=["Complaints – Workflow"],
    )
    def second_stage(self, request: Request, pk: int = None) -> Response:
        serializer = SecondStageRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        child = ComplaintSubmissionService.submit_second_stage(
            pk,
            serializer.validated_data,
            request.user,
            request.FILES.getlist("attachments"),
        )
        return self._detail_response(request, child.pk, status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="escalate")
    @extend_schema(
        summary="Escalate a complaint",
        description=(
            "Citizen moves the complaint one stage up once the current "
            "stage's response due date has passed or the handler has "
            "responded."
        ),
        request=EscalateRequestSerializer,
        responses={
            200: OpenApiResponse(response=ComplaintDetailSerializer, description="Complaint escalated."),
            403: OpenApiResponse(description="Not the complaint's citizen."),
            404: OpenApiResponse(description="Complaint not found."),
            409: OpenApiResponse(description="Resolved, terminal, not yet eligible, or modified concurrently."),
        },
        tags=["Complaints – Workflow"],
    )
    def escalate(self, request: Request, pk: int = None) -> Response:
        serializer = EscalateRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        complaint = ComplaintEscalationService.escalate(
            pk,
            request.user,
            reason=serializer.validated_data["reason"],
            expected_version=serializer.validated_data.get("version"),
        )
        return self._detail_response(request, complaint.pk)

    @action(detail=True, methods=["post"], url_path="respond")
    @extend_schema(
        summary="Respond to a complaint",
        description="The current handler replies; the complaint moves to in_progress.",
        request=RespondRequestSerializer,
        responses={
            200: OpenApiResponse(response=ComplaintDetailSerializer, description="Response recorded."),
            400: OpenApiResponse(description="Empty response."),
            403: OpenApiResponse(description="Not the current handler."),
            409: OpenApiResponse(description="Complaint already resolved."),
        },
        tags=["Complaints – Workflow"],
    )
    def respond(self, request: Request, pk: int = None) -> Response:
        serializer = RespondRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ComplaintResponseService.respond(pk, serializer.validated_data, request.user)
        return self._detail_response(request, pk)

    @action(detail=True, methods=["post"], url_path="accept")
    @extend_schema(
        summary="Accept the latest response",
        description="Citizen accepts the latest response and the complaint is resolved.",
        request=AcceptRequestSerializer,
        responses={
            200: OpenApiResponse(response=ComplaintDetailSerializer, description="Complaint resolved."),
            400: OpenApiResponse(description="No response to accept."),
            403: OpenApiResponse(description="Not the complaint's citizen."),
            409: OpenApiResponse(description="Already resolved."),
        },
        tags=["Complaints – Workflow"],
    )
    def accept(self, request: Request, pk: int = None) -> Response:
        serializer = AcceptRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ComplaintResponseService.accept(
            pk,
            request.user,
            expected_version=serializer.validated_data.get("version"),
        )
        return self._detail_response(request, pk)

    # ── Sub-resource @actions ─────────────────────────────────────────

    @action(detail=True, methods=["get"], url_path="escalation-history")
    @extend_schema(
        summary="Escalation history",
        responses={200: EscalationHistorySerializer(many=True)},
        tags=["Complaints – Workflow"],
    )
    def escalation_history(self, request: Request, pk: int = None) -> Response:
        history = ComplaintQueryService.get_escalation_history(request.user, pk)
        return Response(
            EscalationHistorySerializer(history, many=True).data,
            status=status.HTTP_200_OK,
        )
