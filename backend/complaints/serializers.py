"""
Complaints app serializers.

Contains all Request and Response serializers for the Complaints API.
Serializers handle field definitions, read/write constraints, and
field-level validation only.  **No business logic or workflow
transitions live here**; those belong in ``services.py``.

Structure
---------
1. Filter / query-param serializers
2. Complaint read serializers (list, detail, sub-resources)
3. Complaint write serializers (first-stage, second-stage)
4. Workflow action serializers (escalate, respond, accept)
"""

from __future__ import annotations

from typing import Any

from rest_framework import serializers

from accounts.models import UserRole
from accounts.serializers import UserSummarySerializer
from core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

from .models import (
    Complaint,
    ComplaintAttachment,
    ComplaintResolution,
    ComplaintResponse,
    ComplaintStatus,
    EscalationHistory,
)


# ═══════════════════════════════════════════════════════════════════
#  1. Filter / Query-Parameter Serializers
# ═══════════════════════════════════════════════════════════════════


class ComplaintFilterSerializer(serializers.Serializer):
    """
    Validates query parameters for ``GET /api/complaints/``.

    Query Parameters
    ----------------
    ``status`` : str — a ``ComplaintStatus`` value or ``"all"``
    ``page``   : int — 1-based page number (default 1)
    ``limit``  : int — page size (default 10, max 100)
    """

    status = serializers.ChoiceField(
        choices=[("all", "All")] + list(ComplaintStatus.choices),
        required=False,
        default="all",
    )
    page = serializers.IntegerField(required=False, default=1, min_value=1)
    limit = serializers.IntegerField(
        required=False,
        default=DEFAULT_PAGE_SIZE,
        min_value=1,
        max_value=MAX_PAGE_SIZE,
    )


# ═══════════════════════════════════════════════════════════════════
#  2. Complaint Read Serializers
# ═══════════════════════════════════════════════════════════════════


class ComplaintAttachmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = ComplaintAttachment
        fields = ["id", "file", "created_at"]
        read_only_fields = fields


class ComplaintResponseSerializer(serializers.ModelSerializer):
    """
    A handler's response.

    ``internal_comment`` is dropped when the requesting user is a citizen.
    """

    responder = UserSummarySerializer(read_only=True)

    class Meta:
        model = ComplaintResponse
        fields = [
            "id",
            "responder",
            "responder_role",
            "body",
            "internal_comment",
            "status",
            "created_at",
        ]
        read_only_fields = fields

    def to_representation(self, instance: ComplaintResponse) -> dict[str, Any]:
        data = super().to_representation(instance)
        request = self.context.get("request")
        if request is None or getattr(request.user, "role", None) == UserRole.CITIZEN:
            data.pop("internal_comment", None)
        return data


class EscalationHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = EscalationHistory
        fields = ["id", "from_handler", "to_handler", "reason", "created_at"]
        read_only_fields = fields


class ComplaintResolutionSerializer(serializers.ModelSerializer):
    resolved_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = ComplaintResolution
        fields = ["resolved_by", "resolver_role", "resolution", "created_at"]
        read_only_fields = fields


class ComplaintListSerializer(serializers.ModelSerializer):
    """Compact representation for the list endpoint."""

    stakeholder_office = UserSummarySerializer(read_only=True)
    current_due_date = serializers.DateTimeField(read_only=True, allow_null=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    stage_display = serializers.CharField(source="get_current_stage_display", read_only=True)

    class Meta:
        model = Complaint
        fields = [
            "id",
            "title",
            "location",
            "stakeholder_office",
            "current_stage",
            "stage_display",
            "current_handler",
            "status",
            "status_display",
            "current_due_date",
            "related_complaint",
            "second_stage_complaint",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ComplaintDetailSerializer(ComplaintListSerializer):
    """
    Full representation with every sub-resource.

    ``due_dates`` maps each stage that has been reached to its response
    deadline.
    """

    citizen = UserSummarySerializer(read_only=True)
    attachments = ComplaintAttachmentSerializer(many=True, read_only=True)
    responses = ComplaintResponseSerializer(many=True, read_only=True)
    escalation_history = EscalationHistorySerializer(many=True, read_only=True)
    resolution = serializers.SerializerMethodField()
    due_dates = serializers.SerializerMethodField()

    class Meta(ComplaintListSerializer.Meta):
        fields = ComplaintListSerializer.Meta.fields + [
            "citizen",
            "description",
            "additional_details",
            "attachments",
            "due_dates",
            "responses",
            "escalation_history",
            "resolution",
        ]
        read_only_fields = fields

    def get_resolution(self, obj: Complaint) -> dict | None:
        try:
            resolution = obj.resolution
        except ComplaintResolution.DoesNotExist:
            return None
        return ComplaintResolutionSerializer(resolution, context=self.context).data

    def get_due_dates(self, obj: Complaint) -> dict[str, str]:
        field = serializers.DateTimeField()
        return {d.stage: field.to_representation(d.due_at) for d in obj.deadlines.all()}


# ═══════════════════════════════════════════════════════════════════
#  3. Complaint Write Serializers
# ═══════════════════════════════════════════════════════════════════


class ComplaintCreateRequestSerializer(serializers.Serializer):
    """
    First-stage submission.

    Attachments are sent as repeated multipart ``attachments`` parts and
    read by the view from ``request.FILES``.
    """

    stakeholder_office = serializers.IntegerField(
        min_value=1,
        help_text="PK of an approved stakeholder office (see /api/accounts/offices/).",
    )
    title = serializers.CharField(max_length=255)
    description = serializers.CharField()
    location = serializers.CharField(max_length=500)


class SecondStageRequestSerializer(serializers.Serializer):
    """Second-stage submission.  Omitted fields fall back to the original's."""

    title = serializers.CharField(max_length=255, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    location = serializers.CharField(max_length=500, required=False, allow_blank=True)
    additional_details = serializers.CharField(required=False, allow_blank=True, default="")


# ═══════════════════════════════════════════════════════════════════
#  4. Workflow Action Serializers
# ═══════════════════════════════════════════════════════════════════


class EscalateRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    version = serializers.IntegerField(
        required=False,
        min_value=0,
        help_text="Version the client last saw; a mismatch is rejected with 409.",
    )


class RespondRequestSerializer(serializers.Serializer):
    body = serializers.CharField(allow_blank=True, trim_whitespace=False)
    internal_comment = serializers.CharField(required=False, allow_blank=True, default="")


class AcceptRequestSerializer(serializers.Serializer):
    version = serializers.IntegerField(required=False, min_value=0)
