"""
Core app serializers.

**Response-only** serializers for the aggregated endpoints served by the
core app.  These serializers define the *output schema* for the dashboard
and system constants views.  They do **not** accept input data.

Architectural note
------------------
These serializers never import models from other apps.  They work
exclusively with plain Python dicts / lists produced by the service
layer, keeping the core app decoupled from ``complaints`` and
``accounts``.
"""

from __future__ import annotations

from rest_framework import serializers


# ════════════════════════════════════════════════════════════════════
#  Dashboard Statistics
# ════════════════════════════════════════════════════════════════════

class ComplaintsByStageSerializer(serializers.Serializer):
    """
    Complaint count for one escalation stage.

    Example::

        {"stage": "wereda_first", "label": "Wereda Anti-Corruption (First Stage)", "count": 4}
    """

    stage = serializers.CharField()
    label = serializers.CharField()
    count = serializers.IntegerField()


class DashboardStatsSerializer(serializers.Serializer):
    """
    Top-level response serializer for ``GET /api/core/dashboard/``.

    Response shape::

        {
            "total_complaints": 40,
            "pending_complaints": 12,
            "in_progress_complaints": 9,
            "resolved_complaints": 15,
            "escalated_complaints": 4,
            "overdue_complaints": 3,
            "complaints_by_stage": [...]
        }
    """

    total_complaints = serializers.IntegerField(help_text="Complaints visible to the user.")
    pending_complaints = serializers.IntegerField()
    in_progress_complaints = serializers.IntegerField()
    resolved_complaints = serializers.IntegerField()
    escalated_complaints = serializers.IntegerField(
        help_text="Originals that continued as a second-stage complaint.",
    )
    overdue_complaints = serializers.IntegerField(
        help_text="Open complaints past their current stage's response due date.",
    )
    complaints_by_stage = ComplaintsByStageSerializer(many=True)


# ════════════════════════════════════════════════════════════════════
#  System Constants / Enums
# ════════════════════════════════════════════════════════════════════

class ChoiceItemSerializer(serializers.Serializer):
    """
    A single key-label pair representing one choice/enum option.

    Example::

        {"value": "pending", "label": "Pending"}
    """

    value = serializers.CharField(
        help_text="Machine-readable value to send in API requests.",
    )
    label = serializers.CharField(
        help_text="Human-readable display label for the UI.",
    )


class EscalationTimeframeSerializer(serializers.Serializer):
    handler = serializers.CharField()
    days = serializers.IntegerField()


class SystemConstantsSerializer(serializers.Serializer):
    """
    Top-level response serializer for ``GET /api/core/constants/``.

    Provides all system-wide choice enumerations so the frontend can
    dynamically build dropdowns, filters, and labels **without**
    hardcoding values.
    """

    user_roles = ChoiceItemSerializer(many=True)
    office_types = ChoiceItemSerializer(many=True)
    kifleketemas = ChoiceItemSerializer(many=True)
    complaint_stages = ChoiceItemSerializer(
        many=True,
        help_text="Escalation stages, lowest to highest.",
    )
    complaint_handlers = ChoiceItemSerializer(many=True)
    complaint_statuses = ChoiceItemSerializer(many=True)
    escalation_timeframes = EscalationTimeframeSerializer(
        many=True,
        help_text="Response window per handler; the Kentiba Biro has none.",
    )
    max_attachments = serializers.IntegerField()
