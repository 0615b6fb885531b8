"""
Performance app serializers.

Read-only representations of office performance records.
"""

from __future__ import annotations

from rest_framework import serializers

from accounts.serializers import UserSummarySerializer

from .models import FailureRecord, OfficePerformance


class FailureRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = FailureRecord
        fields = ["id", "complaint", "escalated_from", "escalated_to", "reason", "created_at"]
        read_only_fields = fields


class OfficePerformanceSerializer(serializers.ModelSerializer):
    """Counters and running mean for one (office, role) pair."""

    office = UserSummarySerializer(read_only=True)
    resolution_rate = serializers.FloatField(read_only=True)

    class Meta:
        model = OfficePerformance
        fields = [
            "id",
            "office",
            "office_role",
            "total_complaints",
            "resolved_complaints",
            "escalated_complaints",
            "average_resolution_time",
            "resolution_rate",
            "updated_at",
        ]
        read_only_fields = fields


class OfficePerformanceDetailSerializer(OfficePerformanceSerializer):
    failure_records = FailureRecordSerializer(many=True, read_only=True)

    class Meta(OfficePerformanceSerializer.Meta):
        fields = OfficePerformanceSerializer.Meta.fields + ["failure_records"]
        read_only_fields = fields


class PerformanceFilterSerializer(serializers.Serializer):
    office_role = serializers.CharField(required=False, allow_blank=False)
