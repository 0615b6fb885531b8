"""
Performance app models.

One ``OfficePerformance`` row per (office account, role) pair tracks how
many complaints the office received, resolved and lost to escalation,
plus the running mean resolution time.  Escalation failures are kept as
an append-only list of ``FailureRecord`` rows.
"""

from django.conf import settings
from django.db import models

from core.models import RecordedEventModel, TimeStampedModel


class OfficePerformance(TimeStampedModel):
    """
    Complaint-handling metrics for one office account.

    Counters only ever increase.  ``average_resolution_time`` is measured
    in days and is recomputed as a running mean under a row lock.
    """

    office = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="performance_records",
        verbose_name="Office",
    )
    office_role = models.CharField(
        max_length=30,
        verbose_name="Office Role",
        db_index=True,
    )
    total_complaints = models.PositiveIntegerField(
        default=0,
        verbose_name="Total Complaints",
    )
    resolved_complaints = models.PositiveIntegerField(
        default=0,
        verbose_name="Resolved Complaints",
    )
    escalated_complaints = models.PositiveIntegerField(
        default=0,
        verbose_name="Escalated Complaints",
    )
    average_resolution_time = models.FloatField(
        default=0.0,
        verbose_name="Average Resolution Time (days)",
    )

    class Meta:
        verbose_name = "Office Performance"
        verbose_name_plural = "Office Performance"
        ordering = ["office_role", "office_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["office", "office_role"],
                name="unique_performance_per_office_role",
            ),
        ]

    def __str__(self):
        return f"Performance of {self.office} as {self.office_role}"

    @property
    def resolution_rate(self) -> float:
        """Resolved / total as a percentage (0 when nothing was received)."""
        if not self.total_complaints:
            return 0.0
        return round(self.resolved_complaints * 100 / self.total_complaints, 2)


class FailureRecord(RecordedEventModel):
    """A complaint that escalated away from an office.  Append-only."""

    performance = models.ForeignKey(
        OfficePerformance,
        on_delete=models.CASCADE,
        related_name="failure_records",
        verbose_name="Performance",
    )
    complaint = models.ForeignKey(
        "complaints.Complaint",
        on_delete=models.CASCADE,
        related_name="failure_records",
        verbose_name="Complaint",
    )
    escalated_from = models.CharField(
        max_length=30,
        verbose_name="Escalated From Stage",
    )
    escalated_to = models.CharField(
        max_length=30,
        verbose_name="Escalated To Stage",
    )
    reason = models.TextField(
        blank=True,
        default="",
        verbose_name="Reason",
    )

    class Meta:
        verbose_name = "Failure Record"
        verbose_name_plural = "Failure Records"
        ordering = ["-created_at", "-pk"]

    def __str__(self):
        return (
            f"Complaint #{self.complaint_id}: "
            f"{self.escalated_from} → {self.escalated_to}"
        )
