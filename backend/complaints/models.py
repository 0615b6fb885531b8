"""
Complaints app models.

Covers the complaint lifecycle from first-stage submission to a stakeholder
office, through the second-stage and anti-corruption tiers, up to the
Kentiba Biro.  Responses, escalation history and per-stage due dates are
stored as child rows so every write is a keyed insert or update rather than
a rewrite of the whole complaint.
"""

from django.conf import settings
from django.db import models

from core.models import RecordedEventModel, TimeStampedModel


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class ComplaintStage(models.TextChoices):
    """
    The seven escalation stages, in order.  A complaint only ever moves
    forward through this list (see ``complaints.workflow``).
    """

    STAKEHOLDER_FIRST = "stakeholder_first", "Stakeholder Office (First Stage)"
    STAKEHOLDER_SECOND = "stakeholder_second", "Stakeholder Office (Second Stage)"
    WEREDA_FIRST = "wereda_first", "Wereda Anti-Corruption (First Stage)"
    WEREDA_SECOND = "wereda_second", "Wereda Anti-Corruption (Second Stage)"
    KIFLEKETEMA_FIRST = "kifleketema_first", "Kifleketema Anti-Corruption (First Stage)"
    KIFLEKETEMA_SECOND = "kifleketema_second", "Kifleketema Anti-Corruption (Second Stage)"
    KENTIBA = "kentiba", "Kentiba Biro"


class ComplaintHandler(models.TextChoices):
    """
    The tier currently responsible for a complaint.  Values match the
    office values of ``accounts.models.UserRole``.
    """

    STAKEHOLDER_OFFICE = "stakeholder_office", "Stakeholder Office"
    WEREDA_ANTI_CORRUPTION = "wereda_anti_corruption", "Wereda Anti-Corruption"
    KIFLEKETEMA_ANTI_CORRUPTION = "kifleketema_anti_corruption", "Kifleketema Anti-Corruption"
    KENTIBA_BIRO = "kentiba_biro", "Kentiba Biro"


class ComplaintStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    IN_PROGRESS = "in_progress", "In Progress"
    RESOLVED = "resolved", "Resolved"
    ESCALATED = "escalated", "Escalated"


# ────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────

class Complaint(TimeStampedModel):
    """
    A citizen complaint directed to a stakeholder office.

    * ``created_at`` is the submission timestamp; ``updated_at`` moves on
      every state change.
    * ``version`` is bumped on every workflow write and compared before
      writing so two concurrent escalations cannot both apply.
    * A second-stage complaint points at its original through
      ``related_complaint``; the original points back through
      ``second_stage_complaint``.
    """

    citizen = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="complaints",
        verbose_name="Citizen",
    )
    title = models.CharField(
        max_length=255,
        verbose_name="Title",
    )
    description = models.TextField(
        verbose_name="Description",
    )
    stakeholder_office = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="received_complaints",
        verbose_name="Stakeholder Office",
    )
    location = models.CharField(
        max_length=500,
        verbose_name="Location",
    )

    # ── Workflow state ──────────────────────────────────────────────
    current_stage = models.CharField(
        max_length=30,
        choices=ComplaintStage.choices,
        default=ComplaintStage.STAKEHOLDER_FIRST,
        verbose_name="Current Stage",
        db_index=True,
    )
    current_handler = models.CharField(
        max_length=30,
        choices=ComplaintHandler.choices,
        default=ComplaintHandler.STAKEHOLDER_OFFICE,
        verbose_name="Current Handler",
        db_index=True,
    )
    status = models.CharField(
        max_length=20,
        choices=ComplaintStatus.choices,
        default=ComplaintStatus.PENDING,
        verbose_name="Status",
        db_index=True,
    )
    version = models.PositiveIntegerField(
        default=0,
        verbose_name="Version",
        help_text="Optimistic concurrency counter.",
    )

    # ── Second-stage linkage ────────────────────────────────────────
    additional_details = models.TextField(
        blank=True,
        default="",
        verbose_name="Additional Details",
    )
    related_complaint = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="follow_ups",
        verbose_name="Original Complaint",
    )
    second_stage_complaint = models.OneToOneField(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name="Second-Stage Complaint",
    )

    class Meta:
        verbose_name = "Complaint"
        verbose_name_plural = "Complaints"
        ordering = ["-updated_at"]
        indexes = [
            models.Index(fields=["current_handler", "status"], name="complaint_handler_status_idx"),
        ]

    def __str__(self):
        return f"Complaint #{self.pk} — {self.title}"

    @property
    def is_resolved(self) -> bool:
        return self.status == ComplaintStatus.RESOLVED

    def due_date_for(self, stage: str):
        """Return the due date recorded for ``stage``, or ``None``."""
        for deadline in self.deadlines.all():
            if deadline.stage == stage:
                return deadline.due_at
        return None

    @property
    def current_due_date(self):
        return self.due_date_for(self.current_stage)


class ComplaintAttachment(TimeStampedModel):
    """File uploaded with a complaint submission.  Kept in upload order."""

    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="attachments",
        verbose_name="Complaint",
    )
    file = models.FileField(
        upload_to="complaints/%Y/%m/",
        verbose_name="File",
    )

    class Meta:
        verbose_name = "Complaint Attachment"
        verbose_name_plural = "Complaint Attachments"
        ordering = ["pk"]

    def __str__(self):
        return f"Attachment #{self.pk} for Complaint #{self.complaint_id}"


class ComplaintDeadline(models.Model):
    """
    Response due date for one stage of a complaint.

    One row per (complaint, stage); setting the due date of a stage is a
    single keyed ``update_or_create``.
    """

    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="deadlines",
        verbose_name="Complaint",
    )
    stage = models.CharField(
        max_length=30,
        choices=ComplaintStage.choices,
        verbose_name="Stage",
    )
    due_at = models.DateTimeField(
        verbose_name="Response Due",
    )

    class Meta:
        verbose_name = "Complaint Deadline"
        verbose_name_plural = "Complaint Deadlines"
        constraints = [
            models.UniqueConstraint(
                fields=["complaint", "stage"],
                name="unique_deadline_per_stage",
            ),
        ]

    def __str__(self):
        return f"Complaint #{self.complaint_id} [{self.stage}] due {self.due_at:%Y-%m-%d %H:%M}"


class ComplaintResponse(TimeStampedModel):
    """
    A handler's reply to a complaint.  Append-only.

    ``internal_comment`` is for officers only and never shown to the
    citizen.
    """

    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="responses",
        verbose_name="Complaint",
    )
    responder = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="complaint_responses",
        verbose_name="Responder",
    )
    responder_role = models.CharField(
        max_length=30,
        choices=ComplaintHandler.choices,
        verbose_name="Responder Role",
    )
    body = models.TextField(
        verbose_name="Response",
    )
    internal_comment = models.TextField(
        blank=True,
        default="",
        verbose_name="Internal Comment",
    )
    status = models.CharField(
        max_length=20,
        choices=ComplaintStatus.choices,
        default=ComplaintStatus.IN_PROGRESS,
        verbose_name="Status",
    )

    class Meta:
        verbose_name = "Complaint Response"
        verbose_name_plural = "Complaint Responses"
        ordering = ["created_at", "pk"]

    def __str__(self):
        return f"Response #{self.pk} on Complaint #{self.complaint_id} by {self.responder_role}"


class EscalationHistory(RecordedEventModel):
    """
    Immutable audit trail of every escalation of a complaint.

    Within-handler escalations record the same handler on both sides.
    """

    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="escalation_history",
        verbose_name="Complaint",
    )
    from_handler = models.CharField(
        max_length=30,
        choices=ComplaintHandler.choices,
        verbose_name="From",
    )
    to_handler = models.CharField(
        max_length=30,
        choices=ComplaintHandler.choices,
        verbose_name="To",
    )
    reason = models.TextField(
        blank=True,
        default="",
        verbose_name="Reason",
    )

    class Meta:
        verbose_name = "Escalation History Entry"
        verbose_name_plural = "Escalation History"
        ordering = ["created_at", "pk"]

    def __str__(self):
        return (
            f"Complaint #{self.complaint_id}: "
            f"{self.from_handler} → {self.to_handler}"
        )


class ComplaintResolution(RecordedEventModel):
    """
    Snapshot of the response the citizen accepted.  At most one per
    complaint.
    """

    complaint = models.OneToOneField(
        Complaint,
        on_delete=models.CASCADE,
        related_name="resolution",
        verbose_name="Complaint",
    )
    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="resolved_complaints",
        verbose_name="Resolved By",
    )
    resolver_role = models.CharField(
        max_length=30,
        choices=ComplaintHandler.choices,
        verbose_name="Resolver Role",
    )
    resolution = models.TextField(
        verbose_name="Resolution",
    )

    class Meta:
        verbose_name = "Complaint Resolution"
        verbose_name_plural = "Complaint Resolutions"

    def __str__(self):
        return f"Resolution of Complaint #{self.complaint_id}"
