"""
Core app services — **Service Layer**.

Contains cross-app aggregation logic.  Views delegate all business logic
to the service classes defined here, keeping views thin and ensuring
testability.

╔══════════════════════════════════════════════════════════════════════╗
║  CROSS-APP IMPORT RULEBOOK                                         ║
║                                                                    ║
║  The core app is the ONLY app allowed to aggregate models from     ║
║  other apps.  To prevent circular imports at module load time:     ║
║                                                                    ║
║  1. NEVER import models from other apps at the **module level**.   ║
║     Always import inside the method/function that needs them.      ║
║                                                                    ║
║  2. Preferred pattern:                                             ║
║       from django.apps import apps                                 ║
║       Complaint = apps.get_model("complaints", "Complaint")        ║
║                                                                    ║
║  3. Choice/enum classes (e.g. ComplaintStage, UserRole) live in    ║
║     the respective app's ``models.py`` alongside the models.       ║
║     Import them lazily inside methods too.                         ║
║                                                                    ║
║  4. For aggregations, prefer Django ORM ``.aggregate()`` and       ║
║     ``.values().annotate()`` over Python-side loops.               ║
╚══════════════════════════════════════════════════════════════════════╝
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from django.apps import apps
from django.db.models import Count, F, Q, QuerySet
from django.utils import timezone

from core.constants import ESCALATION_TIMEFRAMES, MAX_ATTACHMENTS_PER_COMPLAINT
from core.domain.access import apply_role_scope
from core.domain.exceptions import AuthorizationError

if TYPE_CHECKING:
    from accounts.models import User


# ════════════════════════════════════════════════════════════════════
#  Dashboard Aggregation Service
# ════════════════════════════════════════════════════════════════════

class DashboardAggregationService:
    """
    Produces an aggregated statistics dict consumed by
    ``DashboardStatsSerializer``.

    The statistics are **role-aware** and use the same visibility rules
    as the complaint list:

    * **Kentiba Biro**: every complaint.
    * **Wereda / Kifleketema officers**: complaints their tier currently
      handles.
    * **Stakeholder offices**: complaints filed with them.
    * **Citizens**: refused; they use the complaint list instead.
    """

    def __init__(self, user: User) -> None:
        self.user = user

    # ── Public API ──────────────────────────────────────────────────

    def get_stats(self) -> dict[str, Any]:
        """Return the full dashboard statistics dictionary."""
        from accounts.models import UserRole
        from complaints.models import ComplaintStatus

        if self.user.role == UserRole.CITIZEN:
            raise AuthorizationError("Dashboard statistics are available to office accounts only.")

        complaint_qs = self._get_complaint_queryset()

        aggregates = complaint_qs.aggregate(
            total_complaints=Count("id"),
            pending_complaints=Count("id", filter=Q(status=ComplaintStatus.PENDING)),
            in_progress_complaints=Count("id", filter=Q(status=ComplaintStatus.IN_PROGRESS)),
            resolved_complaints=Count("id", filter=Q(status=ComplaintStatus.RESOLVED)),
            escalated_complaints=Count("id", filter=Q(status=ComplaintStatus.ESCALATED)),
        )

        return {
            **aggregates,
            "overdue_complaints": self._get_overdue_count(complaint_qs),
            "complaints_by_stage": self._get_complaints_by_stage(complaint_qs),
        }

    # ── Private helpers ─────────────────────────────────────────────

    def _get_complaint_queryset(self) -> QuerySet:
        """Return a ``Complaint`` queryset scoped to the requesting user's role."""
        from complaints.services import COMPLAINT_SCOPE_RULES

        Complaint = apps.get_model("complaints", "Complaint")
        return apply_role_scope(
            Complaint.objects.all(),
            self.user,
            scope_rules=COMPLAINT_SCOPE_RULES,
        )

    def _get_overdue_count(self, complaint_qs: QuerySet) -> int:
        """Unresolved complaints whose current stage's due date has passed."""
        from complaints.models import ComplaintStatus

        return (
            complaint_qs
            .exclude(status__in=[ComplaintStatus.RESOLVED, ComplaintStatus.ESCALATED])
            .filter(
                deadlines__stage=F("current_stage"),
                deadlines__due_at__lt=timezone.now(),
            )
            .count()
        )

    def _get_complaints_by_stage(self, complaint_qs: QuerySet) -> list[dict[str, Any]]:
        """Group ``complaint_qs`` by stage, in escalation order."""
        from complaints.models import ComplaintStage
        from complaints.workflow import STAGE_ORDER

        counts = dict(
            complaint_qs
            .order_by()
            .values_list("current_stage")
            .annotate(count=Count("id"))
        )
        labels = dict(ComplaintStage.choices)
        return [
            {"stage": stage, "label": labels[stage], "count": counts.get(stage, 0)}
            for stage in STAGE_ORDER
        ]


# ═══════════════════════════════════════════════════════════════════
#  System Constants Service
# ═══════════════════════════════════════════════════════════════════

class SystemConstantsService:
    """
    Gathers all system-wide choice enumerations into a single dict for
    the frontend.

    This service is **stateless** — it does not depend on the requesting
    user.  All constants are public information needed by the frontend
    to render dropdowns and labels.
    """

    @staticmethod
    def get_constants() -> dict[str, Any]:
        """Return all system constants as a dict."""
        from accounts.models import Kifleketema, OfficeType, UserRole
        from complaints.models import ComplaintHandler, ComplaintStage, ComplaintStatus

        to_list = SystemConstantsService._choices_to_list

        return {
            "user_roles": to_list(UserRole),
            "office_types": to_list(OfficeType),
            "kifleketemas": to_list(Kifleketema),
            "complaint_stages": to_list(ComplaintStage),
            "complaint_handlers": to_list(ComplaintHandler),
            "complaint_statuses": to_list(ComplaintStatus),
            "escalation_timeframes": [
                {"handler": handler, "days": window.days}
                for handler, window in ESCALATION_TIMEFRAMES.items()
            ],
            "max_attachments": MAX_ATTACHMENTS_PER_COMPLAINT,
        }

    @staticmethod
    def _choices_to_list(
        choices_class: type,
    ) -> list[dict[str, str]]:
        """
        Convert a Django ``TextChoices`` class to a list of
        ``{"value": ..., "label": ...}`` dicts.
        """
        return [
            {"value": str(value), "label": str(label)}
            for value, label in choices_class.choices
        ]
