"""
Performance app Service Layer.

All reads and writes of ``OfficePerformance`` go through this module.
The complaints engine calls the ``record_*`` methods from inside its own
atomic operations, so a metric update commits or rolls back together with
the complaint change that caused it.

Architecture
------------
- ``OfficePerformanceService`` — locked get-or-create and the three
                                 counter updates (received, escalated,
                                 resolved).
- ``PerformanceQueryService``  — role-scoped reads for the API.
"""

from __future__ import annotations

import datetime
import logging
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.db.models import F, QuerySet
from django.utils import timezone

from accounts.models import ADMIN_ROLES, OFFICE_ROLES, UserRole
from core.domain.access import require_role
from core.domain.exceptions import AuthorizationError, NotFoundError

from .models import FailureRecord, OfficePerformance

if TYPE_CHECKING:
    from complaints.models import Complaint

User = get_user_model()
logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Metric updates
# ═══════════════════════════════════════════════════════════════════


class OfficePerformanceService:
    """
    Counter updates for office performance records.

    Every method must run inside the caller's ``transaction.atomic`` block;
    the record is fetched with ``select_for_update`` so concurrent
    read-modify-write updates of the running mean serialise on the row.
    """

    @staticmethod
    def get_locked(office: User, office_role: str) -> OfficePerformance:
        """Fetch (creating on first use) and lock the record for ``(office, office_role)``."""
        record, created = (
            OfficePerformance.objects
            .select_for_update()
            .get_or_create(office=office, office_role=office_role)
        )
        if created:
            logger.info(
                "Created performance record office=%s role=%s", office.pk, office_role,
            )
        return record

    @staticmethod
    def record_new_complaint(office: User, office_role: str) -> OfficePerformance:
        """Increment ``total_complaints`` for ``(office, office_role)``."""
        record = OfficePerformanceService.get_locked(office, office_role)
        OfficePerformance.objects.filter(pk=record.pk).update(
            total_complaints=F("total_complaints") + 1,
        )
        record.refresh_from_db()
        return record

    @staticmethod
    def resolve_penalised_office(complaint: Complaint, from_handler: str) -> User | None:
        """
        Pick the office account charged with a cross-handler escalation.

        Steps
        -----
        1. Stakeholder office losing the complaint → the complaint's own
           stakeholder office.
        2. Any anti-corruption tier → the active user with the lowest
           primary key holding that role.  There is no per-complaint
           officer assignment above the stakeholder level, so this choice
           is arbitrary.
        3. No such user → ``None``.
        """
        if from_handler == UserRole.STAKEHOLDER_OFFICE:
            return complaint.stakeholder_office
        return (
            User.objects
            .filter(role=from_handler, is_active=True)
            .order_by("pk")
            .first()
        )

    @staticmethod
    def record_escalation_failure(
        complaint: Complaint,
        *,
        from_handler: str,
        from_stage: str,
        to_stage: str,
        reason: str,
        now: datetime.datetime | None = None,
    ) -> OfficePerformance | None:
        """
        Charge a cross-handler escalation to the losing office.

        Increments ``escalated_complaints`` by one and appends one
        ``FailureRecord``.  When no office can be attributed the update is
        skipped and a warning is logged; the escalation itself still
        succeeds.
        """
        office = OfficePerformanceService.resolve_penalised_office(complaint, from_handler)
        if office is None:
            logger.warning(
                "No active %s account to charge escalation of complaint %s; "
                "performance update skipped",
                from_handler, complaint.pk,
            )
            return None

        record = OfficePerformanceService.get_locked(office, from_handler)
        OfficePerformance.objects.filter(pk=record.pk).update(
            escalated_complaints=F("escalated_complaints") + 1,
        )
        FailureRecord.objects.create(
            performance=record,
            complaint=complaint,
            escalated_from=from_stage,
            escalated_to=to_stage,
            reason=reason,
            created_at=now or timezone.now(),
        )
        record.refresh_from_db()
        logger.info(
            "Charged escalation of complaint %s to office=%s role=%s",
            complaint.pk, office.pk, from_handler,
        )
        return record

    @staticmethod
    def record_resolution(
        office: User,
        office_role: str,
        resolution_days: float,
    ) -> OfficePerformance:
        """
        Count one resolution and fold ``resolution_days`` into the mean.

        With ``n`` the new resolved count, the mean becomes
        ``(old_mean * (n - 1) + resolution_days) / n``.
        """
        record = OfficePerformanceService.get_locked(office, office_role)
        resolved = record.resolved_complaints + 1
        record.average_resolution_time = (
            record.average_resolution_time * (resolved - 1) + resolution_days
        ) / resolved
        record.resolved_complaints = resolved
        record.save(update_fields=[
            "resolved_complaints", "average_resolution_time", "updated_at",
        ])
        return record


# ═══════════════════════════════════════════════════════════════════
#  Queries
# ═══════════════════════════════════════════════════════════════════


class PerformanceQueryService:
    """Read access to performance records."""

    @staticmethod
    def list_records(
        requesting_user: User,
        *,
        office_role: str | None = None,
    ) -> QuerySet[OfficePerformance]:
        """
        All performance records, optionally limited to one role.

        Only the anti-corruption tiers and the Kentiba Biro may list.
        """
        require_role(
            requesting_user,
            *ADMIN_ROLES,
            message="Only anti-corruption officers and the Kentiba Biro can view office performance.",
        )
        qs = OfficePerformance.objects.select_related("office")
        if office_role:
            qs = qs.filter(office_role=office_role)
        return qs

    @staticmethod
    def get_record(requesting_user: User, pk: int) -> OfficePerformance:
        """
        One record with its failure records.

        Visible to the administrator tiers and to the office it describes.
        """
        try:
            record = (
                OfficePerformance.objects
                .select_related("office")
                .prefetch_related("failure_records")
                .get(pk=pk)
            )
        except OfficePerformance.DoesNotExist:
            raise NotFoundError("Performance record not found.")

        if requesting_user.role not in ADMIN_ROLES and record.office_id != requesting_user.pk:
            raise AuthorizationError("You cannot view this performance record.")
        return record

    @staticmethod
    def records_for_office(requesting_user: User) -> QuerySet[OfficePerformance]:
        """The requesting office's own records."""
        require_role(
            requesting_user,
            *OFFICE_ROLES,
            message="Only office accounts have performance records.",
        )
        return (
            OfficePerformance.objects
            .filter(office=requesting_user)
            .select_related("office")
            .prefetch_related("failure_records")
        )
