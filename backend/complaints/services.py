"""
Complaints app Service Layer.

This module is the **single source of truth** for all business logic
in the ``complaints`` app.  Views must remain thin: validate input via
serializers, call a service method, and return the result wrapped in
a DRF ``Response``.

Architecture
------------
- ``ComplaintQueryService``       — Role-scoped listing, detail, history.
- ``ComplaintSubmissionService``  — First-stage and second-stage submission.
- ``ComplaintEscalationService``  — Citizen-initiated escalation.
- ``ComplaintResponseService``    — Handler responses and citizen acceptance.

Escalation Overview
-------------------
::

  stakeholder_first ─┬─(escalate)──────────→ stakeholder_second
                     └─(second-stage child)→ stakeholder_second
  stakeholder_second ──(escalate)──────────→ wereda_first          [charged]
  wereda_first ──────┬─(escalate)──────────→ wereda_second
                     └─(second-stage child)→ wereda_second
  wereda_second ───────(escalate)──────────→ kifleketema_first     [charged]
  kifleketema_first ───(escalate)──────────→ kifleketema_second
  kifleketema_second ──(escalate)──────────→ kentiba               [charged]

  * Any stage except kentiba: handler responds → in_progress;
    citizen accepts → resolved.
  * "charged" transitions cross to a new handler tier and count as an
    escalation failure of the office losing the complaint.

The transition rows themselves live in ``complaints.workflow``.

Every mutating method is wrapped in ``atomic_operation``: the complaint
row is locked, compared against the caller's version, and written with a
version compare-and-swap together with its history and performance
updates, or not at all.
"""

from __future__ import annotations

import datetime
import logging
import math
from typing import Any, Iterable

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import UploadedFile
from django.db.models import QuerySet
from django.utils import timezone

from accounts.models import UserRole
from core.constants import (
    DEFAULT_CROSS_HANDLER_REASON,
    DEFAULT_PAGE_SIZE,
    DEFAULT_WITHIN_HANDLER_REASON,
    MAX_ATTACHMENTS_PER_COMPLAINT,
    MAX_PAGE_SIZE,
    SECOND_STAGE_REASON,
)
from core.domain.access import apply_role_scope, require_role
from core.domain.exceptions import (
    AlreadyResolvedError,
    AuthorizationError,
    EscalationNotAllowedError,
    InvalidTransition,
    NotFoundError,
    ValidationError,
)
from core.domain.transactions import atomic_operation, lock_for_update, save_versioned
from performance.services import OfficePerformanceService

from . import workflow
from .models import (
    Complaint,
    ComplaintAttachment,
    ComplaintDeadline,
    ComplaintHandler,
    ComplaintResolution,
    ComplaintResponse,
    ComplaintStage,
    ComplaintStatus,
    EscalationHistory,
)

User = get_user_model()
logger = logging.getLogger(__name__)

_SECONDS_PER_DAY = 24 * 60 * 60


# ═══════════════════════════════════════════════════════════════════
#  Role scoping
# ═══════════════════════════════════════════════════════════════════

#: Which complaints each role can see.
COMPLAINT_SCOPE_RULES = {
    UserRole.CITIZEN: lambda qs, u: qs.filter(citizen=u),
    UserRole.STAKEHOLDER_OFFICE: lambda qs, u: qs.filter(stakeholder_office=u),
    UserRole.WEREDA_ANTI_CORRUPTION: lambda qs, u: qs.filter(
        current_handler=ComplaintHandler.WEREDA_ANTI_CORRUPTION,
    ),
    UserRole.KIFLEKETEMA_ANTI_CORRUPTION: lambda qs, u: qs.filter(
        current_handler=ComplaintHandler.KIFLEKETEMA_ANTI_CORRUPTION,
    ),
    UserRole.KENTIBA_BIRO: lambda qs, u: qs,
}


def _set_due_date(complaint: Complaint, stage: str, due_at: datetime.datetime) -> None:
    ComplaintDeadline.objects.update_or_create(
        complaint=complaint,
        stage=stage,
        defaults={"due_at": due_at},
    )


def _store_attachments(complaint: Complaint, files: Iterable[UploadedFile]) -> None:
    for upload in files:
        ComplaintAttachment.objects.create(complaint=complaint, file=upload)


def _check_attachment_count(files: list[UploadedFile]) -> None:
    if len(files) > MAX_ATTACHMENTS_PER_COMPLAINT:
        raise ValidationError(
            f"At most {MAX_ATTACHMENTS_PER_COMPLAINT} attachments can be uploaded."
        )


# ═══════════════════════════════════════════════════════════════════
#  Query Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintQueryService:
    """Read-side operations: scoped listing, detail, and history."""

    @staticmethod
    def base_queryset() -> QuerySet[Complaint]:
        return (
            Complaint.objects
            .select_related("citizen", "stakeholder_office", "resolution")
            .prefetch_related(
                "deadlines",
                "attachments",
                "responses__responder",
                "escalation_history",
            )
        )

    @staticmethod
    def scoped_queryset(requesting_user: User) -> QuerySet[Complaint]:
        return apply_role_scope(
            ComplaintQueryService.base_queryset(),
            requesting_user,
            scope_rules=COMPLAINT_SCOPE_RULES,
        )

    @staticmethod
    def list_complaints(
        requesting_user: User,
        *,
        status: str | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> tuple[QuerySet[Complaint], dict[str, int]]:
        """
        Return one page of the complaints visible to ``requesting_user``.

        Parameters
        ----------
        status : str | None
            A ``ComplaintStatus`` value, or ``"all"`` / ``None`` for no
            filter.
        page, limit : int
            1-based page number and page size.

        Returns
        -------
        tuple
            ``(page_queryset, {"total", "page", "limit", "pages"})`` with
            the page ordered by most recently updated first.
        """
        if page < 1 or limit < 1:
            raise ValidationError("'page' and 'limit' must be positive integers.")
        limit = min(limit, MAX_PAGE_SIZE)

        qs = ComplaintQueryService.scoped_queryset(requesting_user)
        if status and status != "all":
            if status not in ComplaintStatus.values:
                raise ValidationError(f"Unknown status '{status}'.")
            qs = qs.filter(status=status)

        qs = qs.order_by("-updated_at", "-pk")
        total = qs.count()
        offset = (page - 1) * limit
        pagination = {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit),
        }
        return qs[offset:offset + limit], pagination

    @staticmethod
    def get_complaint_detail(requesting_user: User, complaint_pk: int) -> Complaint:
        """
        Fetch one complaint the user is allowed to see.

        Raises ``NotFoundError`` when it does not exist and
        ``AuthorizationError`` when it exists outside the user's scope.
        """
        if not Complaint.objects.filter(pk=complaint_pk).exists():
            raise NotFoundError("Complaint not found.")
        try:
            return ComplaintQueryService.scoped_queryset(requesting_user).get(pk=complaint_pk)
        except Complaint.DoesNotExist:
            raise AuthorizationError("You do not have access to this complaint.")

    @staticmethod
    def get_escalation_history(
        requesting_user: User,
        complaint_pk: int,
    ) -> QuerySet[EscalationHistory]:
        complaint = ComplaintQueryService.get_complaint_detail(requesting_user, complaint_pk)
        return complaint.escalation_history.order_by("created_at", "pk")


# ═══════════════════════════════════════════════════════════════════
#  Submission Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintSubmissionService:
    """Citizen-side creation of first-stage and second-stage complaints."""

    @staticmethod
    @atomic_operation
    def submit_complaint(
        validated_data: dict[str, Any],
        requesting_user: User,
        files: Iterable[UploadedFile] = (),
        *,
        now: datetime.datetime | None = None,
    ) -> Complaint:
        """
        File a new complaint with a stakeholder office.

        Parameters
        ----------
        validated_data : dict
            ``stakeholder_office`` (user pk), ``title``, ``description``,
            ``location``.
        requesting_user : User
            Must be a citizen.
        files : iterable of UploadedFile
            Up to ``MAX_ATTACHMENTS_PER_COMPLAINT`` attachments.

        Returns
        -------
        Complaint
            Created at ``stakeholder_first`` / ``stakeholder_office`` /
            ``pending`` with its first due date set.

        Raises
        ------
        AuthorizationError
            The user is not a citizen.
        NotFoundError
            No approved, active stakeholder office has that pk.
        ValidationError
            Too many attachments.
        """
        require_role(
            requesting_user,
            UserRole.CITIZEN,
            message="Only citizens can submit complaints.",
        )
        files = list(files)
        _check_attachment_count(files)

        office = (
            User.objects
            .filter(
                pk=validated_data["stakeholder_office"],
                role=UserRole.STAKEHOLDER_OFFICE,
                is_approved=True,
                is_active=True,
            )
            .first()
        )
        if office is None:
            raise NotFoundError("Stakeholder office not found.")

        now = now or timezone.now()
        complaint = Complaint.objects.create(
            citizen=requesting_user,
            stakeholder_office=office,
            title=validated_data["title"],
            description=validated_data["description"],
            location=validated_data["location"],
            current_stage=ComplaintStage.STAKEHOLDER_FIRST,
            current_handler=ComplaintHandler.STAKEHOLDER_OFFICE,
            status=ComplaintStatus.PENDING,
        )
        _set_due_date(
            complaint,
            ComplaintStage.STAKEHOLDER_FIRST,
            now + workflow.timeframe_for(ComplaintHandler.STAKEHOLDER_OFFICE),
        )
        _store_attachments(complaint, files)

        OfficePerformanceService.record_new_complaint(office, UserRole.STAKEHOLDER_OFFICE)

        logger.info(
            "Complaint %s submitted by citizen=%s to office=%s",
            complaint.pk, requesting_user.pk, office.pk,
        )
        return complaint

    @staticmethod
    @atomic_operation
    def submit_second_stage(
        original_pk: int,
        validated_data: dict[str, Any],
        requesting_user: User,
        files: Iterable[UploadedFile] = (),
        *,
        now: datetime.datetime | None = None,
    ) -> Complaint:
        """
        Open a second-stage complaint after an unsatisfactory first-stage
        response.

        Preconditions
        -------------
        The original belongs to the citizen, sits at ``stakeholder_first``
        or ``wereda_first``, is ``in_progress`` and has at least one
        response.

        Steps
        -----
        1. Lock the original (``NotFoundError`` if missing or not owned).
        2. Check stage, status and responses (``ValidationError``).
        3. Create the child at the matching second stage with the same
           office and handler, status ``pending``, a fresh due date, and a
           link back to the original.  Title, description and location
           default to the original's.
        4. Point the original at the child, advance its stage and mark it
           ``escalated``; log one history entry on the original.
        5. Count the child as a new complaint for the stakeholder office
           under the second stage's handler.

        Returns
        -------
        Complaint
            The new child complaint.
        """
        files = list(files)
        _check_attachment_count(files)

        original = (
            Complaint.objects
            .select_for_update()
            .filter(pk=original_pk, citizen=requesting_user)
            .first()
        )
        if original is None:
            raise NotFoundError("Complaint not found.")

        new_stage = workflow.SECOND_STAGE_OF.get(original.current_stage)
        if new_stage is None:
            raise ValidationError(
                "A second-stage complaint can only follow a first-stage complaint."
            )
        if original.status != ComplaintStatus.IN_PROGRESS:
            raise ValidationError(
                "A second-stage complaint requires a first-stage complaint that is in progress."
            )
        if not original.responses.exists():
            raise ValidationError(
                "A second-stage complaint requires a response to the original complaint."
            )

        now = now or timezone.now()
        handler = workflow.STAGE_HANDLERS[new_stage]
        child = Complaint.objects.create(
            citizen=requesting_user,
            stakeholder_office=original.stakeholder_office,
            title=validated_data.get("title") or original.title,
            description=validated_data.get("description") or original.description,
            location=validated_data.get("location") or original.location,
            additional_details=validated_data.get("additional_details", ""),
            current_stage=new_stage,
            current_handler=handler,
            status=ComplaintStatus.PENDING,
            related_complaint=original,
        )
        _set_due_date(child, new_stage, now + workflow.timeframe_for(handler))
        _store_attachments(child, files)

        original.second_stage_complaint = child
        original.current_stage = new_stage
        original.status = ComplaintStatus.ESCALATED
        save_versioned(
            original,
            update_fields=["second_stage_complaint", "current_stage", "status"],
        )
        EscalationHistory.objects.create(
            complaint=original,
            from_handler=handler,
            to_handler=workflow.TRANSITIONS[new_stage].next_handler,
            reason=SECOND_STAGE_REASON,
            created_at=now,
        )

        OfficePerformanceService.record_new_complaint(original.stakeholder_office, handler)

        logger.info(
            "Second-stage complaint %s opened from complaint %s at %s",
            child.pk, original.pk, new_stage,
        )
        return child


# ═══════════════════════════════════════════════════════════════════
#  Escalation Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintEscalationService:
    """
    Citizen-initiated escalation through ``workflow.TRANSITIONS``.

    Design Pattern: State Machine + Command
    ----------------------------------------
    The command is ``(complaint, actor, reason)``.  Guards run in a fixed
    order so each failure maps to exactly one error; the transition row
    supplies every effect.
    """

    @staticmethod
    @atomic_operation
    def escalate(
        complaint_pk: int,
        requesting_user: User,
        *,
        reason: str = "",
        expected_version: int | None = None,
        now: datetime.datetime | None = None,
    ) -> Complaint:
        """
        Move a complaint one stage up.

        Guards (in order)
        -----------------
        1. Complaint exists                      → ``NotFoundError``
        2. Actor is the owning citizen           → ``AuthorizationError``
        3. Complaint is not resolved             → ``AlreadyResolvedError``
        4. Stage is not terminal                 → ``TerminalStageError``
        5. No second-stage child exists          → ``EscalationNotAllowedError``
        6. Due date passed, or more responses
           than the stage index                  → ``EscalationNotAllowedError``

        Effects
        -------
        * Stage / handler from the transition row, status ``pending``.
        * Due date of the new stage set to ``now + timeframe`` when the
          new handler has a timeframe.
        * One ``EscalationHistory`` entry.
        * Cross-handler only: the losing office is charged one escalation.
        """
        complaint = lock_for_update(Complaint, complaint_pk, expected_version=expected_version)

        if complaint.citizen_id != requesting_user.pk:
            raise AuthorizationError("Only the citizen who filed the complaint can escalate it.")
        if complaint.status == ComplaintStatus.RESOLVED:
            raise AlreadyResolvedError()

        transition = workflow.next_transition(complaint.current_stage)

        if complaint.second_stage_complaint_id is not None:
            raise EscalationNotAllowedError(
                "This complaint continues as a second-stage complaint; escalate that one instead."
            )

        now = now or timezone.now()
        eligible = workflow.can_escalate(
            stage=complaint.current_stage,
            due_at=complaint.due_date_for(complaint.current_stage),
            response_count=complaint.responses.count(),
            status=complaint.status,
            now=now,
        )
        if not eligible:
            raise EscalationNotAllowedError()

        from_stage = complaint.current_stage
        from_handler = complaint.current_handler

        complaint.current_stage = transition.next_stage
        complaint.current_handler = transition.next_handler
        complaint.status = ComplaintStatus.PENDING
        save_versioned(
            complaint,
            update_fields=["current_stage", "current_handler", "status"],
        )

        if transition.due_timeframe is not None:
            _set_due_date(complaint, transition.next_stage, now + transition.due_timeframe)

        if transition.crosses_handler:
            reason = reason or DEFAULT_CROSS_HANDLER_REASON
            to_handler = transition.next_handler
        else:
            reason = reason or DEFAULT_WITHIN_HANDLER_REASON
            to_handler = from_handler
        EscalationHistory.objects.create(
            complaint=complaint,
            from_handler=from_handler,
            to_handler=to_handler,
            reason=reason,
            created_at=now,
        )

        if transition.crosses_handler:
            OfficePerformanceService.record_escalation_failure(
                complaint,
                from_handler=from_handler,
                from_stage=from_stage,
                to_stage=transition.next_stage,
                reason=reason,
                now=now,
            )

        logger.info(
            "Complaint %s escalated %s → %s by citizen=%s",
            complaint.pk, from_stage, transition.next_stage, requesting_user.pk,
        )
        return complaint


# ═══════════════════════════════════════════════════════════════════
#  Response Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintResponseService:
    """Handler responses and citizen acceptance."""

    @staticmethod
    @atomic_operation
    def respond(
        complaint_pk: int,
        validated_data: dict[str, Any],
        requesting_user: User,
    ) -> ComplaintResponse:
        """
        Record the current handler's response.

        Only a user whose role equals the complaint's current handler may
        respond; a stakeholder office must also be the office the complaint
        was filed with.  The complaint moves to ``in_progress``.

        Raises
        ------
        NotFoundError, AuthorizationError, ValidationError (empty body),
        AlreadyResolvedError, InvalidTransition (the complaint
        continues as a second-stage complaint).
        """
        complaint = lock_for_update(Complaint, complaint_pk)

        if requesting_user.role != complaint.current_handler:
            raise AuthorizationError("You are not the current handler of this complaint.")
        if (
            complaint.current_handler == ComplaintHandler.STAKEHOLDER_OFFICE
            and complaint.stakeholder_office_id != requesting_user.pk
        ):
            raise AuthorizationError("This complaint was filed with a different office.")

        body = (validated_data.get("body") or "").strip()
        if not body:
            raise ValidationError("Response text is required.")
        if complaint.status == ComplaintStatus.RESOLVED:
            raise AlreadyResolvedError("Cannot respond to a resolved complaint.")
        if complaint.second_stage_complaint_id is not None:
            raise InvalidTransition(
                "This complaint continues as a second-stage complaint; respond to that one instead."
            )

        response = ComplaintResponse.objects.create(
            complaint=complaint,
            responder=requesting_user,
            responder_role=complaint.current_handler,
            body=body,
            internal_comment=validated_data.get("internal_comment", ""),
            status=ComplaintStatus.IN_PROGRESS,
        )
        complaint.status = ComplaintStatus.IN_PROGRESS
        save_versioned(complaint, update_fields=["status"])

        logger.info(
            "Complaint %s answered by %s user=%s",
            complaint.pk, complaint.current_handler, requesting_user.pk,
        )
        return response

    @staticmethod
    @atomic_operation
    def accept(
        complaint_pk: int,
        requesting_user: User,
        *,
        expected_version: int | None = None,
        now: datetime.datetime | None = None,
    ) -> Complaint:
        """
        Citizen accepts the latest response; the complaint is resolved.

        The latest response becomes the resolution, and its responder's
        performance record counts one resolution with the days elapsed
        since submission.
        """
        complaint = lock_for_update(Complaint, complaint_pk, expected_version=expected_version)

        if complaint.citizen_id != requesting_user.pk:
            raise AuthorizationError("Only the citizen who filed the complaint can accept a response.")
        if complaint.status == ComplaintStatus.RESOLVED:
            raise AlreadyResolvedError("Complaint is already resolved.")
        if complaint.second_stage_complaint_id is not None:
            raise InvalidTransition(
                "This complaint continues as a second-stage complaint; accept a response there instead."
            )

        latest = complaint.responses.select_related("responder").order_by("-created_at", "-pk").first()
        if latest is None:
            raise ValidationError("There is no response to accept.")

        now = now or timezone.now()
        complaint.status = ComplaintStatus.RESOLVED
        save_versioned(complaint, update_fields=["status"])
        ComplaintResolution.objects.create(
            complaint=complaint,
            resolved_by=latest.responder,
            resolver_role=latest.responder_role,
            resolution=latest.body,
            created_at=now,
        )

        elapsed_days = (now - complaint.created_at).total_seconds() / _SECONDS_PER_DAY
        OfficePerformanceService.record_resolution(
            latest.responder, latest.responder_role, elapsed_days,
        )

        logger.info(
            "Complaint %s resolved by %s after %.2f day(s)",
            complaint.pk, latest.responder_role, elapsed_days,
        )
        return complaint
