"""
Service-level tests for ``ComplaintEscalationService.escalate``.

Covers the guard order, the timed and response-count eligibility
scenarios, cross- vs within-handler effects, office attribution and the
concurrency / store-failure behaviour.
"""

from __future__ import annotations

import logging
from unittest import mock

import pytest
from django.db import DatabaseError

from complaints import workflow
from complaints.models import (
    Complaint,
    ComplaintDeadline,
    ComplaintHandler,
    ComplaintStage,
    ComplaintStatus,
    EscalationHistory,
)
from complaints.services import ComplaintEscalationService, ComplaintResponseService
from core.domain.exceptions import (
    AlreadyResolvedError,
    AuthorizationError,
    ConcurrentModificationError,
    EscalationNotAllowedError,
    NotFoundError,
    StoreError,
    TerminalStageError,
)
from core.domain.transactions import save_versioned
from performance.models import FailureRecord, OfficePerformance

from .conftest import T0, days

pytestmark = pytest.mark.django_db

escalate = ComplaintEscalationService.escalate


def _walk_to(complaint, citizen, stage, start=T0):
    """Escalate on expired due dates until ``complaint`` sits at ``stage``."""
    step = 0
    while complaint.current_stage != stage:
        step += 1
        complaint = escalate(complaint.pk, citizen, now=start + days(30 * step))
    return complaint


def _perf(office, role):
    return OfficePerformance.objects.get(office=office, office_role=role)


# ════════════════════════════════════════════════════════════════════
#  Timed / response-count scenarios
# ════════════════════════════════════════════════════════════════════


class TestEscalationEligibility:

    def test_before_due_date_without_responses_is_rejected(self, submit, citizen):
        complaint = submit()

        with pytest.raises(EscalationNotAllowedError) as exc_info:
            escalate(complaint.pk, citizen, now=T0 + days(1))

        assert "wait for the response due date" in str(exc_info.value)
        complaint.refresh_from_db()
        assert complaint.current_stage == ComplaintStage.STAKEHOLDER_FIRST
        assert complaint.version == 0
        assert not EscalationHistory.objects.filter(complaint=complaint).exists()

    def test_after_due_date_moves_to_second_stakeholder_stage(self, submit, citizen, office):
        complaint = submit()
        assert complaint.due_date_for(ComplaintStage.STAKEHOLDER_FIRST) == T0 + days(3)

        with pytest.raises(EscalationNotAllowedError):
            escalate(complaint.pk, citizen, now=T0 + days(1))
        result = escalate(complaint.pk, citizen, now=T0 + days(4))

        complaint.refresh_from_db()
        assert result.pk == complaint.pk
        assert complaint.current_stage == ComplaintStage.STAKEHOLDER_SECOND
        assert complaint.current_handler == ComplaintHandler.STAKEHOLDER_OFFICE
        assert complaint.status == ComplaintStatus.PENDING
        assert complaint.version == 1
        assert complaint.due_date_for(ComplaintStage.STAKEHOLDER_SECOND) == T0 + days(4) + days(3)

        history = list(EscalationHistory.objects.filter(complaint=complaint))
        assert len(history) == 1
        assert history[0].from_handler == ComplaintHandler.STAKEHOLDER_OFFICE
        assert history[0].to_handler == ComplaintHandler.STAKEHOLDER_OFFICE
        assert history[0].reason == "Escalated to next stage"

        # Within-handler escalations are not charged to the office.
        assert _perf(office, "stakeholder_office").escalated_complaints == 0
        assert not FailureRecord.objects.exists()

    def test_response_count_rule_crosses_to_wereda(self, submit, respond, citizen, office):
        complaint = submit()
        respond(complaint, office)
        escalate(complaint.pk, citizen, now=T0)
        respond(complaint, office, body="Second answer.")

        complaint.refresh_from_db()
        assert complaint.current_stage == ComplaintStage.STAKEHOLDER_SECOND
        assert complaint.responses.count() == 2
        # Due date of the second stage is still in the future.
        assert complaint.due_date_for(ComplaintStage.STAKEHOLDER_SECOND) > T0

        escalate(complaint.pk, citizen, now=T0 + days(1))

        complaint.refresh_from_db()
        assert complaint.current_stage == ComplaintStage.WEREDA_FIRST
        assert complaint.current_handler == ComplaintHandler.WEREDA_ANTI_CORRUPTION
        assert complaint.status == ComplaintStatus.PENDING
        assert complaint.due_date_for(ComplaintStage.WEREDA_FIRST) == T0 + days(1) + days(5)

        cross = EscalationHistory.objects.filter(complaint=complaint).order_by("pk").last()
        assert cross.from_handler == ComplaintHandler.STAKEHOLDER_OFFICE
        assert cross.to_handler == ComplaintHandler.WEREDA_ANTI_CORRUPTION
        assert cross.reason == "Escalated due to unresolved complaint"
        assert EscalationHistory.objects.filter(complaint=complaint).count() == 2

        perf = _perf(office, "stakeholder_office")
        assert perf.escalated_complaints == 1
        failure = perf.failure_records.get()
        assert failure.complaint_id == complaint.pk
        assert failure.escalated_from == ComplaintStage.STAKEHOLDER_SECOND
        assert failure.escalated_to == ComplaintStage.WEREDA_FIRST

    def test_one_response_is_not_enough_at_second_stage(self, submit, respond, citizen, office):
        complaint = submit()
        complaint = escalate(complaint.pk, citizen, now=T0 + days(4))
        respond(complaint, office)

        with pytest.raises(EscalationNotAllowedError):
            escalate(complaint.pk, citizen, now=T0 + days(5))

    def test_custom_reason_is_recorded(self, submit, citizen):
        complaint = submit()
        escalate(complaint.pk, citizen, reason="No answer at all.", now=T0 + days(4))

        entry = EscalationHistory.objects.get(complaint=complaint)
        assert entry.reason == "No answer at all."


# ════════════════════════════════════════════════════════════════════
#  Guards
# ════════════════════════════════════════════════════════════════════


class TestEscalationGuards:

    def test_missing_complaint(self, citizen):
        with pytest.raises(NotFoundError):
            escalate(999_999, citizen)

    def test_only_the_owning_citizen_may_escalate(self, submit, other_citizen, office):
        complaint = submit()
        for actor in (other_citizen, office):
            with pytest.raises(AuthorizationError):
                escalate(complaint.pk, actor, now=T0 + days(10))

    def test_resolved_complaint_always_fails(self, submit, respond, citizen, office):
        complaint = submit()
        respond(complaint, office)
        ComplaintResponseService.accept(complaint.pk, citizen, now=T0 + days(1))

        for offset in (0, 4, 400):
            with pytest.raises(AlreadyResolvedError):
                escalate(complaint.pk, citizen, now=T0 + days(offset))

    def test_resolved_check_precedes_terminal_check(self, submit, citizen):
        complaint = submit()
        Complaint.objects.filter(pk=complaint.pk).update(
            current_stage=ComplaintStage.KENTIBA,
            current_handler=ComplaintHandler.KENTIBA_BIRO,
            status=ComplaintStatus.RESOLVED,
        )
        with pytest.raises(AlreadyResolvedError):
            escalate(complaint.pk, citizen)

    def test_kentiba_always_fails_with_terminal_stage_error(self, submit, respond, citizen, kentiba):
        complaint = _walk_to(submit(), citizen, ComplaintStage.KENTIBA)
        assert complaint.current_handler == ComplaintHandler.KENTIBA_BIRO

        with pytest.raises(TerminalStageError):
            escalate(complaint.pk, citizen, now=T0 + days(1000))

        for _ in range(8):
            respond(complaint, kentiba)
        with pytest.raises(TerminalStageError):
            escalate(complaint.pk, citizen, now=T0 + days(1000))

        ComplaintDeadline.objects.create(
            complaint=complaint, stage=ComplaintStage.KENTIBA, due_at=T0,
        )
        with pytest.raises(TerminalStageError):
            escalate(complaint.pk, citizen, now=T0 + days(1000))

    def test_original_with_second_stage_child_cannot_be_escalated(self, submit, respond, citizen, office):
        from complaints.services import ComplaintSubmissionService

        original = submit()
        respond(original, office)
        ComplaintSubmissionService.submit_second_stage(original.pk, {}, citizen, now=T0 + days(1))

        with pytest.raises(EscalationNotAllowedError) as exc_info:
            escalate(original.pk, citizen, now=T0 + days(100))
        assert "second-stage" in str(exc_info.value)


# ════════════════════════════════════════════════════════════════════
#  Whole-ladder walk and office attribution
# ════════════════════════════════════════════════════════════════════


class TestEscalationLadder:

    def test_stage_only_moves_forward_through_every_entry(
        self, submit, citizen, office, wereda_officer, kifleketema_officer,
    ):
        complaint = submit()
        seen = [complaint.current_stage]
        step = 0
        while complaint.current_stage != ComplaintStage.KENTIBA:
            step += 1
            complaint = escalate(complaint.pk, citizen, now=T0 + days(30 * step))
            seen.append(complaint.current_stage)

        assert seen == list(workflow.STAGE_ORDER)
        assert complaint.version == len(workflow.STAGE_ORDER) - 1

        history = list(
            EscalationHistory.objects.filter(complaint=complaint).order_by("pk")
            .values_list("from_handler", "to_handler")
        )
        assert history == [
            ("stakeholder_office", "stakeholder_office"),
            ("stakeholder_office", "wereda_anti_corruption"),
            ("wereda_anti_corruption", "wereda_anti_corruption"),
            ("wereda_anti_corruption", "kifleketema_anti_corruption"),
            ("kifleketema_anti_corruption", "kifleketema_anti_corruption"),
            ("kifleketema_anti_corruption", "kentiba_biro"),
        ]
        assert list(
            EscalationHistory.objects.filter(complaint=complaint).order_by("pk")
            .values_list("created_at", flat=True)
        ) == [T0 + days(30 * n) for n in range(1, step + 1)]

        # Every non-terminal stage reached got a due date; kentiba has none.
        stages_with_due = set(
            ComplaintDeadline.objects.filter(complaint=complaint).values_list("stage", flat=True)
        )
        assert stages_with_due == set(workflow.STAGE_ORDER) - {ComplaintStage.KENTIBA}

        assert _perf(office, "stakeholder_office").escalated_complaints == 1
        assert _perf(wereda_officer, "wereda_anti_corruption").escalated_complaints == 1
        assert _perf(kifleketema_officer, "kifleketema_anti_corruption").escalated_complaints == 1
        assert FailureRecord.objects.count() == 3
        assert sorted(FailureRecord.objects.values_list("created_at", flat=True)) == [
            T0 + days(60), T0 + days(120), T0 + days(180),
        ]

    def test_anti_corruption_failure_charged_to_lowest_pk_active_officer(self, create_user, submit, citizen):
        inactive = create_user(username="retired_wereda", role="wereda_anti_corruption", is_active=False)
        first = create_user(username="wereda_a", role="wereda_anti_corruption")
        second = create_user(username="wereda_b", role="wereda_anti_corruption")
        assert inactive.pk < first.pk < second.pk

        _walk_to(submit(), citizen, ComplaintStage.KIFLEKETEMA_FIRST)

        assert _perf(first, "wereda_anti_corruption").escalated_complaints == 1
        assert not OfficePerformance.objects.filter(office__in=[inactive, second]).exists()

    def test_missing_officer_skips_metric_with_warning(self, submit, citizen, caplog):
        complaint = _walk_to(submit(), citizen, ComplaintStage.WEREDA_SECOND)

        with caplog.at_level(logging.WARNING, logger="performance.services"):
            complaint = escalate(complaint.pk, citizen, now=T0 + days(1000))

        assert complaint.current_stage == ComplaintStage.KIFLEKETEMA_FIRST
        assert not OfficePerformance.objects.filter(office_role="wereda_anti_corruption").exists()
        assert any("performance update skipped" in r.getMessage() for r in caplog.records)
        assert EscalationHistory.objects.filter(
            complaint=complaint,
            from_handler="wereda_anti_corruption",
            to_handler="kifleketema_anti_corruption",
        ).count() == 1


# ════════════════════════════════════════════════════════════════════
#  Concurrency and store failures
# ════════════════════════════════════════════════════════════════════


class TestEscalationConcurrency:

    def test_stale_expected_version_is_rejected(self, submit, citizen):
        complaint = submit()
        escalate(complaint.pk, citizen, expected_version=0, now=T0 + days(4))

        with pytest.raises(ConcurrentModificationError):
            escalate(complaint.pk, citizen, expected_version=0, now=T0 + days(40))

        complaint.refresh_from_db()
        assert complaint.current_stage == ComplaintStage.STAKEHOLDER_SECOND
        assert complaint.version == 1

    def test_versioned_save_from_stale_copy_fails(self, submit):
        complaint = submit()
        first_copy = Complaint.objects.get(pk=complaint.pk)
        second_copy = Complaint.objects.get(pk=complaint.pk)

        first_copy.status = ComplaintStatus.IN_PROGRESS
        save_versioned(first_copy, update_fields=["status"])

        second_copy.status = ComplaintStatus.ESCALATED
        with pytest.raises(ConcurrentModificationError):
            save_versioned(second_copy, update_fields=["status"])

        complaint.refresh_from_db()
        assert complaint.status == ComplaintStatus.IN_PROGRESS
        assert complaint.version == 1

    def test_database_failure_rolls_back_and_raises_store_error(self, submit, respond, citizen, office):
        complaint = submit()
        respond(complaint, office)
        escalate(complaint.pk, citizen, now=T0)
        respond(complaint, office)

        with mock.patch(
            "performance.services.OfficePerformanceService.get_locked",
            side_effect=DatabaseError("disk full"),
        ):
            with pytest.raises(StoreError):
                escalate(complaint.pk, citizen, now=T0 + days(1))

        complaint.refresh_from_db()
        assert complaint.current_stage == ComplaintStage.STAKEHOLDER_SECOND
        assert complaint.version == 3
        assert EscalationHistory.objects.filter(complaint=complaint).count() == 1
        assert not ComplaintDeadline.objects.filter(
            complaint=complaint, stage=ComplaintStage.WEREDA_FIRST,
        ).exists()
