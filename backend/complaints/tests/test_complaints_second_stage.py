"""
Tests for ``ComplaintSubmissionService.submit_second_stage``.

A citizen unhappy with a first-stage answer opens a linked child
complaint; the original is marked escalated and can no longer be
escalated itself.
"""

from __future__ import annotations

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from complaints.models import (
    Complaint,
    ComplaintHandler,
    ComplaintStage,
    ComplaintStatus,
    EscalationHistory,
)
from complaints.services import (
    ComplaintEscalationService,
    ComplaintResponseService,
    ComplaintSubmissionService,
)
from core.domain.exceptions import InvalidTransition, NotFoundError, ValidationError
from performance.models import OfficePerformance

from .conftest import T0, days

pytestmark = pytest.mark.django_db

submit_second_stage = ComplaintSubmissionService.submit_second_stage


class TestSecondStageFromStakeholder:

    def test_creates_linked_child_and_escalates_original(self, submit, respond, citizen, office):
        original = submit()
        respond(original, office, body="Your certificate is being printed.")

        child = submit_second_stage(
            original.pk,
            {"additional_details": "Still nothing after two weeks."},
            citizen,
            now=T0 + days(2),
        )

        assert child.pk != original.pk
        assert child.citizen_id == citizen.pk
        assert child.stakeholder_office_id == office.pk
        assert child.current_stage == ComplaintStage.STAKEHOLDER_SECOND
        assert child.current_handler == ComplaintHandler.STAKEHOLDER_OFFICE
        assert child.status == ComplaintStatus.PENDING
        assert child.related_complaint_id == original.pk
        assert child.title == original.title
        assert child.description == original.description
        assert child.location == original.location
        assert child.additional_details == "Still nothing after two weeks."
        assert child.due_date_for(ComplaintStage.STAKEHOLDER_SECOND) == T0 + days(2) + days(3)

        original.refresh_from_db()
        assert original.second_stage_complaint_id == child.pk
        assert original.current_stage == ComplaintStage.STAKEHOLDER_SECOND
        assert original.status == ComplaintStatus.ESCALATED
        assert original.version == 2

        entry = EscalationHistory.objects.get(complaint=original)
        assert entry.from_handler == ComplaintHandler.STAKEHOLDER_OFFICE
        assert entry.to_handler == ComplaintHandler.WEREDA_ANTI_CORRUPTION
        assert entry.reason == "Escalated to second stage by citizen"
        assert entry.created_at == T0 + days(2)
        assert not EscalationHistory.objects.filter(complaint=child).exists()

        perf = OfficePerformance.objects.get(office=office, office_role="stakeholder_office")
        assert perf.total_complaints == 2
        assert perf.escalated_complaints == 0

    def test_overrides_replace_original_fields(self, submit, respond, citizen, office):
        original = submit()
        respond(original, office)

        child = submit_second_stage(
            original.pk,
            {"title": "Certificate still missing", "location": "Bole, Wereda 05"},
            citizen,
        )

        assert child.title == "Certificate still missing"
        assert child.location == "Bole, Wereda 05"
        assert child.description == original.description

    def test_child_escalates_on_its_own(self, submit, respond, citizen, office):
        original = submit()
        respond(original, office)
        child = submit_second_stage(original.pk, {}, citizen, now=T0)

        escalated = ComplaintEscalationService.escalate(child.pk, citizen, now=T0 + days(4))

        assert escalated.current_stage == ComplaintStage.WEREDA_FIRST
        assert escalated.current_handler == ComplaintHandler.WEREDA_ANTI_CORRUPTION
        original.refresh_from_db()
        assert original.current_stage == ComplaintStage.STAKEHOLDER_SECOND

    def test_attachments_are_stored_on_the_child(self, submit, respond, citizen, office, media_root):
        original = submit()
        respond(original, office)
        upload = SimpleUploadedFile("receipt.pdf", b"%PDF-1.4 receipt", content_type="application/pdf")

        child = submit_second_stage(original.pk, {}, citizen, [upload])

        assert child.attachments.count() == 1
        assert not original.attachments.exists()


class TestSecondStageFromWereda:

    def test_wereda_first_opens_wereda_second(self, submit, respond, citizen, office, wereda_officer):
        complaint = submit()
        complaint = ComplaintEscalationService.escalate(complaint.pk, citizen, now=T0 + days(4))
        complaint = ComplaintEscalationService.escalate(complaint.pk, citizen, now=T0 + days(8))
        assert complaint.current_stage == ComplaintStage.WEREDA_FIRST
        respond(complaint, wereda_officer, body="Investigation opened.")

        child = submit_second_stage(complaint.pk, {}, citizen, now=T0 + days(9))

        assert child.current_stage == ComplaintStage.WEREDA_SECOND
        assert child.current_handler == ComplaintHandler.WEREDA_ANTI_CORRUPTION
        assert child.due_date_for(ComplaintStage.WEREDA_SECOND) == T0 + days(9) + days(5)

        entry = EscalationHistory.objects.filter(complaint=complaint).order_by("pk").last()
        assert entry.from_handler == ComplaintHandler.WEREDA_ANTI_CORRUPTION
        assert entry.to_handler == ComplaintHandler.KIFLEKETEMA_ANTI_CORRUPTION

        perf = OfficePerformance.objects.get(office=office, office_role="wereda_anti_corruption")
        assert perf.total_complaints == 1


class TestSecondStagePreconditions:

    def test_pending_original_is_rejected(self, submit, citizen):
        original = submit()

        with pytest.raises(ValidationError):
            submit_second_stage(original.pk, {}, citizen)

        assert Complaint.objects.count() == 1

    def test_second_stage_original_is_rejected(self, submit, respond, citizen, office):
        original = submit()
        original = ComplaintEscalationService.escalate(original.pk, citizen, now=T0 + days(4))
        respond(original, office)

        with pytest.raises(ValidationError):
            submit_second_stage(original.pk, {}, citizen)

    def test_cannot_open_twice(self, submit, respond, citizen, office):
        original = submit()
        respond(original, office)
        submit_second_stage(original.pk, {}, citizen)

        with pytest.raises(ValidationError):
            submit_second_stage(original.pk, {}, citizen)

    def test_other_citizen_sees_not_found(self, submit, respond, other_citizen, office):
        original = submit()
        respond(original, office)

        with pytest.raises(NotFoundError):
            submit_second_stage(original.pk, {}, other_citizen)

    def test_too_many_attachments(self, submit, respond, citizen, office):
        original = submit()
        respond(original, office)
        uploads = [SimpleUploadedFile(f"f{i}.txt", b"x") for i in range(6)]

        with pytest.raises(ValidationError):
            submit_second_stage(original.pk, {}, citizen, uploads)

        original.refresh_from_db()
        assert original.second_stage_complaint_id is None


class TestOriginalIsFrozen:

    @pytest.fixture()
    def original_and_child(self, submit, respond, citizen, office):
        original = submit()
        respond(original, office, body="Your certificate is being printed.")
        child = submit_second_stage(original.pk, {}, citizen, now=T0 + days(2))
        original.refresh_from_db()
        return original, child

    def test_office_cannot_respond_to_original(self, respond, office, original_and_child):
        original, child = original_and_child

        with pytest.raises(InvalidTransition):
            respond(original, office, body="Printed and ready.")

        original.refresh_from_db()
        assert original.status == ComplaintStatus.ESCALATED
        assert original.version == 2
        assert original.responses.count() == 1

    def test_citizen_cannot_accept_original(self, citizen, office, original_and_child):
        original, child = original_and_child

        with pytest.raises(InvalidTransition):
            ComplaintResponseService.accept(original.pk, citizen, now=T0 + days(3))

        original.refresh_from_db()
        child.refresh_from_db()
        assert original.status == ComplaintStatus.ESCALATED
        assert child.status == ComplaintStatus.PENDING
        perf = OfficePerformance.objects.get(office=office, office_role="stakeholder_office")
        assert perf.resolved_complaints == 0

    def test_child_carries_the_conversation(self, respond, citizen, office, original_and_child):
        original, child = original_and_child

        respond(child, office, body="Printed and ready.")
        resolved = ComplaintResponseService.accept(child.pk, citizen, now=T0 + days(3))

        assert resolved.status == ComplaintStatus.RESOLVED
        original.refresh_from_db()
        assert original.status == ComplaintStatus.ESCALATED
