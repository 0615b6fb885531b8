"""
Unit tests for ``OfficePerformanceService`` and ``PerformanceQueryService``.
"""

from __future__ import annotations

import pytest

from core.domain.exceptions import AuthorizationError, NotFoundError
from performance.models import FailureRecord, OfficePerformance
from performance.services import OfficePerformanceService, PerformanceQueryService

pytestmark = pytest.mark.django_db


@pytest.fixture()
def office(create_user):
    return create_user(
        username="id_office",
        role="stakeholder_office",
        office_name="Arada ID Office",
        office_type="id_office",
    )


@pytest.fixture()
def complaint(create_user, office):
    from complaints.services import ComplaintSubmissionService

    citizen = create_user(username="selam")
    return ComplaintSubmissionService.submit_complaint(
        {
            "stakeholder_office": office.pk,
            "title": "ID renewal refused",
            "description": "Office refused to renew my ID without a reason.",
            "location": "Arada",
        },
        citizen,
    )


class TestCounters:

    def test_record_created_on_first_use(self, office):
        assert not OfficePerformance.objects.exists()

        record = OfficePerformanceService.record_new_complaint(office, "stakeholder_office")

        assert record.total_complaints == 1
        assert record.resolved_complaints == 0
        assert record.escalated_complaints == 0
        assert record.average_resolution_time == 0.0
        assert record.resolution_rate == 0.0

    def test_records_are_keyed_by_office_and_role(self, office):
        OfficePerformanceService.record_new_complaint(office, "stakeholder_office")
        OfficePerformanceService.record_new_complaint(office, "stakeholder_office")
        OfficePerformanceService.record_new_complaint(office, "wereda_anti_corruption")

        counts = dict(
            OfficePerformance.objects.filter(office=office)
            .values_list("office_role", "total_complaints")
        )
        assert counts == {"stakeholder_office": 2, "wereda_anti_corruption": 1}

    @pytest.mark.parametrize(
        "durations,expected",
        [
            ([2.0], 2.0),
            ([2.0, 4.0], 3.0),
            ([1.0, 2.0, 6.0], 3.0),
            ([0.5, 0.5, 0.5, 2.5], 1.0),
        ],
    )
    def test_running_mean(self, office, durations, expected):
        for days in durations:
            record = OfficePerformanceService.record_resolution(office, "stakeholder_office", days)

        assert record.resolved_complaints == len(durations)
        assert record.average_resolution_time == pytest.approx(expected)
        record.refresh_from_db()
        assert record.average_resolution_time == pytest.approx(expected)


class TestEscalationFailure:

    def test_stakeholder_failure_charged_to_complaint_office(self, complaint, office):
        record = OfficePerformanceService.record_escalation_failure(
            complaint,
            from_handler="stakeholder_office",
            from_stage="stakeholder_second",
            to_stage="wereda_first",
            reason="No answer",
        )

        assert record.office_id == office.pk
        assert record.escalated_complaints == 1
        failure = FailureRecord.objects.get()
        assert failure.performance_id == record.pk
        assert failure.complaint_id == complaint.pk
        assert failure.reason == "No answer"

    def test_anti_corruption_failure_charged_to_first_active_officer(self, create_user, complaint):
        create_user(username="k_inactive", role="kifleketema_anti_corruption", is_active=False)
        first = create_user(username="k_first", role="kifleketema_anti_corruption")
        create_user(username="k_second", role="kifleketema_anti_corruption")

        assert OfficePerformanceService.resolve_penalised_office(
            complaint, "kifleketema_anti_corruption",
        ) == first

    def test_no_officer_means_no_update(self, complaint, caplog):
        result = OfficePerformanceService.record_escalation_failure(
            complaint,
            from_handler="wereda_anti_corruption",
            from_stage="wereda_second",
            to_stage="kifleketema_first",
            reason="No answer",
        )

        assert result is None
        assert not FailureRecord.objects.exists()
        assert "performance update skipped" in caplog.text


class TestPerformanceQueries:

    def test_list_requires_administrator_tier(self, create_user, office):
        OfficePerformanceService.record_new_complaint(office, "stakeholder_office")
        wereda = create_user(username="wereda", role="wereda_anti_corruption")
        citizen = create_user(username="citizen")

        assert PerformanceQueryService.list_records(wereda).count() == 1
        assert PerformanceQueryService.list_records(wereda, office_role="wereda_anti_corruption").count() == 0
        for user in (citizen, office):
            with pytest.raises(AuthorizationError):
                PerformanceQueryService.list_records(user)

    def test_get_record_visibility(self, create_user, office):
        record = OfficePerformanceService.record_new_complaint(office, "stakeholder_office")
        other_office = create_user(
            username="tax", role="stakeholder_office", office_name="Tax Office", office_type="tax_office",
        )
        kentiba = create_user(username="kentiba", role="kentiba_biro")

        assert PerformanceQueryService.get_record(office, record.pk) == record
        assert PerformanceQueryService.get_record(kentiba, record.pk) == record
        with pytest.raises(AuthorizationError):
            PerformanceQueryService.get_record(other_office, record.pk)
        with pytest.raises(NotFoundError):
            PerformanceQueryService.get_record(kentiba, record.pk + 100)

    def test_records_for_office(self, create_user, office):
        OfficePerformanceService.record_new_complaint(office, "stakeholder_office")

        assert list(PerformanceQueryService.records_for_office(office).values_list("office_role", flat=True)) == [
            "stakeholder_office",
        ]
        with pytest.raises(AuthorizationError):
            PerformanceQueryService.records_for_office(create_user(username="citizen"))
