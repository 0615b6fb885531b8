"""
Fixtures shared by the complaints service tests.

``T0`` is a fixed submission instant; tests pass explicit ``now`` values
relative to it instead of patching the clock.
"""

from __future__ import annotations

import datetime

import pytest
from django.utils import timezone

from accounts.models import UserRole

T0 = timezone.now().replace(microsecond=0)


def days(n: float) -> datetime.timedelta:
    return datetime.timedelta(days=n)


@pytest.fixture()
def citizen(create_user):
    return create_user(username="citizen", first_name="Abebe", last_name="Kebede")


@pytest.fixture()
def other_citizen(create_user):
    return create_user(username="other_citizen")


@pytest.fixture()
def office(create_user):
    return create_user(
        username="land_office",
        role=UserRole.STAKEHOLDER_OFFICE,
        office_name="Bole Land Office",
        office_type="land_office",
    )


@pytest.fixture()
def wereda_officer(create_user):
    return create_user(username="wereda_officer", role=UserRole.WEREDA_ANTI_CORRUPTION)


@pytest.fixture()
def kifleketema_officer(create_user):
    return create_user(username="kifleketema_officer", role=UserRole.KIFLEKETEMA_ANTI_CORRUPTION)


@pytest.fixture()
def kentiba(create_user):
    return create_user(username="kentiba", role=UserRole.KENTIBA_BIRO)


@pytest.fixture()
def submit(citizen, office):
    """Submit a first-stage complaint at ``T0`` (or ``now``)."""
    from complaints.services import ComplaintSubmissionService

    def _submit(*, by=None, to=None, now=T0, **overrides):
        data = {
            "stakeholder_office": (to or office).pk,
            "title": "Land certificate delayed",
            "description": "My land certificate has been pending for six months.",
            "location": "Bole, Wereda 03",
        }
        data.update(overrides)
        return ComplaintSubmissionService.submit_complaint(data, by or citizen, now=now)

    return _submit


@pytest.fixture()
def respond():
    from complaints.services import ComplaintResponseService

    def _respond(complaint, user, body="We are reviewing your case.", **extra):
        return ComplaintResponseService.respond(
            complaint.pk, {"body": body, **extra}, user,
        )

    return _respond
