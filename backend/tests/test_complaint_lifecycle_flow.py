"""
End-to-end flow — a complaint climbs the whole ladder over HTTP.

    citizen submits → stakeholder answers twice → citizen escalates to the
    Wereda → Wereda due date lapses → second Wereda stage → Kifleketema →
    Kentiba Biro answers → citizen accepts.

Due dates cannot be injected through the API, so the test moves the
current stage's deadline into the past directly in the database where
the timed rule is being exercised.
"""

from __future__ import annotations

import datetime

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import User
from complaints.models import ComplaintDeadline
from performance.models import FailureRecord, OfficePerformance


def _user(username: str, role: str = "citizen", **extra) -> User:
    n = User.objects.count() + 1
    return User.objects.create_user(
        username=username,
        password="FlowP@ss123",
        email=f"{username}@example.com",
        id_number=f"FLOW{n:06d}",
        phone=f"0930{n:06d}",
        role=role,
        is_approved=role != "citizen",
        **extra,
    )


class TestComplaintLifecycleFlow(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.citizen = _user("tigist", first_name="Tigist", last_name="Haile")
        cls.office = _user(
            "gulele_trade",
            role="stakeholder_office",
            office_name="Gulele Trade Office",
            office_type="trade_office",
        )
        cls.wereda = _user("wereda", role="wereda_anti_corruption")
        cls.kifleketema = _user("kifleketema", role="kifleketema_anti_corruption")
        cls.kentiba = _user("kentiba", role="kentiba_biro")

    def setUp(self):
        self.client = APIClient()

    # ── Helpers ──────────────────────────────────────────────────────

    def _as(self, user: User) -> None:
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")

    def _post(self, name: str, pk: int, data: dict | None = None, expected: int = status.HTTP_200_OK):
        resp = self.client.post(reverse(name, args=[pk]), data or {}, format="json")
        self.assertEqual(resp.status_code, expected, resp.data)
        return resp.data

    def _expire_current_stage(self, complaint: dict) -> None:
        ComplaintDeadline.objects.filter(
            complaint_id=complaint["id"],
            stage=complaint["current_stage"],
        ).update(due_at=timezone.now() - datetime.timedelta(minutes=1))

    # ── Flow ─────────────────────────────────────────────────────────

    def test_full_escalation_ladder(self):
        self._as(self.citizen)
        resp = self.client.post(
            reverse("complaint-list"),
            {
                "stakeholder_office": self.office.pk,
                "title": "Trade licence renewal blocked",
                "description": "Asked for an unofficial fee to renew my licence.",
                "location": "Gulele, Wereda 02",
            },
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.data)
        complaint = resp.data
        pk = complaint["id"]

        # Stakeholder answers; citizen escalates within the stakeholder tier.
        self._as(self.office)
        self._post("complaint-respond", pk, {"body": "We will call you next week."})
        self._as(self.citizen)
        complaint = self._post("complaint-escalate", pk, {"version": 1})
        self.assertEqual(complaint["current_stage"], "stakeholder_second")

        # Second answer; two responses are enough to leave the stakeholder tier.
        self._as(self.office)
        self._post("complaint-respond", pk, {"body": "Still processing."})
        self._as(self.citizen)
        complaint = self._post("complaint-escalate", pk)
        self.assertEqual(complaint["current_stage"], "wereda_first")
        self.assertEqual(complaint["current_handler"], "wereda_anti_corruption")
        self.assertIn("wereda_first", complaint["due_dates"])

        # The Wereda tier now lists the complaint.
        self._as(self.wereda)
        listing = self.client.get(reverse("complaint-list"))
        self.assertEqual([c["id"] for c in listing.data["results"]], [pk])

        # Wereda never answers: timed escalation twice.
        self._as(self.citizen)
        self._post("complaint-escalate", pk, expected=status.HTTP_409_CONFLICT)
        self._expire_current_stage(complaint)
        complaint = self._post("complaint-escalate", pk)
        self.assertEqual(complaint["current_stage"], "wereda_second")
        self._expire_current_stage(complaint)
        complaint = self._post("complaint-escalate", pk)
        self.assertEqual(complaint["current_stage"], "kifleketema_first")

        self._expire_current_stage(complaint)
        complaint = self._post("complaint-escalate", pk)
        self._expire_current_stage(complaint)
        complaint = self._post("complaint-escalate", pk)
        self.assertEqual(complaint["current_stage"], "kentiba")
        self.assertEqual(complaint["current_handler"], "kentiba_biro")
        self.assertNotIn("kentiba", complaint["due_dates"])

        terminal = self._post("complaint-escalate", pk, expected=status.HTTP_409_CONFLICT)
        self.assertEqual(terminal["code"], "TerminalStageError")

        # Kentiba Biro answers; the citizen accepts.
        self._as(self.kentiba)
        self._post("complaint-respond", pk, {"body": "The officer has been suspended; licence issued."})
        self._as(self.citizen)
        complaint = self._post("complaint-accept", pk)
        self.assertEqual(complaint["status"], "resolved")
        self.assertEqual(complaint["resolution"]["resolver_role"], "kentiba_biro")

        history = self.client.get(reverse("complaint-escalation-history", args=[pk])).data
        self.assertEqual(len(history), 6)
        self.assertEqual(
            [(h["from_handler"], h["to_handler"]) for h in history if h["from_handler"] != h["to_handler"]],
            [
                ("stakeholder_office", "wereda_anti_corruption"),
                ("wereda_anti_corruption", "kifleketema_anti_corruption"),
                ("kifleketema_anti_corruption", "kentiba_biro"),
            ],
        )

        # One escalation failure charged to each tier the complaint left.
        for user, role in (
            (self.office, "stakeholder_office"),
            (self.wereda, "wereda_anti_corruption"),
            (self.kifleketema, "kifleketema_anti_corruption"),
        ):
            perf = OfficePerformance.objects.get(office=user, office_role=role)
            self.assertEqual(perf.escalated_complaints, 1, role)
        self.assertEqual(FailureRecord.objects.filter(complaint_id=pk).count(), 3)

        kentiba_perf = OfficePerformance.objects.get(office=self.kentiba, office_role="kentiba_biro")
        self.assertEqual(kentiba_perf.resolved_complaints, 1)
