"""
Complaints app URL configuration.

All routes are registered under the ``/api/complaints/`` prefix.

Route Hierarchy
---------------
  /api/complaints/                              → list / create
  /api/complaints/{id}/                         → retrieve

  ── Workflow @actions (resource-level RPC) ──────────────────────
  POST /api/complaints/{id}/second-stage/       → citizen opens second stage
  POST /api/complaints/{id}/escalate/           → citizen escalates
  POST /api/complaints/{id}/respond/            → current handler responds
  POST /api/complaints/{id}/accept/             → citizen accepts → resolved

  ── Sub-resource @actions ───────────────────────────────────────
  GET  /api/complaints/{id}/escalation-history/
"""

from rest_framework.routers import DefaultRouter

from .views import ComplaintViewSet

router = DefaultRouter()
router.register(
    prefix=r"complaints",
    viewset=ComplaintViewSet,
    basename="complaint",
)

urlpatterns = router.urls
