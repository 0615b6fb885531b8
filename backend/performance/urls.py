"""
Performance app URL configuration.

  GET /api/performance/          → list (anti-corruption tiers, Kentiba Biro)
  GET /api/performance/{id}/     → detail with failure records
  GET /api/performance/mine/     → the requesting office's records
"""

from rest_framework.routers import DefaultRouter

from .views import OfficePerformanceViewSet

router = DefaultRouter()
router.register(
    prefix=r"performance",
    viewset=OfficePerformanceViewSet,
    basename="performance",
)

urlpatterns = router.urls
