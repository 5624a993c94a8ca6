"""
URL configuration for the branches API.

All URLs are prefixed with /api/v1/branches/ in the main URL configuration.
"""

from rest_framework.routers import SimpleRouter

from branches.views import BranchViewSet

router = SimpleRouter()
router.register("", BranchViewSet, basename="branch")

app_name = "branches"

urlpatterns = router.urls
