"""
URL configuration for the Django application.

The `urlpatterns` list routes URLs to views. This is the root URL configuration
that includes all app-specific routes.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/auth/                  - JWT endpoints
        token/                     - Obtain access/refresh pair (email + password)
        token/refresh/             - Refresh access token
    /api/v1/branches/              - Branch endpoints
        {id}/                      - Branch detail
        {id}/cashbox/              - Branch cashbox
    /api/v1/ledger/                - Cashbox ledger endpoints
        cashboxes/                 - Cashbox list
        cashboxes/{id}/            - Cashbox detail/update
        cashboxes/{id}/balance/    - Cached balance
        cashboxes/{id}/entries/    - Entry listing (cursor-paginated)
        cashboxes/{id}/postings/   - Post income/expense
        cashboxes/{id}/recalculate/ - Rebuild cached balance
        cashboxes/{id}/daily-summary/ - One day's totals
        cashboxes/{id}/deactivate/ - Disable postings
        cashboxes/{id}/reactivate/ - Re-enable postings
        entries/{id}/              - Entry detail
        entries/{id}/reverse/      - Reverse entry
        categories/                - Known categories

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    # Authentication (simplejwt)
    path("auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    # Branches
    path("branches/", include("branches.urls")),
    # Cashbox ledger
    path("ledger/", include("ledger.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Cashbox Ledger Admin"
admin.site.site_title = "Ledger Admin"
admin.site.index_title = "Branches and cashboxes"
