"""
URL configuration for the ledger API.

URL Structure:
    /cashboxes/                          GET
    /cashboxes/{id}/                     GET, PATCH
    /cashboxes/{id}/balance/             GET
    /cashboxes/{id}/entries/             GET
    /cashboxes/{id}/postings/            POST
    /cashboxes/{id}/recalculate/         POST
    /cashboxes/{id}/daily-summary/       GET
    /cashboxes/{id}/deactivate/          POST
    /cashboxes/{id}/reactivate/          POST
    /entries/{id}/                       GET
    /entries/{id}/reverse/               POST
    /categories/                         GET

All URLs are prefixed with /api/v1/ledger/ in the main URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from ledger.views import CashboxViewSet, CategoryListView, LedgerEntryViewSet

router = DefaultRouter()
router.register(r"cashboxes", CashboxViewSet, basename="cashbox")
router.register(r"entries", LedgerEntryViewSet, basename="entry")

app_name = "ledger"

urlpatterns = [
    path("", include(router.urls)),
    path("categories/", CategoryListView.as_view(), name="category-list"),
]
