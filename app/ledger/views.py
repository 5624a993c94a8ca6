"""
ViewSets for the ledger API.

URL Structure:
    /api/v1/ledger/cashboxes/                         GET
    /api/v1/ledger/cashboxes/{id}/                    GET, PATCH
    /api/v1/ledger/cashboxes/{id}/balance/            GET
    /api/v1/ledger/cashboxes/{id}/entries/            GET
    /api/v1/ledger/cashboxes/{id}/postings/           POST
    /api/v1/ledger/cashboxes/{id}/recalculate/        POST
    /api/v1/ledger/cashboxes/{id}/daily-summary/      GET
    /api/v1/ledger/cashboxes/{id}/deactivate/         POST
    /api/v1/ledger/cashboxes/{id}/reactivate/         POST
    /api/v1/ledger/entries/{id}/                      GET
    /api/v1/ledger/entries/{id}/reverse/              POST
    /api/v1/ledger/categories/                        GET

Design Decisions:
    - Views never write models directly; every write goes through LedgerService
    - Ledger exceptions are translated by ApplicationErrorMixin
      (InsufficientFunds -> 409 with required/available amounts)
    - Entries have no update or delete endpoints
"""

from __future__ import annotations

import datetime

from django.conf import settings
from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.viewset_mixins import ApplicationErrorMixin

from .filters import CashboxFilter, LedgerEntryFilter
from .models import Cashbox, EntryCategory, LedgerEntry
from .pagination import LedgerEntryCursorPagination
from .permissions import CanPostEntries, CanReverseEntries, IsStaff
from .serializers import (
    BalanceSerializer,
    CashboxSerializer,
    CashboxUpdateSerializer,
    CategorySerializer,
    DailySummarySerializer,
    LedgerEntrySerializer,
    PostingSerializer,
    ReconciliationReportSerializer,
    ReversalSerializer,
)
from .services import ledger
from .types import PostingParams, Reference


@extend_schema_view(
    list=extend_schema(
        operation_id="list_cashboxes",
        summary="List cashboxes",
        tags=["Ledger - Cashboxes"],
    ),
    retrieve=extend_schema(
        operation_id="get_cashbox",
        summary="Get cashbox",
        tags=["Ledger - Cashboxes"],
    ),
    partial_update=extend_schema(
        operation_id="update_cashbox",
        summary="Update cashbox name/description",
        request=CashboxUpdateSerializer,
        responses={200: CashboxSerializer},
        tags=["Ledger - Cashboxes"],
    ),
)
class CashboxViewSet(
    ApplicationErrorMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for cashboxes and their ledger.

    list / retrieve:
        Any authenticated user. Inactive cashboxes are included.

    partial_update:
        Staff only. Name and description; balances are never writable.

    balance:
        Cached balance (no replay).

    entries:
        Entries in posting order, cursor-paginated and filterable.

    postings:
        Post an income or expense (requires ledger.add_ledgerentry).

    recalculate / deactivate / reactivate:
        Staff only.
    """

    queryset = Cashbox.objects.select_related("branch").order_by("id")
    lookup_value_regex = r"\d+"
    serializer_class = CashboxSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = CashboxFilter
    http_method_names = ["get", "post", "patch", "head", "options"]

    def get_permissions(self):
        """Return permissions based on action."""
        if self.action == "postings":
            return [IsAuthenticated(), CanPostEntries()]
        if self.action in ("partial_update", "recalculate", "deactivate", "reactivate"):
            return [IsAuthenticated(), IsStaff()]
        return [IsAuthenticated()]

    def get_serializer_class(self):
        """Return appropriate serializer based on action."""
        if self.action == "partial_update":
            return CashboxUpdateSerializer
        if self.action == "entries":
            return LedgerEntrySerializer
        if self.action == "postings":
            return PostingSerializer
        return CashboxSerializer

    def partial_update(self, request, pk=None):
        """Update name and/or description."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cashbox = ledger.update_cashbox(int(pk), **serializer.validated_data)
        return Response(CashboxSerializer(cashbox).data)

    @extend_schema(
        operation_id="get_cashbox_balance",
        summary="Get cashbox balance",
        responses={200: BalanceSerializer},
        tags=["Ledger - Cashboxes"],
    )
    @action(detail=True, methods=["get"])
    def balance(self, request, pk=None):
        """Cached balance of the cashbox."""
        balance = ledger.get_balance(int(pk))
        data = {
            "cashbox_id": int(pk),
            "balance": balance,
            "currency": settings.LEDGER_CURRENCY,
        }
        return Response(BalanceSerializer(data).data)

    @extend_schema(
        operation_id="list_cashbox_entries",
        summary="List cashbox entries",
        description=(
            "Entries in posting order (ascending id). Use the `next` cursor to "
            "resume; listings are restartable and never skip or repeat entries."
        ),
        parameters=[
            OpenApiParameter("start_date", OpenApiTypes.DATE),
            OpenApiParameter("end_date", OpenApiTypes.DATE),
            OpenApiParameter("category", OpenApiTypes.STR),
            OpenApiParameter("direction", OpenApiTypes.STR),
            OpenApiParameter("reference_type", OpenApiTypes.STR),
            OpenApiParameter("reference_id", OpenApiTypes.STR),
        ],
        responses={200: LedgerEntrySerializer(many=True)},
        tags=["Ledger - Entries"],
    )
    @action(detail=True, methods=["get"])
    def entries(self, request, pk=None):
        """Entries of this cashbox."""
        queryset = ledger.list_entries(int(pk))
        filterset = LedgerEntryFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            raise ValidationError(filterset.errors)
        queryset = filterset.qs

        paginator = LedgerEntryCursorPagination()
        page = paginator.paginate_queryset(queryset, request, view=self)
        serializer = LedgerEntrySerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    @extend_schema(
        operation_id="create_posting",
        summary="Post income or expense",
        request=PostingSerializer,
        responses={
            201: LedgerEntrySerializer,
            400: OpenApiResponse(description="Invalid amount or direction"),
            404: OpenApiResponse(description="Cashbox not found"),
            409: OpenApiResponse(description="Insufficient funds or inactive cashbox"),
        },
        tags=["Ledger - Entries"],
    )
    @action(detail=True, methods=["post"])
    def postings(self, request, pk=None):
        """Post an income or expense entry against this cashbox."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        metadata = dict(data.get("metadata") or {})
        if data.get("idempotency_key"):
            metadata["idempotency_key"] = data["idempotency_key"]

        entry = ledger.post(
            PostingParams(
                cashbox_id=int(pk),
                direction=data["direction"],
                amount=data["amount"],
                category=data["category"],
                actor=request.user,
                reference=Reference.of(data.get("reference_type"), data.get("reference_id")),
                description=data.get("description", ""),
                metadata=metadata,
            )
        )
        entry = ledger.get_entry(entry.id)
        return Response(LedgerEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="recalculate_cashbox",
        summary="Recalculate cashbox balance",
        parameters=[OpenApiParameter("dry_run", OpenApiTypes.BOOL)],
        request=None,
        responses={200: ReconciliationReportSerializer},
        tags=["Ledger - Maintenance"],
    )
    @action(detail=True, methods=["post"])
    def recalculate(self, request, pk=None):
        """Replay entries and repair the cached balance."""
        dry_run = request.query_params.get("dry_run", "").lower() in ("1", "true", "yes")
        report = ledger.recalculate(int(pk), dry_run=dry_run)
        return Response(ReconciliationReportSerializer(report).data)

    @extend_schema(
        operation_id="get_cashbox_daily_summary",
        summary="Daily summary",
        parameters=[OpenApiParameter("date", OpenApiTypes.DATE, description="Defaults to today")],
        responses={200: DailySummarySerializer},
        tags=["Ledger - Cashboxes"],
    )
    @action(detail=True, methods=["get"], url_path="daily-summary")
    def daily_summary(self, request, pk=None):
        """Opening/closing balance and totals for one day."""
        raw_date = request.query_params.get("date")
        if raw_date:
            try:
                date = datetime.date.fromisoformat(raw_date)
            except ValueError:
                return Response(
                    {"error": "date must be YYYY-MM-DD", "error_code": "INVALID_DATE"},
                    status=status.HTTP_400_BAD_REQUEST,
                )
        else:
            date = timezone.localdate()

        summary = ledger.daily_summary(int(pk), date)
        return Response(DailySummarySerializer(summary).data)

    @extend_schema(
        operation_id="deactivate_cashbox",
        summary="Deactivate cashbox",
        request=None,
        responses={200: CashboxSerializer},
        tags=["Ledger - Maintenance"],
    )
    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):
        cashbox = ledger.deactivate_cashbox(int(pk))
        return Response(CashboxSerializer(cashbox).data)

    @extend_schema(
        operation_id="reactivate_cashbox",
        summary="Reactivate cashbox",
        request=None,
        responses={200: CashboxSerializer},
        tags=["Ledger - Maintenance"],
    )
    @action(detail=True, methods=["post"])
    def reactivate(self, request, pk=None):
        cashbox = ledger.reactivate_cashbox(int(pk))
        return Response(CashboxSerializer(cashbox).data)


@extend_schema_view(
    retrieve=extend_schema(
        operation_id="get_ledger_entry",
        summary="Get ledger entry",
        tags=["Ledger - Entries"],
    ),
)
class LedgerEntryViewSet(
    ApplicationErrorMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Read access to single entries, plus the reversal action.

    There is deliberately no list, update or delete: entries are listed per
    cashbox and never change once written.
    """

    queryset = (
        LedgerEntry.objects.select_related("created_by", "reversed_entry")
        .with_reversal_flag()
        .order_by("id")
    )
    lookup_value_regex = r"\d+"
    serializer_class = LedgerEntrySerializer

    def get_permissions(self):
        if self.action == "reverse":
            return [IsAuthenticated(), CanReverseEntries()]
        return [IsAuthenticated()]

    @extend_schema(
        operation_id="reverse_ledger_entry",
        summary="Reverse entry",
        request=ReversalSerializer,
        responses={
            201: LedgerEntrySerializer,
            404: OpenApiResponse(description="Entry not found"),
            409: OpenApiResponse(
                description="Already reversed, a reversal, or insufficient funds"
            ),
        },
        tags=["Ledger - Entries"],
    )
    @action(detail=True, methods=["post"])
    def reverse(self, request, pk=None):
        """Post a reversal entry offsetting this entry."""
        serializer = ReversalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        entry = ledger.reverse(int(pk), actor=request.user, notes=serializer.validated_data["notes"])
        entry = ledger.get_entry(entry.id)
        return Response(LedgerEntrySerializer(entry).data, status=status.HTTP_201_CREATED)


class CategoryListView(APIView):
    """Catalog of known entry categories."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_ledger_categories",
        summary="List known categories",
        responses={200: CategorySerializer(many=True)},
        tags=["Ledger - Entries"],
    )
    def get(self, request):
        data = [{"value": value, "label": label} for value, label in EntryCategory.choices]
        return Response(CategorySerializer(data, many=True).data)
