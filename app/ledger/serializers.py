"""
Serializers for the ledger API.

Serializer Hierarchy:
    CashboxSerializer: Cashbox with cached balance (read)
    CashboxUpdateSerializer: Descriptive fields only (write)
    BalanceSerializer: GetBalance response

    LedgerEntrySerializer: Entry with derived is_reversed flag (read)
    PostingSerializer: CreatePosting request (write)
    ReversalSerializer: ReverseEntry request (write)

    ReconciliationReportSerializer: Recalculate response
    DailySummarySerializer: Daily summary response
    CategorySerializer: Known category catalog

Design Decisions:
    - Read and write serializers are separate
    - Amounts are serialized as strings to keep two-place precision
    - Write serializers only shape input; the posting engine validates
      amounts and raises ledger exceptions
"""

from __future__ import annotations

from django.conf import settings
from rest_framework import serializers

from .models import Cashbox, EntryDirection, LedgerEntry


class CashboxSerializer(serializers.ModelSerializer):
    """Cashbox with branch info and cached balance."""

    branch_name = serializers.CharField(source="branch.name", read_only=True)
    currency = serializers.SerializerMethodField()

    class Meta:
        model = Cashbox
        fields = [
            "id",
            "branch",
            "branch_name",
            "name",
            "description",
            "initial_balance",
            "current_balance",
            "currency",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_currency(self, obj: Cashbox) -> str:
        return settings.LEDGER_CURRENCY


class CashboxUpdateSerializer(serializers.Serializer):
    """PATCH body for a cashbox. Balances are not writable."""

    name = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)


class BalanceSerializer(serializers.Serializer):
    cashbox_id = serializers.IntegerField()
    balance = serializers.DecimalField(max_digits=15, decimal_places=2)
    currency = serializers.CharField()


class LedgerEntrySerializer(serializers.ModelSerializer):
    """
    Ledger entry for audit listings.

    ``is_reversed`` is derived from the existence of a reversal entry; it
    is never stored on the original.
    """

    created_by_email = serializers.EmailField(source="created_by.email", read_only=True)
    category_display = serializers.CharField(read_only=True)
    is_reversed = serializers.BooleanField(read_only=True)

    class Meta:
        model = LedgerEntry
        fields = [
            "id",
            "cashbox",
            "direction",
            "amount",
            "balance_after",
            "category",
            "category_display",
            "description",
            "reference_type",
            "reference_id",
            "reversed_entry",
            "is_reversed",
            "created_by",
            "created_by_email",
            "metadata",
            "created_at",
        ]
        read_only_fields = fields


class PostingSerializer(serializers.Serializer):
    """Request body for posting an income or expense entry."""

    direction = serializers.ChoiceField(
        choices=[EntryDirection.INCOME, EntryDirection.EXPENSE],
        help_text="income or expense",
    )
    amount = serializers.CharField(
        max_length=32,
        help_text="Positive amount with at most two decimal places, e.g. '500.00'",
    )
    category = serializers.CharField(max_length=50)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    reference_type = serializers.CharField(
        max_length=50, required=False, allow_null=True, default=None
    )
    reference_id = serializers.CharField(
        max_length=64, required=False, allow_null=True, default=None
    )
    metadata = serializers.DictField(required=False, default=dict)
    idempotency_key = serializers.CharField(
        max_length=255,
        required=False,
        allow_blank=False,
        help_text="Caller key making the posting safe to retry",
    )

    def validate(self, attrs):
        if bool(attrs.get("reference_type")) != bool(attrs.get("reference_id")):
            raise serializers.ValidationError(
                "reference_type and reference_id must be given together"
            )
        return attrs


class ReversalSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ReconciliationReportSerializer(serializers.Serializer):
    cashbox_id = serializers.IntegerField()
    old_balance = serializers.DecimalField(max_digits=15, decimal_places=2)
    new_balance = serializers.DecimalField(max_digits=15, decimal_places=2)
    corrected = serializers.BooleanField()


class DailySummarySerializer(serializers.Serializer):
    cashbox_id = serializers.IntegerField()
    date = serializers.DateField()
    opening_balance = serializers.DecimalField(max_digits=15, decimal_places=2)
    total_income = serializers.DecimalField(max_digits=15, decimal_places=2)
    total_expense = serializers.DecimalField(max_digits=15, decimal_places=2)
    reversal_count = serializers.IntegerField()
    reversal_net = serializers.DecimalField(max_digits=15, decimal_places=2)
    closing_balance = serializers.DecimalField(max_digits=15, decimal_places=2)
    entry_count = serializers.IntegerField()


class CategorySerializer(serializers.Serializer):
    value = serializers.CharField()
    label = serializers.CharField()
