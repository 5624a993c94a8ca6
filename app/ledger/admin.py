"""
Django admin configuration for ledger models.

Key features:
- LedgerEntry is immutable (no add/edit/delete permissions)
- Cashbox balances are read-only; only name and description are editable
- Replayed balance shown next to the cached one to spot drift
"""

from django.conf import settings
from django.contrib import admin

from .models import Cashbox, LedgerEntry
from .services import ledger


@admin.register(Cashbox)
class CashboxAdmin(admin.ModelAdmin):
    """
    Admin configuration for Cashbox.

    Saving goes through LedgerService.update_cashbox so the form can never
    write back a stale current_balance.
    """

    list_display = [
        "id",
        "name",
        "branch",
        "current_balance_display",
        "is_active",
        "created_at",
    ]
    list_filter = ["is_active"]
    search_fields = ["name", "branch__name", "branch__branch_code"]
    readonly_fields = [
        "branch",
        "initial_balance",
        "current_balance",
        "computed_balance_display",
        "is_active",
        "created_at",
        "updated_at",
    ]
    ordering = ["id"]

    fieldsets = (
        (
            None,
            {
                "fields": ("branch", "name", "description", "is_active"),
            },
        ),
        (
            "Balance",
            {
                "fields": (
                    "initial_balance",
                    "current_balance",
                    "computed_balance_display",
                ),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )

    def current_balance_display(self, obj: Cashbox) -> str:
        return f"{obj.current_balance} {settings.LEDGER_CURRENCY}"

    current_balance_display.short_description = "Balance"

    def computed_balance_display(self, obj: Cashbox) -> str:
        """Balance replayed from entries (one aggregate query)."""
        return f"{obj.compute_balance()} {settings.LEDGER_CURRENCY}"

    computed_balance_display.short_description = "Replayed balance"

    def save_model(self, request, obj, form, change):
        ledger.update_cashbox(
            obj.pk,
            name=form.cleaned_data.get("name"),
            description=form.cleaned_data.get("description"),
        )

    def has_add_permission(self, request) -> bool:
        """Cashboxes are created with their branch (BranchService)."""
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    """
    Admin configuration for LedgerEntry.

    Ledger entries are immutable - they cannot be added, edited or deleted
    through the admin interface. Corrections are made with reversals.
    """

    list_display = [
        "id",
        "created_at",
        "cashbox",
        "direction",
        "amount",
        "balance_after",
        "category",
        "reference_type",
        "reference_id",
        "created_by",
    ]
    list_filter = ["direction", "category", "reference_type", "created_at"]
    search_fields = ["id", "description", "reference_id", "created_by__email"]
    readonly_fields = [
        "id",
        "created_at",
        "cashbox",
        "direction",
        "amount",
        "balance_after",
        "category",
        "description",
        "reference_type",
        "reference_id",
        "reversed_entry",
        "created_by",
        "metadata",
    ]
    date_hierarchy = "created_at"
    ordering = ["-id"]
    list_select_related = ["cashbox", "created_by"]

    fieldsets = (
        (
            "Entry Details",
            {
                "fields": (
                    "id",
                    "cashbox",
                    "direction",
                    "amount",
                    "balance_after",
                    "category",
                    "created_at",
                ),
            },
        ),
        (
            "Reference",
            {
                "fields": ("reference_type", "reference_id", "reversed_entry"),
            },
        ),
        (
            "Additional Info",
            {
                "fields": ("description", "metadata", "created_by"),
            },
        ),
    )

    def has_delete_permission(self, request, obj=None) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_add_permission(self, request) -> bool:
        return False
