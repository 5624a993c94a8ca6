"""
Ledger models for branch cashboxes.

This module defines the core models of the cashbox ledger:
- Cashbox: One per branch; holds the cached balance
- LedgerEntry: Immutable record of one balance-affecting event

The cashbox's ``current_balance`` is a materialized view of its entry
stream: ``initial_balance`` plus the signed sum of every entry. The
posting engine in ledger.services keeps both in step inside one
transaction; ``Cashbox.compute_balance()`` replays the stream.

Usage:
    from ledger.models import Cashbox, LedgerEntry, EntryDirection

    cashbox = branch.cashbox
    cashbox.current_balance        # cached, O(1)
    cashbox.compute_balance()      # replayed from entries
"""

from __future__ import annotations

import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import Case, Exists, F, OuterRef, Q, Sum, Value, When
from django.db.models.functions import Coalesce
from django.utils import timezone

from core.managers import AppendOnlyQuerySet
from core.models import BaseModel

from .exceptions import ImmutableEntryError

if TYPE_CHECKING:
    from .types import Reference

ZERO = Decimal("0.00")

AMOUNT_FIELD_KWARGS = {"max_digits": 15, "decimal_places": 2}


class EntryDirection(models.TextChoices):
    """
    Sign of a ledger entry.

    Amounts are always stored as positive magnitudes; the direction decides
    how an entry moves the balance.

    Values:
        INCOME: Adds the amount
        EXPENSE: Subtracts the amount
        REVERSAL: Negates the entry it points at
    """

    INCOME = "income", "Income"
    EXPENSE = "expense", "Expense"
    REVERSAL = "reversal", "Reversal"


class EntryCategory(models.TextChoices):
    """
    Known reporting categories.

    The ledger accepts any non-empty category string; this catalog lists
    the labels the collaborator helpers use, with display names.
    """

    PAYMENT = "payment", "Order Payment"
    CUSTODY_DEPOSIT = "custody_deposit", "Custody Deposit"
    CUSTODY_RETURN = "custody_return", "Custody Return"
    CUSTODY_FORFEITURE = "custody_forfeiture", "Custody Forfeiture"
    EXPENSE = "expense", "Branch Expense"
    RECEIVABLE_PAYMENT = "receivable_payment", "Receivable Payment"
    REVERSAL = "reversal", "Reversal"
    INITIAL_BALANCE = "initial_balance", "Initial Balance"
    ADJUSTMENT = "adjustment", "Manual Adjustment"
    SALARY_EXPENSE = "salary_expense", "Salary Payout"


def signed_amount() -> Case:
    """
    Expression giving an entry's effect on its cashbox balance.

    Reversals take the opposite sign of the entry they reverse, so reversing
    an income subtracts and reversing an expense adds.
    """
    output_field = models.DecimalField(**AMOUNT_FIELD_KWARGS)
    return Case(
        When(direction=EntryDirection.INCOME, then=F("amount")),
        When(direction=EntryDirection.EXPENSE, then=-F("amount")),
        When(
            direction=EntryDirection.REVERSAL,
            reversed_entry__direction=EntryDirection.EXPENSE,
            then=F("amount"),
        ),
        When(
            direction=EntryDirection.REVERSAL,
            reversed_entry__direction=EntryDirection.INCOME,
            then=-F("amount"),
        ),
        default=Value(ZERO),
        output_field=output_field,
    )


def start_of_day(date: datetime.date) -> datetime.datetime:
    """Midnight at the start of 'date' in the current time zone."""
    return timezone.make_aware(datetime.datetime.combine(date, datetime.time.min))


def signed_total(queryset: models.QuerySet) -> Decimal:
    """Sum the signed amounts of a LedgerEntry queryset (0 when empty)."""
    result = queryset.aggregate(
        total=Coalesce(
            Sum(signed_amount()),
            Value(ZERO),
            output_field=models.DecimalField(**AMOUNT_FIELD_KWARGS),
        )
    )
    return result["total"]


class Cashbox(BaseModel):
    """
    The cash register of one branch.

    Fields:
        branch: Owning branch (exactly one cashbox per branch)
        name: Display name, "<branch name> Cashbox" by default
        description: Free text
        initial_balance: Opening amount, fixed at creation
        current_balance: Cached balance maintained by the posting engine
        is_active: Inactive cashboxes reject postings but stay readable

    Constraints:
        - initial_balance must not be negative
        - One cashbox per branch (OneToOne)

    Note:
        Never write current_balance directly. Post through
        ledger.services.LedgerService, or repair with recalculate().
    """

    branch = models.OneToOneField(
        "branches.Branch",
        on_delete=models.PROTECT,
        related_name="cashbox",
        help_text="Branch owning this cashbox",
    )
    name = models.CharField(
        max_length=255,
        help_text="Display name of this cashbox",
    )
    description = models.TextField(
        blank=True,
        default="",
        help_text="Free-form description",
    )
    initial_balance = models.DecimalField(
        **AMOUNT_FIELD_KWARGS,
        default=ZERO,
        help_text="Opening balance, fixed at creation",
    )
    current_balance = models.DecimalField(
        **AMOUNT_FIELD_KWARGS,
        default=ZERO,
        help_text="Cached balance; initial_balance plus all signed entries",
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Whether this cashbox accepts new postings",
    )

    class Meta:
        ordering = ["id"]
        verbose_name_plural = "cashboxes"
        constraints = [
            models.CheckConstraint(
                condition=Q(initial_balance__gte=0),
                name="cashbox_initial_balance_non_negative",
            )
        ]

    def __str__(self) -> str:
        return self.name

    def compute_balance(self, before: datetime.datetime | None = None) -> Decimal:
        """
        Replay the entry stream from initial_balance.

        Args:
            before: Only count entries created strictly before this instant

        Returns:
            initial_balance plus the signed sum of the selected entries

        Note:
            This performs an aggregate query; the write path uses the cached
            current_balance read under the cashbox lock instead.
        """
        entries = LedgerEntry.objects.filter(cashbox=self)
        if before is not None:
            entries = entries.filter(created_at__lt=before)
        return self.initial_balance + signed_total(entries)

    def balance_at(self, date: datetime.date) -> Decimal:
        """Balance at the end of the given day (in the current time zone)."""
        return self.compute_balance(before=start_of_day(date + datetime.timedelta(days=1)))


class LedgerEntryQuerySet(AppendOnlyQuerySet):
    """QuerySet for ledger entries with read helpers."""

    def for_cashbox(self, cashbox_id: int) -> LedgerEntryQuerySet:
        return self.filter(cashbox_id=cashbox_id)

    def with_reversal_flag(self) -> LedgerEntryQuerySet:
        """Annotate ``has_reversal`` so listings avoid one query per entry."""
        return self.annotate(
            has_reversal=Exists(
                LedgerEntry.objects.filter(reversed_entry=OuterRef("pk"))
            )
        )

    def by_reference(self, kind: str, id: str) -> LedgerEntryQuerySet:
        return self.filter(reference_type=kind, reference_id=str(id))

    def with_idempotency_key(self, key: str) -> LedgerEntryQuerySet:
        return self.filter(metadata__idempotency_key=key)


class LedgerEntry(models.Model):
    """
    One immutable, signed ledger record.

    Entries are append-only: save() refuses to update an existing row,
    delete() always raises, and the default manager's queryset rejects
    bulk update/delete. Corrections are made with a reversal entry.

    Fields:
        id: Opaque, increasing identifier (ordering key)
        cashbox: Owning cashbox; never reassigned
        direction: income, expense or reversal
        amount: Positive magnitude, two decimal places
        balance_after: Cashbox balance right after this entry applied
        category: Reporting label
        description: Human-readable description
        reference_type / reference_id: Collaborator entity that caused it
        reversed_entry: Entry being reversed (reversal entries only)
        created_by: Actor who recorded the entry
        metadata: Opaque collaborator context
        created_at: Timestamp when the entry was recorded

    Constraints:
        - amount must be positive
        - reversed_entry is set exactly when direction is reversal
        - an entry can be reversed at most once
    """

    immutable_error = ImmutableEntryError

    cashbox = models.ForeignKey(
        Cashbox,
        on_delete=models.PROTECT,
        related_name="entries",
        help_text="Cashbox this entry belongs to",
    )
    direction = models.CharField(
        max_length=10,
        choices=EntryDirection.choices,
        help_text="How this entry moves the balance",
    )
    amount = models.DecimalField(
        **AMOUNT_FIELD_KWARGS,
        help_text="Amount (always positive)",
    )
    balance_after = models.DecimalField(
        **AMOUNT_FIELD_KWARGS,
        help_text="Cashbox balance immediately after this entry",
    )
    category = models.CharField(
        max_length=50,
        db_index=True,
        help_text="Reporting label (payment, expense, reversal, ...)",
    )
    description = models.TextField(
        blank=True,
        default="",
        help_text="Human-readable description of this entry",
    )
    reference_type = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        help_text="Type of related entity (e.g., 'payment', 'custody')",
    )
    reference_id = models.CharField(
        max_length=64,
        null=True,
        blank=True,
        help_text="Identifier of related entity",
    )
    reversed_entry = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reversals",
        help_text="Entry this reversal negates",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="ledger_entries",
        help_text="User who recorded this entry",
    )
    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Collaborator context; never interpreted by the ledger",
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when this entry was recorded",
    )

    objects = LedgerEntryQuerySet.as_manager()

    class Meta:
        ordering = ["id"]
        verbose_name_plural = "ledger entries"
        indexes = [
            models.Index(
                fields=["cashbox", "created_at"],
                name="ledger_entry_cashbox_created",
            ),
            models.Index(
                fields=["reference_type", "reference_id"],
                name="ledger_entry_reference",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="ledger_entry_amount_positive",
            ),
            models.CheckConstraint(
                condition=(
                    Q(direction=EntryDirection.REVERSAL, reversed_entry__isnull=False)
                    | (
                        ~Q(direction=EntryDirection.REVERSAL)
                        & Q(reversed_entry__isnull=True)
                    )
                ),
                name="ledger_entry_reversal_has_target",
            ),
            models.UniqueConstraint(
                fields=["reversed_entry"],
                name="ledger_entry_single_reversal",
            ),
        ]
        permissions = [
            ("reverse_ledgerentry", "Can reverse ledger entries"),
        ]

    def __str__(self) -> str:
        return f"#{self.pk} {self.get_direction_display()} {self.amount} ({self.category})"

    def save(self, *args, **kwargs) -> None:
        if not self._state.adding:
            raise ImmutableEntryError(
                f"Ledger entry {self.pk} is immutable",
                details={"entry_id": self.pk, "operation": "save"},
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableEntryError(
            f"Ledger entry {self.pk} is immutable",
            details={"entry_id": self.pk, "operation": "delete"},
        )

    @property
    def reference(self) -> Reference | None:
        from .types import Reference

        return Reference.of(self.reference_type, self.reference_id)

    @property
    def signed_amount(self) -> Decimal:
        """This entry's effect on the balance."""
        if self.direction == EntryDirection.INCOME:
            return self.amount
        if self.direction == EntryDirection.EXPENSE:
            return -self.amount
        if self.reversed_entry.direction == EntryDirection.EXPENSE:
            return self.amount
        return -self.amount

    @property
    def is_reversed(self) -> bool:
        """Whether a reversal entry points at this entry."""
        if hasattr(self, "has_reversal"):
            return self.has_reversal
        return self.reversals.exists()

    @property
    def category_display(self) -> str:
        try:
            return EntryCategory(self.category).label
        except ValueError:
            return self.category.replace("_", " ").title()
