"""
Ledger service layer: the posting engine, reversals and reconciliation.

This module provides the LedgerService class which is the only code path
allowed to create ledger entries or change a cashbox balance. All writes go
through ``cashbox_lock`` so the read-check-write sequence on a cashbox is
serialized, and each entry insert commits together with its balance update.

Usage:
    from ledger.services import ledger
    from ledger.types import Reference

    # Post an order payment
    entry = ledger.record_payment(
        cashbox_id=cashbox.id,
        amount=Decimal("500.00"),
        payment_id=payment.id,
        actor=request.user,
    )

    # Correct it later
    reversal = ledger.reverse(entry.id, actor=request.user, notes="Duplicate")

    # Repair drift
    report = ledger.recalculate(cashbox.id)
"""

from __future__ import annotations

import datetime
import logging
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from django.db import IntegrityError
from django.db.models import Count, Q, Sum

from core.services import BaseService, ServiceResult

from .exceptions import (
    AlreadyReversed,
    CashboxNotFound,
    EntryNotFound,
    InactiveCashbox,
    InsufficientFunds,
    InvalidAmount,
    InvalidDirection,
    LedgerError,
    ReversalNotAllowed,
)
from .locks import cashbox_lock
from .models import (
    ZERO,
    Cashbox,
    EntryCategory,
    EntryDirection,
    LedgerEntry,
    signed_total,
    start_of_day,
)
from .types import (
    DailySummary,
    PostingParams,
    ReconciliationReport,
    Reference,
    SweepResult,
)

if TYPE_CHECKING:
    from typing import Any

    from django.db.models import QuerySet

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

# 15 digits with 2 decimal places
MAX_AMOUNT = Decimal("9999999999999.99")

CATEGORY_MAX_LENGTH = 50
REFERENCE_ID_MAX_LENGTH = 64


def parse_amount(value: Any, allow_zero: bool = False) -> Decimal:
    """
    Convert a caller-supplied amount to a two-place Decimal.

    Args:
        value: Decimal, int or numeric string (floats go through str())
        allow_zero: Accept 0 (opening balances only)

    Returns:
        The amount quantized to cents

    Raises:
        InvalidAmount: If the value is non-numeric, non-finite, negative,
            zero (unless allowed), has more than two decimal places or
            exceeds the storable range
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmount(
            f"Invalid amount: {value!r}", details={"amount": repr(value)}
        )
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmount(
            f"Invalid amount: {value!r}", details={"amount": repr(value)}
        ) from None

    if not amount.is_finite():
        raise InvalidAmount(
            f"Amount must be a finite number, got {value!r}",
            details={"amount": str(value)},
        )
    if amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidAmount(
            f"Amount must be positive, got {amount}",
            details={"amount": str(amount)},
        )
    if amount > MAX_AMOUNT:
        raise InvalidAmount(
            f"Amount {amount} exceeds the maximum of {MAX_AMOUNT}",
            details={"amount": str(amount)},
        )
    if amount != amount.quantize(CENT):
        raise InvalidAmount(
            f"Amount {amount} has more than two decimal places",
            details={"amount": str(amount)},
        )
    return amount.quantize(CENT)


def _validate_category(category: str) -> str:
    category = (category or "").strip()
    if not category or len(category) > CATEGORY_MAX_LENGTH:
        raise LedgerError(
            f"Category must be 1-{CATEGORY_MAX_LENGTH} characters",
            error_code="INVALID_CATEGORY",
            details={"category": category},
        )
    return category


def _validate_reference(reference: Reference | None) -> Reference | None:
    if reference is not None and (
        len(reference.kind) > CATEGORY_MAX_LENGTH
        or len(reference.id) > REFERENCE_ID_MAX_LENGTH
    ):
        raise LedgerError(
            "Reference kind or id is too long",
            error_code="INVALID_REFERENCE",
            details={"reference": str(reference)},
        )
    return reference


def _require_actor(actor: Any) -> None:
    if actor is None or not getattr(actor, "is_authenticated", False):
        raise LedgerError(
            "Ledger writes require an authenticated actor",
            error_code="ACTOR_REQUIRED",
        )


class LedgerService:
    """
    Service class for cashbox ledger operations.

    Key features:
    - Row lock per cashbox; unrelated cashboxes never block each other
    - Non-negative balance check against a fresh read inside the lock
    - Entry insert and balance update commit together or not at all
    - Optional idempotency via ``metadata["idempotency_key"]``

    All methods are static - no instance state is maintained.
    """

    # =========================================================================
    # Cashboxes
    # =========================================================================

    @staticmethod
    def open_cashbox(
        branch: Any,
        initial_balance: Any = ZERO,
        name: str | None = None,
        description: str = "",
    ) -> Cashbox:
        """
        Create the cashbox of a branch.

        Call inside the transaction that creates the branch so the two are
        created together or not at all (see BranchService.create_branch).

        Raises:
            InvalidAmount: If initial_balance is negative or malformed
        """
        opening = parse_amount(initial_balance, allow_zero=True)
        cashbox = Cashbox.objects.create(
            branch=branch,
            name=name or f"{branch.name} Cashbox",
            description=description,
            initial_balance=opening,
            current_balance=opening,
        )
        logger.info(
            "Opened cashbox",
            extra={
                "cashbox_id": cashbox.id,
                "branch_id": branch.pk,
                "initial_balance": str(opening),
            },
        )
        return cashbox

    @staticmethod
    def get_cashbox(cashbox_id: int) -> Cashbox:
        """
        Get cashbox by ID.

        Raises:
            CashboxNotFound: If cashbox doesn't exist
        """
        try:
            return Cashbox.objects.select_related("branch").get(pk=cashbox_id)
        except Cashbox.DoesNotExist:
            raise CashboxNotFound(
                f"Cashbox {cashbox_id} not found",
                details={"cashbox_id": cashbox_id},
            ) from None

    @staticmethod
    def update_cashbox(
        cashbox_id: int,
        name: str | None = None,
        description: str | None = None,
    ) -> Cashbox:
        """
        Update the descriptive fields of a cashbox.

        Balances are not editable here; initial_balance is fixed at creation
        and current_balance only moves through postings or recalculate().
        """
        with cashbox_lock(cashbox_id) as cashbox:
            update_fields = ["updated_at"]
            if name is not None:
                cashbox.name = name
                update_fields.append("name")
            if description is not None:
                cashbox.description = description
                update_fields.append("description")
            cashbox.save(update_fields=update_fields)
        return cashbox

    @staticmethod
    def _set_active(cashbox_id: int, is_active: bool) -> Cashbox:
        with cashbox_lock(cashbox_id) as cashbox:
            if cashbox.is_active != is_active:
                cashbox.is_active = is_active
                cashbox.save(update_fields=["is_active", "updated_at"])
                logger.info(
                    "Cashbox %s",
                    "reactivated" if is_active else "deactivated",
                    extra={"cashbox_id": cashbox.id},
                )
        return cashbox

    @staticmethod
    def deactivate_cashbox(cashbox_id: int) -> Cashbox:
        """
        Disable new postings on a cashbox.

        History and balance stay readable. Deactivation is the only way to
        retire a cashbox; cashboxes with entries cannot be deleted.
        """
        return LedgerService._set_active(cashbox_id, False)

    @staticmethod
    def reactivate_cashbox(cashbox_id: int) -> Cashbox:
        """Re-enable postings on a deactivated cashbox."""
        return LedgerService._set_active(cashbox_id, True)

    # =========================================================================
    # Posting engine
    # =========================================================================

    @staticmethod
    def _append(
        cashbox: Cashbox,
        *,
        direction: str,
        amount: Decimal,
        delta: Decimal,
        category: str,
        actor: Any,
        reference: Reference | None = None,
        description: str = "",
        metadata: dict[str, Any] | None = None,
        reversed_entry: LedgerEntry | None = None,
    ) -> LedgerEntry:
        """
        Apply ``delta`` to a locked cashbox and write the matching entry.

        Must run inside ``cashbox_lock`` for this cashbox. Raises
        InsufficientFunds, leaving nothing written, when the new balance
        would be negative.
        """
        available = cashbox.current_balance
        new_balance = available + delta
        if new_balance < 0:
            logger.warning(
                "Rejected %s: insufficient funds",
                direction,
                extra={
                    "cashbox_id": cashbox.id,
                    "required": str(amount),
                    "available": str(available),
                    "category": category,
                },
            )
            raise InsufficientFunds(
                cashbox_id=cashbox.id,
                required=amount,
                available=available,
            )

        entry = LedgerEntry.objects.create(
            cashbox=cashbox,
            direction=direction,
            amount=amount,
            balance_after=new_balance,
            category=category,
            description=description or "",
            reference_type=reference.kind if reference else None,
            reference_id=reference.id if reference else None,
            reversed_entry=reversed_entry,
            created_by=actor,
            metadata=metadata or {},
        )

        cashbox.current_balance = new_balance
        cashbox.save(update_fields=["current_balance", "updated_at"])
        return entry

    @staticmethod
    def post(params: PostingParams) -> LedgerEntry:
        """
        Post one income or expense entry against a cashbox.

        Validation that needs no balance (amount, direction, category, actor)
        runs before the lock is taken. Under the lock the cashbox is re-read,
        then checked for being active and for sufficient funds.

        Idempotent when ``params.metadata["idempotency_key"]`` is set: if an
        entry with that key already exists on the cashbox it is returned and
        nothing new is posted.

        Args:
            params: Posting parameters

        Returns:
            The created (or previously posted) LedgerEntry

        Raises:
            InvalidAmount: If the amount is zero, negative or malformed
            InvalidDirection: If direction isn't income or expense
            CashboxNotFound: If the cashbox doesn't exist
            InactiveCashbox: If the cashbox is deactivated
            InsufficientFunds: If an expense would make the balance negative
        """
        if params.direction not in (EntryDirection.INCOME, EntryDirection.EXPENSE):
            raise InvalidDirection(
                f"Postings must be income or expense, got {params.direction!r}",
                details={"direction": str(params.direction)},
            )
        amount = parse_amount(params.amount)
        category = _validate_category(params.category)
        reference = _validate_reference(params.reference)
        _require_actor(params.actor)
        idempotency_key = params.idempotency_key
        metadata = dict(params.metadata or {})
        if idempotency_key:
            # Stored as text so retries with the same key match the lookup.
            metadata["idempotency_key"] = idempotency_key

        with cashbox_lock(params.cashbox_id) as cashbox:
            if idempotency_key:
                existing = (
                    LedgerEntry.objects.for_cashbox(cashbox.id)
                    .with_idempotency_key(idempotency_key)
                    .first()
                )
                if existing is not None:
                    logger.info(
                        "Posting already recorded",
                        extra={
                            "cashbox_id": cashbox.id,
                            "entry_id": existing.id,
                            "idempotency_key": idempotency_key,
                        },
                    )
                    return existing

            if not cashbox.is_active:
                logger.warning(
                    "Rejected posting on inactive cashbox",
                    extra={"cashbox_id": cashbox.id, "category": category},
                )
                raise InactiveCashbox(
                    f"Cashbox {cashbox.id} is inactive",
                    details={"cashbox_id": cashbox.id},
                )

            delta = amount if params.direction == EntryDirection.INCOME else -amount
            entry = LedgerService._append(
                cashbox,
                direction=params.direction,
                amount=amount,
                delta=delta,
                category=category,
                actor=params.actor,
                reference=reference,
                description=params.description,
                metadata=metadata,
            )

        logger.info(
            "Posted %s",
            entry.direction,
            extra={
                "cashbox_id": cashbox.id,
                "entry_id": entry.id,
                "amount": str(entry.amount),
                "balance_after": str(entry.balance_after),
                "category": entry.category,
            },
        )
        return entry

    @staticmethod
    def post_income(
        cashbox_id: int,
        amount: Any,
        category: str,
        actor: Any,
        reference: Reference | None = None,
        description: str = "",
        metadata: dict[str, Any] | None = None,
    ) -> LedgerEntry:
        """Post an income entry. See post()."""
        return LedgerService.post(
            PostingParams(
                cashbox_id=cashbox_id,
                direction=EntryDirection.INCOME,
                amount=amount,
                category=category,
                actor=actor,
                reference=reference,
                description=description,
                metadata=metadata or {},
            )
        )

    @staticmethod
    def post_expense(
        cashbox_id: int,
        amount: Any,
        category: str,
        actor: Any,
        reference: Reference | None = None,
        description: str = "",
        metadata: dict[str, Any] | None = None,
    ) -> LedgerEntry:
        """Post an expense entry. See post()."""
        return LedgerService.post(
            PostingParams(
                cashbox_id=cashbox_id,
                direction=EntryDirection.EXPENSE,
                amount=amount,
                category=category,
                actor=actor,
                reference=reference,
                description=description,
                metadata=metadata or {},
            )
        )

    # -------------------------------------------------------------------------
    # Collaborator helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def record_payment(
        cashbox_id: int,
        amount: Any,
        payment_id: Any,
        actor: Any,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> LedgerEntry:
        """Record an order payment received at the branch."""
        return LedgerService.post_income(
            cashbox_id,
            amount,
            EntryCategory.PAYMENT,
            actor,
            reference=Reference.of("payment", payment_id),
            description=description or f"Payment #{payment_id}",
            metadata=metadata,
        )

    @staticmethod
    def record_custody_deposit(
        cashbox_id: int,
        amount: Any,
        custody_id: Any,
        actor: Any,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> LedgerEntry:
        """Record a cash custody (security deposit) taken for a rental."""
        return LedgerService.post_income(
            cashbox_id,
            amount,
            EntryCategory.CUSTODY_DEPOSIT,
            actor,
            reference=Reference.of("custody", custody_id),
            description=description or f"Custody deposit #{custody_id}",
            metadata=metadata,
        )

    @staticmethod
    def record_custody_return(
        cashbox_id: int,
        amount: Any,
        custody_id: Any,
        actor: Any,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> LedgerEntry:
        """
        Return a cash custody to the client.

        Raises InsufficientFunds when the cashbox can't cover the refund;
        the calling workflow must surface that to the operator.
        """
        return LedgerService.post_expense(
            cashbox_id,
            amount,
            EntryCategory.CUSTODY_RETURN,
            actor,
            reference=Reference.of("custody", custody_id),
            description=description or f"Custody return #{custody_id}",
            metadata=metadata,
        )

    @staticmethod
    def record_expense(
        cashbox_id: int,
        amount: Any,
        expense_id: Any,
        actor: Any,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> LedgerEntry:
        """Record a branch expense paid from the cashbox."""
        return LedgerService.post_expense(
            cashbox_id,
            amount,
            EntryCategory.EXPENSE,
            actor,
            reference=Reference.of("expense", expense_id),
            description=description or f"Expense #{expense_id}",
            metadata=metadata,
        )

    @staticmethod
    def record_receivable_payment(
        cashbox_id: int,
        amount: Any,
        receivable_id: Any,
        actor: Any,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> LedgerEntry:
        """Record money collected against an outstanding receivable."""
        return LedgerService.post_income(
            cashbox_id,
            amount,
            EntryCategory.RECEIVABLE_PAYMENT,
            actor,
            reference=Reference.of("receivable", receivable_id),
            description=description or f"Receivable payment #{receivable_id}",
            metadata=metadata,
        )

    @staticmethod
    def record_salary_payout(
        cashbox_id: int,
        amount: Any,
        payroll_id: Any,
        actor: Any,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> LedgerEntry:
        """Pay a payroll run out of the cashbox."""
        return LedgerService.post_expense(
            cashbox_id,
            amount,
            EntryCategory.SALARY_EXPENSE,
            actor,
            reference=Reference.of("payroll", payroll_id),
            description=description or f"Salary payout #{payroll_id}",
            metadata=metadata,
        )

    # =========================================================================
    # Reversal
    # =========================================================================

    @staticmethod
    def get_entry(entry_id: int) -> LedgerEntry:
        """
        Get entry by ID.

        Raises:
            EntryNotFound: If entry doesn't exist
        """
        entry = (
            LedgerEntry.objects.select_related("cashbox", "reversed_entry", "created_by")
            .with_reversal_flag()
            .filter(pk=entry_id)
            .first()
        )
        if entry is None:
            raise EntryNotFound(
                f"Ledger entry {entry_id} not found",
                details={"entry_id": entry_id},
            )
        return entry

    @staticmethod
    def reverse(entry_id: int, actor: Any, notes: str | None = None) -> LedgerEntry:
        """
        Offset a previously posted entry with a new reversal entry.

        The original entry is never modified. Reversing an income behaves
        like an expense of the same amount and is subject to the same
        non-negative balance check; reversing an expense behaves like an
        income.

        The reversal copies the original's reference, and records the
        original's direction and category plus the reason in its metadata.

        Args:
            entry_id: ID of the entry to reverse
            actor: User performing the correction
            notes: Reason for the reversal

        Returns:
            The new reversal LedgerEntry

        Raises:
            EntryNotFound: If the entry doesn't exist
            ReversalNotAllowed: If the entry is itself a reversal
            AlreadyReversed: If a reversal of this entry already exists
            InactiveCashbox: If the cashbox is deactivated
            InsufficientFunds: If reversing an income would make the
                balance negative
        """
        _require_actor(actor)
        original = LedgerEntry.objects.filter(pk=entry_id).first()
        if original is None:
            raise EntryNotFound(
                f"Ledger entry {entry_id} not found",
                details={"entry_id": entry_id},
            )
        if original.direction == EntryDirection.REVERSAL:
            raise ReversalNotAllowed(
                f"Ledger entry {entry_id} is a reversal and cannot be reversed",
                details={"entry_id": entry_id},
            )

        reason = notes or ""
        with cashbox_lock(original.cashbox_id) as cashbox:
            if LedgerEntry.objects.filter(reversed_entry=original).exists():
                raise AlreadyReversed(
                    f"Ledger entry {entry_id} has already been reversed",
                    details={"entry_id": entry_id},
                )
            if not cashbox.is_active:
                raise InactiveCashbox(
                    f"Cashbox {cashbox.id} is inactive",
                    details={"cashbox_id": cashbox.id},
                )

            description = f"REVERSAL: {original.description}"
            if reason:
                description = f"{description}. Reason: {reason}"

            try:
                entry = LedgerService._append(
                    cashbox,
                    direction=EntryDirection.REVERSAL,
                    amount=original.amount,
                    delta=-original.signed_amount,
                    category=EntryCategory.REVERSAL,
                    actor=actor,
                    reference=original.reference,
                    description=description,
                    metadata={
                        "original_entry_id": original.id,
                        "original_direction": original.direction,
                        "original_category": original.category,
                        "reversal_reason": reason,
                    },
                    reversed_entry=original,
                )
            except IntegrityError as e:
                raise AlreadyReversed(
                    f"Ledger entry {entry_id} has already been reversed",
                    details={"entry_id": entry_id},
                ) from e

        logger.info(
            "Reversed entry",
            extra={
                "cashbox_id": cashbox.id,
                "entry_id": entry.id,
                "reversed_entry_id": original.id,
                "amount": str(entry.amount),
                "balance_after": str(entry.balance_after),
            },
        )
        return entry

    @staticmethod
    def is_reversed(entry_id: int) -> bool:
        """Whether a reversal entry exists for the given entry."""
        return LedgerEntry.objects.filter(reversed_entry_id=entry_id).exists()

    # =========================================================================
    # Reconciliation
    # =========================================================================

    @staticmethod
    def recalculate(cashbox_id: int, dry_run: bool = False) -> ReconciliationReport:
        """
        Rebuild a cashbox's cached balance by replaying its entries.

        Takes the same lock as postings, so it can't interleave with one.
        The replayed value is written as-is, even if negative; a negative
        result is evidence of a deeper problem and is reported, not hidden.
        Entries are never touched.

        Args:
            cashbox_id: ID of the cashbox
            dry_run: Report drift without writing the corrected balance

        Returns:
            ReconciliationReport with old/new balance and whether they differ

        Raises:
            CashboxNotFound: If the cashbox doesn't exist
        """
        with cashbox_lock(cashbox_id) as cashbox:
            old_balance = cashbox.current_balance
            new_balance = cashbox.compute_balance()
            corrected = old_balance != new_balance

            if corrected and not dry_run:
                cashbox.current_balance = new_balance
                cashbox.save(update_fields=["current_balance", "updated_at"])

        report = ReconciliationReport(
            cashbox_id=cashbox.id,
            old_balance=old_balance,
            new_balance=new_balance,
            corrected=corrected,
        )
        if corrected:
            logger.warning(
                "Cashbox balance drift %s",
                "detected" if dry_run else "corrected",
                extra=report.to_dict(),
            )
        return report

    # =========================================================================
    # Queries
    # =========================================================================

    @staticmethod
    def get_balance(cashbox_id: int) -> Decimal:
        """
        Get the cached balance of a cashbox (no replay).

        Raises:
            CashboxNotFound: If cashbox doesn't exist
        """
        balance = (
            Cashbox.objects.filter(pk=cashbox_id)
            .values_list("current_balance", flat=True)
            .first()
        )
        if balance is None:
            raise CashboxNotFound(
                f"Cashbox {cashbox_id} not found",
                details={"cashbox_id": cashbox_id},
            )
        return balance

    @staticmethod
    def list_entries(
        cashbox_id: int,
        start_date: datetime.date | None = None,
        end_date: datetime.date | None = None,
        category: str | None = None,
        direction: str | None = None,
        reference_type: str | None = None,
        reference_id: str | None = None,
    ) -> QuerySet[LedgerEntry]:
        """
        Entries of a cashbox in posting order (ascending id).

        The result is a plain queryset, so callers page through it with
        keyset filters on id; no cursor state is kept server-side.

        Args:
            cashbox_id: ID of the cashbox
            start_date: First day included (current time zone)
            end_date: Last day included (current time zone)
            category: Exact category
            direction: income, expense or reversal
            reference_type: Collaborator entity type
            reference_id: Collaborator entity id

        Raises:
            CashboxNotFound: If cashbox doesn't exist
        """
        if not Cashbox.objects.filter(pk=cashbox_id).exists():
            raise CashboxNotFound(
                f"Cashbox {cashbox_id} not found",
                details={"cashbox_id": cashbox_id},
            )

        entries = LedgerEntry.objects.for_cashbox(cashbox_id)
        if start_date:
            entries = entries.filter(created_at__gte=start_of_day(start_date))
        if end_date:
            entries = entries.filter(
                created_at__lt=start_of_day(end_date + datetime.timedelta(days=1))
            )
        if category:
            entries = entries.filter(category=category)
        if direction:
            entries = entries.filter(direction=direction)
        if reference_type:
            entries = entries.filter(reference_type=reference_type)
        if reference_id:
            entries = entries.filter(reference_id=str(reference_id))

        return (
            entries.select_related("created_by", "reversed_entry")
            .with_reversal_flag()
            .order_by("id")
        )

    @staticmethod
    def find_by_idempotency_key(cashbox_id: int, key: str) -> LedgerEntry | None:
        """Return the entry posted with this idempotency key, if any."""
        return (
            LedgerEntry.objects.for_cashbox(cashbox_id)
            .with_idempotency_key(key)
            .first()
        )

    @staticmethod
    def get_entries_by_reference(kind: str, id: Any) -> list[LedgerEntry]:
        """All entries caused by one collaborator entity, oldest first."""
        return list(LedgerEntry.objects.by_reference(kind, id).order_by("id"))

    @staticmethod
    def balance_at(cashbox_id: int, date: datetime.date) -> Decimal:
        """
        Replayed balance at the end of ``date``.

        Raises:
            CashboxNotFound: If cashbox doesn't exist
        """
        return LedgerService.get_cashbox(cashbox_id).balance_at(date)

    @staticmethod
    def daily_summary(cashbox_id: int, date: datetime.date) -> DailySummary:
        """
        Summarize one day of activity on a cashbox.

        Raises:
            CashboxNotFound: If cashbox doesn't exist
        """
        cashbox = LedgerService.get_cashbox(cashbox_id)
        day_start = start_of_day(date)
        day_end = start_of_day(date + datetime.timedelta(days=1))

        entries = LedgerEntry.objects.for_cashbox(cashbox.id).filter(
            created_at__gte=day_start, created_at__lt=day_end
        )
        totals = entries.aggregate(
            income=Sum("amount", filter=Q(direction=EntryDirection.INCOME)),
            expense=Sum("amount", filter=Q(direction=EntryDirection.EXPENSE)),
            reversal_count=Count("id", filter=Q(direction=EntryDirection.REVERSAL)),
            entry_count=Count("id"),
        )
        opening = cashbox.compute_balance(before=day_start)
        net = signed_total(entries)
        income = totals["income"] or ZERO
        expense = totals["expense"] or ZERO

        return DailySummary(
            cashbox_id=cashbox.id,
            date=date,
            opening_balance=opening,
            total_income=income,
            total_expense=expense,
            reversal_count=totals["reversal_count"],
            reversal_net=net - income + expense,
            closing_balance=opening + net,
            entry_count=totals["entry_count"],
        )


class ReconciliationService(BaseService):
    """
    Batch recalculation of cashbox balances.

    Used by the periodic Celery task and the recalculate_cashboxes
    management command.
    """

    @classmethod
    def run_sweep(
        cls,
        cashbox_ids: list[int] | None = None,
        dry_run: bool = False,
    ) -> ServiceResult[SweepResult]:
        """
        Recalculate each cashbox, one lock at a time.

        Args:
            cashbox_ids: Restrict to these cashboxes (default: all)
            dry_run: Report drift without correcting it

        Returns:
            ServiceResult with a SweepResult; fails only when a requested
            cashbox doesn't exist
        """
        log = cls.get_logger()
        ids = list(
            Cashbox.objects.filter(pk__in=cashbox_ids).values_list("pk", flat=True)
            if cashbox_ids
            else Cashbox.objects.values_list("pk", flat=True)
        )
        if cashbox_ids:
            missing = sorted(set(cashbox_ids) - set(ids))
            if missing:
                return ServiceResult.failure(
                    f"Cashboxes not found: {missing}",
                    error_code=CashboxNotFound.default_error_code,
                )

        result = SweepResult()
        for cashbox_id in sorted(ids):
            result.add(LedgerService.recalculate(cashbox_id, dry_run=dry_run))

        log.info(
            "Reconciliation sweep finished",
            extra={
                "checked": result.checked,
                "corrected": result.corrected,
                "dry_run": dry_run,
            },
        )
        return ServiceResult.ok(result)


# Singleton instance for convenience
# Usage: from ledger.services import ledger
ledger = LedgerService()
