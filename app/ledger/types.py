"""
Data types for ledger operations.

This module defines dataclasses used throughout the ledger system
for type-safe data transfer between layers.

Types:
    Reference: Polymorphic pointer to the business object behind an entry
    PostingParams: Parameters for a single income/expense posting
    ReconciliationReport: Outcome of recalculating one cashbox
    DailySummary: One cashbox's activity for one calendar day
    SweepResult: Outcome of recalculating many cashboxes

Usage:
    from ledger.types import PostingParams, Reference

    params = PostingParams(
        cashbox_id=cashbox.id,
        direction="income",
        amount=Decimal("500.00"),
        category="payment",
        reference=Reference(kind="payment", id="42"),
        metadata={"idempotency_key": "payment:42"},
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import datetime
    from decimal import Decimal


@dataclass(frozen=True)
class Reference:
    """
    Pointer from an entry back to the collaborator entity that caused it.

    The ledger never dereferences it. ``kind`` names the entity type
    (payment, custody, expense, payroll, ...) and ``id`` is its identifier
    stored as text.

    Example:
        Reference(kind="custody", id="17")
    """

    kind: str
    id: str

    @classmethod
    def of(cls, kind: str | None, id: Any) -> Reference | None:
        """Build a reference, or None when either part is missing."""
        if not kind or id is None or id == "":
            return None
        return cls(kind=kind, id=str(id))

    def __str__(self) -> str:
        return f"{self.kind}:{self.id}"


@dataclass
class PostingParams:
    """
    Parameters for posting one entry through the posting engine.

    Required Attributes:
        cashbox_id: ID of the cashbox to post against
        direction: "income" or "expense"
        amount: Positive amount with at most two decimal places
        category: Free-form reporting label
        actor: User recording the posting

    Optional Attributes:
        reference: Collaborator entity that caused the posting
        description: Human-readable description
        metadata: Opaque collaborator context; an ``idempotency_key`` in
            here makes the posting safe to retry
    """

    cashbox_id: int
    direction: str
    amount: Any
    category: str
    actor: Any
    reference: Reference | None = None
    description: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def idempotency_key(self) -> str | None:
        key = (self.metadata or {}).get("idempotency_key")
        return str(key) if key else None


@dataclass(frozen=True)
class ReconciliationReport:
    """
    Result of replaying a cashbox's entry stream.

    Attributes:
        cashbox_id: The cashbox that was recalculated
        old_balance: Cached balance before the run
        new_balance: Balance implied by initial_balance plus all entries
        corrected: Whether the cached balance was (or would be) overwritten
    """

    cashbox_id: int
    old_balance: Decimal
    new_balance: Decimal
    corrected: bool

    @property
    def drift(self) -> Decimal:
        return self.new_balance - self.old_balance

    def to_dict(self) -> dict[str, Any]:
        return {
            "cashbox_id": self.cashbox_id,
            "old_balance": str(self.old_balance),
            "new_balance": str(self.new_balance),
            "corrected": self.corrected,
        }


@dataclass(frozen=True)
class DailySummary:
    """
    Activity of one cashbox over one calendar day.

    ``reversal_net`` is the signed effect of that day's reversals on the
    balance, so ``closing_balance == opening_balance + total_income
    - total_expense + reversal_net``.
    """

    cashbox_id: int
    date: datetime.date
    opening_balance: Decimal
    total_income: Decimal
    total_expense: Decimal
    reversal_count: int
    reversal_net: Decimal
    closing_balance: Decimal
    entry_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "cashbox_id": self.cashbox_id,
            "date": self.date.isoformat(),
            "opening_balance": str(self.opening_balance),
            "total_income": str(self.total_income),
            "total_expense": str(self.total_expense),
            "reversal_count": self.reversal_count,
            "reversal_net": str(self.reversal_net),
            "closing_balance": str(self.closing_balance),
            "entry_count": self.entry_count,
        }


@dataclass
class SweepResult:
    """Summary of a reconciliation run over several cashboxes."""

    checked: int = 0
    corrected: int = 0
    reports: list[ReconciliationReport] = field(default_factory=list)

    def add(self, report: ReconciliationReport) -> None:
        self.checked += 1
        if report.corrected:
            self.corrected += 1
        self.reports.append(report)

    def to_dict(self) -> dict[str, Any]:
        return {
            "checked": self.checked,
            "corrected": self.corrected,
            "corrected_cashboxes": [
                r.to_dict() for r in self.reports if r.corrected
            ],
        }
