"""
Ledger-specific exceptions for cashbox operations.

This module provides a hierarchy of exceptions for ledger operations,
inheriting from the core exception base class for API consistency.

Exception Hierarchy:
    LedgerError (base)
    ├── InvalidAmount - Zero, negative or malformed amount
    ├── InvalidDirection - Direction other than income/expense on a posting
    ├── CashboxNotFound - Cashbox lookup failures
    ├── EntryNotFound - Entry lookup failures
    ├── InactiveCashbox - Posting against a disabled cashbox
    ├── InsufficientFunds - Posting would drive the balance below zero
    ├── AlreadyReversed - Entry already has a reversal
    ├── ReversalNotAllowed - Entry is itself a reversal
    └── ImmutableEntryError - Attempt to update or delete a committed entry

Usage:
    from ledger.exceptions import InsufficientFunds

    try:
        ledger.record_custody_return(...)
    except InsufficientFunds as e:
        return Response(e.to_dict(), status=409)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from decimal import Decimal
    from typing import Any


class LedgerError(BaseApplicationError):
    """
    Base exception for all ledger operations.

    Every subclass carries an ``http_status`` used by the API layer to
    translate the failure. Anything other than InsufficientFunds points at
    a programmer or data error in the calling workflow.
    """

    default_error_code: str = "LEDGER_ERROR"
    http_status: int = 400


class InvalidAmount(LedgerError):
    """
    Raised when an amount is zero, negative, non-finite, non-numeric
    or carries more than two decimal places.

    Always raised before any lock is taken.
    """

    default_error_code: str = "INVALID_AMOUNT"


class InvalidDirection(LedgerError):
    """
    Raised when a posting uses a direction other than income or expense.

    Reversal entries can only be created through LedgerService.reverse().
    """

    default_error_code: str = "INVALID_DIRECTION"


class CashboxNotFound(LedgerError):
    """Raised when a cashbox cannot be found."""

    default_error_code: str = "CASHBOX_NOT_FOUND"
    http_status: int = 404


class EntryNotFound(LedgerError):
    """Raised when a ledger entry cannot be found."""

    default_error_code: str = "ENTRY_NOT_FOUND"
    http_status: int = 404


class InactiveCashbox(LedgerError):
    """
    Raised when posting against a deactivated cashbox.

    Inactive cashboxes stay readable; only new postings are rejected.
    """

    default_error_code: str = "INACTIVE_CASHBOX"
    http_status: int = 409


class InsufficientFunds(LedgerError):
    """
    Raised when an expense (or the reversal of an income) would drive
    the cashbox balance below zero.

    This is the one failure detected inside the critical section, since it
    depends on the balance read under the cashbox lock. Workflows must
    surface it to the operator rather than dropping the posting.

    Attributes:
        cashbox_id: The cashbox that lacked funds
        required: The amount that was required
        available: The balance available when the check ran
    """

    default_error_code: str = "INSUFFICIENT_FUNDS"
    http_status: int = 409
    user_message: str = "Cashbox balance too low to complete this operation"

    def __init__(
        self,
        cashbox_id: int,
        required: Decimal,
        available: Decimal,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize with cashbox details and amounts.

        Args:
            cashbox_id: ID of the cashbox with insufficient funds
            required: Amount required
            available: Balance available
            error_code: Optional custom error code
            details: Optional additional error context
        """
        self.cashbox_id = cashbox_id
        self.required = required
        self.available = available

        message = (
            f"{self.user_message}: cashbox {cashbox_id} "
            f"requires {required}, available {available}"
        )

        full_details = {
            "cashbox_id": cashbox_id,
            "required": str(required),
            "available": str(available),
        }
        if details:
            full_details.update(details)

        super().__init__(
            message=message,
            error_code=error_code,
            details=full_details,
        )


class AlreadyReversed(LedgerError):
    """Raised when reversing an entry that already has a reversal entry."""

    default_error_code: str = "ALREADY_REVERSED"
    http_status: int = 409


class ReversalNotAllowed(LedgerError):
    """Raised when reversing an entry that is itself a reversal."""

    default_error_code: str = "REVERSAL_NOT_ALLOWED"
    http_status: int = 409


class ImmutableEntryError(LedgerError):
    """
    Raised on any attempt to update or delete a committed ledger entry.

    Corrections are made with a reversal entry, never by editing history.
    """

    default_error_code: str = "IMMUTABLE_ENTRY"
    http_status: int = 409
