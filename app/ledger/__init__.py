"""
Ledger - Append-only cash ledger for branch cashboxes.

Every branch owns one cashbox. Money moving through a branch is recorded
as immutable entries on that cashbox's ledger, and the cashbox keeps a
cached balance that must never go negative.

Public API:
    Models (import from ledger.models):
        Cashbox - Per-branch cash register with cached balance
        LedgerEntry - Immutable income/expense/reversal record
        EntryDirection - Enum of entry directions
        EntryCategory - Catalog of known reporting categories

    Service (import from ledger.services):
        ledger - Singleton instance of LedgerService
        LedgerService - Posting engine, reversals, reconciliation, queries
        ReconciliationService - Batch recalculation used by tasks/commands

    Types (import from ledger.types):
        Reference - Pointer to the collaborator entity behind an entry
        PostingParams - Parameters for a posting
        ReconciliationReport - Result of recalculating a cashbox

    Exceptions (import from ledger.exceptions):
        LedgerError - Base exception for ledger operations
        InsufficientFunds - Expense or reversal would overdraw the cashbox
        InactiveCashbox, InvalidAmount, InvalidDirection, CashboxNotFound,
        EntryNotFound, AlreadyReversed, ReversalNotAllowed,
        ImmutableEntryError

Usage:
    from ledger.exceptions import InsufficientFunds
    from ledger.services import ledger

    try:
        ledger.record_custody_return(
            cashbox_id=cashbox.id,
            amount=Decimal("300.00"),
            custody_id=custody.id,
            actor=request.user,
        )
    except InsufficientFunds as e:
        # Tell the operator; never drop the refund silently
        messages.error(request, e.user_message)

Note:
    Models are not imported here to avoid AppRegistryNotReady errors.
"""
