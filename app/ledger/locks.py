"""
Per-cashbox locking for the posting engine.

Every operation that reads a cashbox balance and then writes it (posting,
reversal, recalculation) runs inside ``cashbox_lock``. The lock is a
row-level ``SELECT ... FOR UPDATE`` on the cashbox row, held until the
surrounding transaction commits or rolls back, so:

- two writers on the same cashbox are serialized
- writers on different cashboxes never wait on each other
- the balance checked is always a fresh read taken under the lock

Usage:
    from ledger.locks import cashbox_lock

    with cashbox_lock(cashbox_id) as cashbox:
        new_balance = cashbox.current_balance - amount
        ...

Note:
    Backends without row locks (SQLite) ignore FOR UPDATE; SQLite instead
    serializes writers on the whole database file.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

from django.db import transaction

from .exceptions import CashboxNotFound
from .models import Cashbox

if TYPE_CHECKING:
    from collections.abc import Generator


def lock_cashbox(cashbox_id: int) -> Cashbox:
    """
    Lock a cashbox row and return a fresh copy of it.

    Args:
        cashbox_id: Primary key of the cashbox

    Returns:
        The locked Cashbox, read after the lock was granted

    Raises:
        CashboxNotFound: If the cashbox doesn't exist
        TransactionManagementError: If called outside a transaction

    Note:
        Must be called within a transaction. The lock is held until the
        transaction commits or rolls back.
    """
    cashbox = Cashbox.objects.select_for_update().filter(pk=cashbox_id).first()
    if cashbox is None:
        raise CashboxNotFound(
            f"Cashbox {cashbox_id} not found",
            details={"cashbox_id": cashbox_id},
        )
    return cashbox


@contextmanager
def cashbox_lock(cashbox_id: int) -> Generator[Cashbox, None, None]:
    """
    Open a transaction, lock the cashbox and yield it.

    Any exception raised inside the block rolls back every write made in
    it, which is how a failed posting leaves neither entry nor balance
    change behind.
    """
    with transaction.atomic():
        yield lock_cashbox(cashbox_id)
