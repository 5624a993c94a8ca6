"""
Custom QuerySet and Manager classes for common patterns.

This module provides:
- AppendOnlyQuerySet: Rejects bulk update and delete

Usage:
    from core.managers import AppendOnlyQuerySet

    class LedgerEntry(models.Model):
        objects = AppendOnlyQuerySet.as_manager()

    LedgerEntry.objects.filter(cashbox=cashbox)        # Reads work as usual
    LedgerEntry.objects.filter(cashbox=cashbox).delete()  # Raises

Related:
    - ledger.models.LedgerEntry: Blocks instance-level save()/delete() as well
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import models

from core.exceptions import ConflictError

if TYPE_CHECKING:
    from typing import Any


class AppendOnlyQuerySet(models.QuerySet):
    """
    QuerySet for tables whose rows are written once and never changed.

    Bulk update(), delete() and bulk_update() raise the model's
    ``immutable_error`` (a class attribute holding an exception type).
    Inserts through create() and bulk_create() are unaffected.
    """

    def _reject(self, operation: str) -> None:
        error_class = getattr(self.model, "immutable_error", ConflictError)
        raise error_class(
            f"{self.model._meta.label} rows are append-only; {operation} is not allowed",
            details={"operation": operation, "model": self.model._meta.label},
        )

    def update(self, **kwargs: Any) -> int:
        self._reject("update")
        return 0

    def delete(self) -> tuple[int, dict[str, int]]:
        self._reject("delete")
        return 0, {}

    def bulk_update(self, objs, fields, batch_size=None) -> int:
        self._reject("bulk_update")
        return 0

    def update_or_create(self, defaults=None, **kwargs):
        self._reject("update_or_create")

