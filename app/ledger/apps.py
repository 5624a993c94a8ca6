"""
Ledger app configuration.

This app provides the branch cashbox ledger:
- Cashboxes with a cached, never-negative balance
- Append-only income/expense/reversal entries
- Scheduled reconciliation of cached balances
"""

from django.apps import AppConfig


class LedgerConfig(AppConfig):
    """Configuration for the ledger application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "ledger"
    verbose_name = "Cashbox Ledger"
