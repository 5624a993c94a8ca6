"""
Tests for balance recalculation and the reconciliation sweep.

Drift is simulated by writing current_balance behind the ledger's back
with a queryset update on Cashbox (entries are never touched).
"""

from decimal import Decimal

import pytest

from ledger.exceptions import CashboxNotFound
from ledger.models import Cashbox, LedgerEntry
from ledger.services import LedgerService, ReconciliationService
from ledger.tests.factories import CashboxFactory, post_entry
from ledger.types import ReconciliationReport, SweepResult


def _corrupt(cashbox, value):
    Cashbox.objects.filter(pk=cashbox.pk).update(current_balance=Decimal(value))


class TestRecalculate:
    def test_restores_drifted_balance(self, cashbox, cashier):
        post_entry(cashbox, "income", "500.00", actor=cashier)
        post_entry(cashbox, "expense", "120.00", actor=cashier)
        _corrupt(cashbox, "9999.00")

        report = LedgerService.recalculate(cashbox.id)

        assert report.old_balance == Decimal("9999.00")
        assert report.new_balance == Decimal("1380.00")
        assert report.corrected is True
        assert report.drift == Decimal("-8619.00")
        assert LedgerService.get_balance(cashbox.id) == Decimal("1380.00")

    def test_consistent_balance_reports_no_correction(self, cashbox, cashier):
        post_entry(cashbox, "income", "500.00", actor=cashier)

        report = LedgerService.recalculate(cashbox.id)

        assert report.corrected is False
        assert report.old_balance == report.new_balance == Decimal("1500.00")

    def test_second_run_is_a_no_op(self, cashbox):
        _corrupt(cashbox, "1.00")

        assert LedgerService.recalculate(cashbox.id).corrected is True
        assert LedgerService.recalculate(cashbox.id).corrected is False

    def test_dry_run_does_not_write(self, cashbox):
        _corrupt(cashbox, "1.00")

        report = LedgerService.recalculate(cashbox.id, dry_run=True)

        assert report.corrected is True
        assert report.new_balance == Decimal("1000.00")
        assert LedgerService.get_balance(cashbox.id) == Decimal("1.00")

    def test_entries_untouched(self, cashbox, cashier):
        post_entry(cashbox, "income", "5.00", actor=cashier)
        before = list(LedgerEntry.objects.values())
        _corrupt(cashbox, "0.00")

        LedgerService.recalculate(cashbox.id)

        assert list(LedgerEntry.objects.values()) == before

    def test_negative_replay_is_written_as_is(self, db, cashier):
        """Replay below zero is reported, not clamped."""
        cashbox = CashboxFactory(initial_balance=Decimal("100.00"))
        post_entry(cashbox, "expense", "80.00", actor=cashier)
        Cashbox.objects.filter(pk=cashbox.pk).update(initial_balance=Decimal("0.00"))

        report = LedgerService.recalculate(cashbox.id)

        assert report.new_balance == Decimal("-80.00")
        assert LedgerService.get_balance(cashbox.id) == Decimal("-80.00")

    def test_unknown_cashbox(self, db):
        with pytest.raises(CashboxNotFound):
            LedgerService.recalculate(123456)


class TestReconciliationSweep:
    def test_checks_every_cashbox(self, cashbox, empty_cashbox):
        _corrupt(empty_cashbox, "42.00")

        result = ReconciliationService.run_sweep()

        assert result.success is True
        assert result.data.checked == 2
        assert result.data.corrected == 1
        assert result.data.to_dict()["corrected_cashboxes"] == [
            {
                "cashbox_id": empty_cashbox.id,
                "old_balance": "42.00",
                "new_balance": "0.00",
                "corrected": True,
            }
        ]
        assert LedgerService.get_balance(empty_cashbox.id) == Decimal("0.00")

    def test_restricted_to_given_ids(self, cashbox, empty_cashbox):
        _corrupt(cashbox, "0.00")
        _corrupt(empty_cashbox, "1.00")

        result = ReconciliationService.run_sweep(cashbox_ids=[empty_cashbox.id])

        assert result.data.checked == 1
        assert LedgerService.get_balance(cashbox.id) == Decimal("0.00")

    def test_dry_run(self, cashbox):
        _corrupt(cashbox, "0.00")

        result = ReconciliationService.run_sweep(dry_run=True)

        assert result.data.corrected == 1
        assert LedgerService.get_balance(cashbox.id) == Decimal("0.00")

    def test_missing_cashbox_fails(self, cashbox):
        result = ReconciliationService.run_sweep(cashbox_ids=[cashbox.id, 999999])

        assert result.success is False
        assert result.error_code == "CASHBOX_NOT_FOUND"
        assert "999999" in result.error

    def test_no_cashboxes(self, db):
        result = ReconciliationService.run_sweep()

        assert result.success is True
        assert result.data.checked == 0


class TestSweepResult:
    def test_add_counts_corrections(self):
        sweep = SweepResult()
        sweep.add(ReconciliationReport(1, Decimal("1.00"), Decimal("1.00"), False))
        sweep.add(ReconciliationReport(2, Decimal("1.00"), Decimal("2.00"), True))

        assert sweep.checked == 2
        assert sweep.corrected == 1
        assert [r["cashbox_id"] for r in sweep.to_dict()["corrected_cashboxes"]] == [2]
