"""
Tests for the application exception hierarchy.
"""

from decimal import Decimal

from core.exceptions import BaseApplicationError, ConflictError, NotFoundError
from ledger.exceptions import (
    CashboxNotFound,
    InsufficientFunds,
    InvalidAmount,
    LedgerError,
)


class TestBaseApplicationError:
    def test_default_error_code(self):
        error = NotFoundError("Branch 1 not found")

        assert error.error_code == "NOT_FOUND"
        assert error.details == {}
        assert str(error) == "[NOT_FOUND] Branch 1 not found"

    def test_custom_error_code_and_details(self):
        error = ConflictError("taken", error_code="BRANCH_CODE_TAKEN", details={"code": "A"})

        assert error.to_dict() == {
            "error": "taken",
            "error_code": "BRANCH_CODE_TAKEN",
            "details": {"code": "A"},
        }

    def test_to_dict_omits_empty_details(self):
        assert "details" not in BaseApplicationError("boom").to_dict()

    def test_repr(self):
        assert repr(ConflictError("x")) == (
            "ConflictError(message='x', error_code='CONFLICT', details={})"
        )


class TestLedgerErrors:
    def test_ledger_errors_are_application_errors(self):
        assert issubclass(LedgerError, BaseApplicationError)
        assert InvalidAmount("bad").http_status == 400
        assert CashboxNotFound("missing").http_status == 404

    def test_insufficient_funds_carries_amounts(self):
        error = InsufficientFunds(
            cashbox_id=3,
            required=Decimal("600.00"),
            available=Decimal("500.00"),
        )

        assert error.http_status == 409
        assert error.error_code == "INSUFFICIENT_FUNDS"
        assert error.message == (
            "Cashbox balance too low to complete this operation: "
            "cashbox 3 requires 600.00, available 500.00"
        )
        assert error.details == {
            "cashbox_id": 3,
            "required": "600.00",
            "available": "500.00",
        }

    def test_insufficient_funds_merges_extra_details(self):
        error = InsufficientFunds(
            cashbox_id=3,
            required=Decimal("1.00"),
            available=Decimal("0.00"),
            details={"custody_id": 9},
        )

        assert error.details["custody_id"] == 9
        assert error.details["available"] == "0.00"
