"""
Tests for the ledger API.

Covers permissions per action, error translation (ledger exceptions to
HTTP status codes), cursor pagination and filtering of entry listings.
"""

from decimal import Decimal

import pytest
from django.urls import reverse
from freezegun import freeze_time
from rest_framework import status

from ledger.models import LedgerEntry
from ledger.services import LedgerService
from ledger.tests.factories import post_entry


def cashbox_url(cashbox, action=None):
    if action is None:
        return reverse("ledger:cashbox-detail", args=[cashbox.id])
    return reverse(f"ledger:cashbox-{action}", args=[cashbox.id])


def entry_url(entry, action=None):
    if action is None:
        return reverse("ledger:entry-detail", args=[entry.id])
    return reverse(f"ledger:entry-{action}", args=[entry.id])


class TestAuthentication:
    def test_anonymous_rejected(self, api_client, cashbox):
        response = api_client.get(cashbox_url(cashbox, "balance"))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestCashboxRead:
    def test_list(self, user_client, cashbox, inactive_cashbox):
        response = user_client.get(reverse("ledger:cashbox-list"))

        assert response.status_code == status.HTTP_200_OK
        ids = [row["id"] for row in response.data["results"]]
        assert ids == [cashbox.id, inactive_cashbox.id]

    def test_list_filtered_by_active(self, user_client, cashbox, inactive_cashbox):
        response = user_client.get(reverse("ledger:cashbox-list"), {"is_active": "false"})

        assert [row["id"] for row in response.data["results"]] == [inactive_cashbox.id]

    def test_retrieve(self, user_client, cashbox):
        response = user_client.get(cashbox_url(cashbox))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["branch_name"] == "Cairo Downtown"
        assert response.data["current_balance"] == "1000.00"
        assert response.data["currency"] == "EGP"

    def test_balance(self, user_client, cashbox):
        response = user_client.get(cashbox_url(cashbox, "balance"))

        assert response.data == {
            "cashbox_id": cashbox.id,
            "balance": "1000.00",
            "currency": "EGP",
        }

    def test_balance_unknown_cashbox(self, user_client, db):
        response = user_client.get(reverse("ledger:cashbox-balance", args=[999999]))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "CASHBOX_NOT_FOUND"


class TestCashboxUpdate:
    def test_staff_can_rename(self, manager_client, cashbox):
        response = manager_client.patch(
            cashbox_url(cashbox), {"name": "Front Desk"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["name"] == "Front Desk"

    def test_balance_fields_ignored(self, manager_client, cashbox):
        response = manager_client.patch(
            cashbox_url(cashbox), {"current_balance": "1.00"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert LedgerService.get_balance(cashbox.id) == Decimal("1000.00")

    def test_non_staff_forbidden(self, cashier_client, cashbox):
        response = cashier_client.patch(cashbox_url(cashbox), {"name": "X"}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestPostings:
    def test_income_created(self, cashier_client, cashbox, cashier):
        response = cashier_client.post(
            cashbox_url(cashbox, "postings"),
            {
                "direction": "income",
                "amount": "500.00",
                "category": "payment",
                "reference_type": "payment",
                "reference_id": "P-1",
            },
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["balance_after"] == "1500.00"
        assert response.data["reference_id"] == "P-1"
        assert response.data["created_by_email"] == cashier.email
        assert response.data["is_reversed"] is False

    def test_insufficient_funds_is_conflict(self, cashier_client, cashbox):
        response = cashier_client.post(
            cashbox_url(cashbox, "postings"),
            {"direction": "expense", "amount": "2000.00", "category": "refund"},
            format="json",
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "INSUFFICIENT_FUNDS"
        assert response.data["details"]["required"] == "2000.00"
        assert response.data["details"]["available"] == "1000.00"
        assert "balance too low" in response.data["error"]
        assert LedgerEntry.objects.count() == 0

    @pytest.mark.parametrize("amount", ["0", "-1", "1.234", "lots", "1e30", "1E+26"])
    def test_invalid_amount_is_bad_request(self, cashier_client, cashbox, amount):
        response = cashier_client.post(
            cashbox_url(cashbox, "postings"),
            {"direction": "income", "amount": amount, "category": "payment"},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_AMOUNT"

    def test_reversal_direction_not_accepted(self, cashier_client, cashbox):
        response = cashier_client.post(
            cashbox_url(cashbox, "postings"),
            {"direction": "reversal", "amount": "1.00", "category": "payment"},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "direction" in response.data

    def test_half_reference_rejected(self, cashier_client, cashbox):
        response = cashier_client.post(
            cashbox_url(cashbox, "postings"),
            {
                "direction": "income",
                "amount": "1.00",
                "category": "payment",
                "reference_type": "payment",
            },
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_inactive_cashbox_is_conflict(self, cashier_client, inactive_cashbox):
        response = cashier_client.post(
            cashbox_url(inactive_cashbox, "postings"),
            {"direction": "income", "amount": "1.00", "category": "payment"},
            format="json",
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "INACTIVE_CASHBOX"

    def test_idempotency_key_replays_entry(self, cashier_client, cashbox):
        body = {
            "direction": "income",
            "amount": "20.00",
            "category": "payment",
            "idempotency_key": "order-9-payment",
        }

        first = cashier_client.post(cashbox_url(cashbox, "postings"), body, format="json")
        second = cashier_client.post(cashbox_url(cashbox, "postings"), body, format="json")

        assert first.data["id"] == second.data["id"]
        assert first.data["metadata"]["idempotency_key"] == "order-9-payment"
        assert LedgerService.get_balance(cashbox.id) == Decimal("1020.00")

    def test_requires_post_permission(self, user_client, cashbox):
        response = user_client.post(
            cashbox_url(cashbox, "postings"),
            {"direction": "income", "amount": "1.00", "category": "payment"},
            format="json",
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestEntryListing:
    def test_entries_in_posting_order(self, user_client, cashbox, cashier):
        ids = [post_entry(cashbox, "income", "1.00", actor=cashier).id for _ in range(3)]

        response = user_client.get(cashbox_url(cashbox, "entries"))

        assert response.status_code == status.HTTP_200_OK
        assert [row["id"] for row in response.data["results"]] == ids

    def test_cursor_pages_are_restartable(self, user_client, cashbox, cashier):
        ids = [post_entry(cashbox, "income", "1.00", actor=cashier).id for _ in range(5)]

        first = user_client.get(cashbox_url(cashbox, "entries"), {"page_size": 2})
        post_entry(cashbox, "income", "1.00", actor=cashier)
        second = user_client.get(first.data["next"])
        second_again = user_client.get(first.data["next"])

        assert [row["id"] for row in first.data["results"]] == ids[:2]
        assert [row["id"] for row in second.data["results"]] == ids[2:4]
        assert second.data["results"] == second_again.data["results"]

    def test_filter_by_category_and_reference(self, user_client, cashbox, cashier):
        LedgerService.record_payment(cashbox.id, "10.00", payment_id=1, actor=cashier)
        expense = LedgerService.record_expense(cashbox.id, "5.00", expense_id=7, actor=cashier)

        response = user_client.get(
            cashbox_url(cashbox, "entries"),
            {"reference_type": "expense", "reference_id": "7", "category": "expense"},
        )

        assert [row["id"] for row in response.data["results"]] == [expense.id]

    def test_filter_by_date_range(self, user_client, cashbox, cashier):
        with freeze_time("2026-04-01 12:00:00"):
            post_entry(cashbox, "income", "1.00", actor=cashier)
        with freeze_time("2026-04-02 12:00:00"):
            second = post_entry(cashbox, "income", "1.00", actor=cashier)

        response = user_client.get(
            cashbox_url(cashbox, "entries"),
            {"start_date": "2026-04-02", "end_date": "2026-04-02"},
        )

        assert [row["id"] for row in response.data["results"]] == [second.id]

    def test_bad_filter_is_bad_request(self, user_client, cashbox):
        response = user_client.get(cashbox_url(cashbox, "entries"), {"start_date": "soon"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_reversed_flag_in_listing(self, user_client, cashbox, cashier):
        entry = post_entry(cashbox, "income", "1.00", actor=cashier)
        LedgerService.reverse(entry.id, actor=cashier)

        response = user_client.get(cashbox_url(cashbox, "entries"))

        flags = {row["id"]: row["is_reversed"] for row in response.data["results"]}
        assert flags[entry.id] is True


class TestReverseEndpoint:
    def test_reverse_creates_entry(self, cashier_client, cashbox, cashier):
        entry = post_entry(cashbox, "expense", "100.00", actor=cashier)

        response = cashier_client.post(
            entry_url(entry, "reverse"), {"notes": "Wrong till"}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["reversed_entry"] == entry.id
        assert response.data["direction"] == "reversal"
        assert response.data["balance_after"] == "1000.00"

    def test_second_reversal_is_conflict(self, cashier_client, cashbox, cashier):
        entry = post_entry(cashbox, "income", "1.00", actor=cashier)
        LedgerService.reverse(entry.id, actor=cashier)

        response = cashier_client.post(entry_url(entry, "reverse"), {}, format="json")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "ALREADY_REVERSED"

    def test_unknown_entry_is_not_found(self, cashier_client, db):
        response = cashier_client.post(
            reverse("ledger:entry-reverse", args=[424242]), {}, format="json"
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_requires_reverse_permission(self, user_client, cashbox, cashier):
        entry = post_entry(cashbox, "income", "1.00", actor=cashier)

        response = user_client.post(entry_url(entry, "reverse"), {}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_entry_detail(self, user_client, cashbox, cashier):
        entry = post_entry(cashbox, "income", "1.00", actor=cashier)

        response = user_client.get(entry_url(entry))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["amount"] == "1.00"

    def test_no_update_or_delete(self, manager_client, cashbox, cashier):
        entry = post_entry(cashbox, "income", "1.00", actor=cashier)

        patch = manager_client.patch(entry_url(entry), {"amount": "9.00"}, format="json")
        delete = manager_client.delete(entry_url(entry))

        assert patch.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
        assert delete.status_code == status.HTTP_405_METHOD_NOT_ALLOWED


class TestMaintenanceEndpoints:
    def test_recalculate(self, manager_client, cashbox):
        response = manager_client.post(cashbox_url(cashbox, "recalculate"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["corrected"] is False
        assert response.data["new_balance"] == "1000.00"

    def test_recalculate_requires_staff(self, cashier_client, cashbox):
        response = cashier_client.post(cashbox_url(cashbox, "recalculate"))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_deactivate_then_reactivate(self, manager_client, cashbox):
        off = manager_client.post(cashbox_url(cashbox, "deactivate"))
        on = manager_client.post(cashbox_url(cashbox, "reactivate"))

        assert off.data["is_active"] is False
        assert on.data["is_active"] is True

    def test_daily_summary(self, user_client, cashbox, cashier):
        with freeze_time("2026-07-10 08:00:00"):
            post_entry(cashbox, "income", "60.00", actor=cashier)
            post_entry(cashbox, "expense", "10.00", actor=cashier)

        response = user_client.get(
            cashbox_url(cashbox, "daily-summary"), {"date": "2026-07-10"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["opening_balance"] == "1000.00"
        assert response.data["closing_balance"] == "1050.00"
        assert response.data["entry_count"] == 2

    def test_daily_summary_bad_date(self, user_client, cashbox):
        response = user_client.get(cashbox_url(cashbox, "daily-summary"), {"date": "July"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_DATE"


class TestCategories:
    def test_lists_known_categories(self, user_client):
        response = user_client.get(reverse("ledger:category-list"))

        assert response.status_code == status.HTTP_200_OK
        values = [row["value"] for row in response.data]
        assert "payment" in values
        assert "custody_return" in values
