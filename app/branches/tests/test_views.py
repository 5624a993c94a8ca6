"""
Tests for the branches API.
"""

import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from authentication.tests.factories import UserFactory
from branches.models import Branch
from branches.services import BranchService


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def branch(db):
    return BranchService.create_branch(
        branch_code="CAI-01", name="Cairo Downtown", initial_balance="100.00"
    )


class TestBranchCreate:
    def test_admin_creates_branch_and_cashbox(self, api_client, db):
        api_client.force_authenticate(user=UserFactory(is_staff=True))

        response = api_client.post(
            reverse("branches:branch-list"),
            {"branch_code": "ASW-01", "name": "Aswan", "initial_balance": "250.00"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["branch_code"] == "ASW-01"
        assert response.data["cashbox"]["current_balance"] == "250.00"

    def test_negative_balance_rejected(self, api_client, db):
        api_client.force_authenticate(user=UserFactory(is_staff=True))

        response = api_client.post(
            reverse("branches:branch-list"),
            {"branch_code": "ASW-01", "name": "Aswan", "initial_balance": "-1"},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_AMOUNT"
        assert Branch.objects.count() == 0

    def test_duplicate_code_is_conflict(self, api_client, branch):
        api_client.force_authenticate(user=UserFactory(is_staff=True))

        response = api_client.post(
            reverse("branches:branch-list"),
            {"branch_code": "CAI-01", "name": "Again"},
            format="json",
        )

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_non_staff_forbidden(self, api_client, db):
        api_client.force_authenticate(user=UserFactory())

        response = api_client.post(
            reverse("branches:branch-list"),
            {"branch_code": "X-01", "name": "X"},
            format="json",
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestBranchRead:
    def test_list(self, api_client, branch):
        api_client.force_authenticate(user=UserFactory())

        response = api_client.get(reverse("branches:branch-list"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["results"][0]["cashbox"]["id"] == branch.cashbox.id

    def test_cashbox_action(self, api_client, branch):
        api_client.force_authenticate(user=UserFactory())

        response = api_client.get(reverse("branches:branch-cashbox", args=[branch.id]))

        assert response.data["current_balance"] == "100.00"
        assert response.data["name"] == "Cairo Downtown Cashbox"

    def test_cashbox_unknown_branch(self, api_client, db):
        api_client.force_authenticate(user=UserFactory())

        response = api_client.get(reverse("branches:branch-cashbox", args=[9999]))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "BRANCH_NOT_FOUND"
