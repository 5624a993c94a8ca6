"""
Pytest fixtures for ledger tests.

Sections:
    - User Fixtures: Actors with and without ledger permissions
    - Cashbox Fixtures: Cashboxes created the way production creates them
    - API Fixtures: Authenticated API clients
"""

from decimal import Decimal

import pytest
from django.contrib.auth.models import Permission
from rest_framework.test import APIClient

from authentication.tests.factories import UserFactory
from branches.services import BranchService
from ledger.tests.factories import CashboxFactory


# ==========================================================================
# User Fixtures
# ==========================================================================


@pytest.fixture
def user(db):
    """Authenticated user with no ledger permissions (read-only)."""
    return UserFactory()


@pytest.fixture
def cashier(db):
    """User allowed to post and reverse entries."""
    cashier = UserFactory(full_name="Mona Adel")
    cashier.user_permissions.add(
        Permission.objects.get(
            content_type__app_label="ledger", codename="add_ledgerentry"
        ),
        Permission.objects.get(
            content_type__app_label="ledger", codename="reverse_ledgerentry"
        ),
    )
    return cashier


@pytest.fixture
def manager(db):
    """Staff user for maintenance endpoints."""
    return UserFactory(is_staff=True)


# ==========================================================================
# Cashbox Fixtures
# ==========================================================================


@pytest.fixture
def branch(db):
    """Branch with a cashbox opened at 1000.00."""
    return BranchService.create_branch(
        branch_code="CAI-01",
        name="Cairo Downtown",
        initial_balance=Decimal("1000.00"),
    )


@pytest.fixture
def cashbox(branch):
    """The cashbox of ``branch`` (balance 1000.00)."""
    return branch.cashbox


@pytest.fixture
def empty_cashbox(db):
    """Cashbox opened at 0.00."""
    return CashboxFactory()


@pytest.fixture
def inactive_cashbox(db):
    """Deactivated cashbox holding 500.00."""
    return CashboxFactory(initial_balance=Decimal("500.00"), is_active=False)


# ==========================================================================
# API Fixtures
# ==========================================================================


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def cashier_client(api_client, cashier):
    api_client.force_authenticate(user=cashier)
    return api_client


@pytest.fixture
def user_client(api_client, user):
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture
def manager_client(api_client, manager):
    api_client.force_authenticate(user=manager)
    return api_client
