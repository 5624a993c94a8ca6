"""
Factory Boy factories for ledger test data.

Cashboxes are plain model rows and can be built directly. Ledger entries
are not: every entry must move its cashbox balance, so ``post_entry``
goes through the posting engine instead of inserting rows.

Usage:
    from ledger.tests.factories import CashboxFactory, post_entry

    cashbox = CashboxFactory(initial_balance=Decimal("1000.00"))
    entry = post_entry(cashbox, "expense", "250.00", actor=user)
"""

from decimal import Decimal

import factory

from authentication.tests.factories import UserFactory
from branches.models import Branch
from ledger.models import Cashbox, EntryDirection, LedgerEntry
from ledger.services import LedgerService
from ledger.types import PostingParams


class BranchFactory(factory.django.DjangoModelFactory):
    """
    Factory for Branch rows without a cashbox.

    Use BranchService.create_branch (or CashboxFactory) when the branch
    needs its cashbox.
    """

    class Meta:
        model = Branch
        skip_postgeneration_save = True

    branch_code = factory.Sequence(lambda n: f"BR-{n:03d}")
    name = factory.Sequence(lambda n: f"Branch {n}")
    address = factory.Faker("street_address")
    phone = ""


class CashboxFactory(factory.django.DjangoModelFactory):
    """
    Factory for Cashbox rows.

    current_balance follows initial_balance unless given explicitly, which
    is how tests seed a drifted cache.

    Example:
        cashbox = CashboxFactory(initial_balance=Decimal("100.00"))
        drifted = CashboxFactory(
            initial_balance=Decimal("100.00"),
            current_balance=Decimal("90.00"),
        )
    """

    class Meta:
        model = Cashbox
        skip_postgeneration_save = True

    branch = factory.SubFactory(BranchFactory)
    name = factory.LazyAttribute(lambda o: f"{o.branch.name} Cashbox")
    description = ""
    initial_balance = Decimal("0.00")
    current_balance = factory.LazyAttribute(lambda o: o.initial_balance)
    is_active = True


def post_entry(
    cashbox: Cashbox,
    direction: str = EntryDirection.INCOME,
    amount="100.00",
    category: str = "payment",
    actor=None,
    **kwargs,
) -> LedgerEntry:
    """Post one entry through LedgerService, creating an actor if needed."""
    return LedgerService.post(
        PostingParams(
            cashbox_id=cashbox.id,
            direction=direction,
            amount=amount,
            category=category,
            actor=actor or UserFactory(),
            **kwargs,
        )
    )
