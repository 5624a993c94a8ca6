"""
Branch service layer.

Usage:
    from branches.services import BranchService

    branch = BranchService.create_branch(
        branch_code="CAI-01",
        name="Cairo Downtown",
        initial_balance=Decimal("1000.00"),
    )
    branch.cashbox.current_balance  # Decimal("1000.00")
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from django.db import IntegrityError

from core.exceptions import ConflictError, NotFoundError
from core.services import BaseService
from ledger.services import LedgerService

from .models import Branch

if TYPE_CHECKING:
    from typing import Any


class BranchService(BaseService):
    """Service for branch lifecycle operations."""

    @classmethod
    def create_branch(
        cls,
        branch_code: str,
        name: str,
        address: str = "",
        phone: str = "",
        initial_balance: Any = Decimal("0.00"),
        cashbox_description: str = "",
    ) -> Branch:
        """
        Create a branch together with its cashbox.

        Both rows are written in one transaction; if the cashbox can't be
        created (e.g. a negative opening balance) the branch is rolled back.

        Args:
            branch_code: Unique branch code
            name: Branch name; the cashbox is named "<name> Cashbox"
            address: Postal address
            phone: Contact phone number
            initial_balance: Opening balance of the cashbox
            cashbox_description: Description stored on the cashbox

        Returns:
            The created Branch (its cashbox is available as branch.cashbox)

        Raises:
            ConflictError: If the branch code is already taken
            InvalidAmount: If initial_balance is negative or malformed
        """
        try:
            with cls.atomic():
                branch = Branch.objects.create(
                    branch_code=branch_code,
                    name=name,
                    address=address,
                    phone=phone,
                )
                LedgerService.open_cashbox(
                    branch,
                    initial_balance=initial_balance,
                    description=cashbox_description,
                )
        except IntegrityError as e:
            raise ConflictError(
                f"Branch code {branch_code!r} is already in use",
                error_code="BRANCH_CODE_TAKEN",
                details={"branch_code": branch_code},
            ) from e

        cls.get_logger().info(
            "Created branch",
            extra={"branch_id": branch.id, "branch_code": branch.branch_code},
        )
        return branch

    @classmethod
    def get_branch(cls, branch_id: int) -> Branch:
        """
        Get branch by ID with its cashbox.

        Raises:
            NotFoundError: If branch doesn't exist
        """
        branch = Branch.objects.select_related("cashbox").filter(pk=branch_id).first()
        if branch is None:
            raise NotFoundError(
                f"Branch {branch_id} not found",
                error_code="BRANCH_NOT_FOUND",
                details={"branch_id": branch_id},
            )
        return branch
