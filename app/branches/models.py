"""
Branch model.
"""

from __future__ import annotations

from django.db import models

from core.models import BaseModel


class Branch(BaseModel):
    """
    A shop location.

    Fields:
        branch_code: Short unique code used on receipts and reports
        name: Display name
        address: Postal address
        phone: Contact number

    Note:
        Create branches through BranchService.create_branch so the branch
        never exists without its cashbox.
    """

    branch_code = models.CharField(
        max_length=20,
        unique=True,
        help_text="Short unique branch code",
    )
    name = models.CharField(
        max_length=255,
        help_text="Display name of the branch",
    )
    address = models.TextField(
        blank=True,
        default="",
        help_text="Postal address",
    )
    phone = models.CharField(
        max_length=30,
        blank=True,
        default="",
        help_text="Contact phone number",
    )

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "branches"

    def __str__(self) -> str:
        return f"{self.name} ({self.branch_code})"
