"""
Permission classes for the ledger API.

- CanPostEntries: ledger.add_ledgerentry
- CanReverseEntries: ledger.reverse_ledgerentry
- IsStaff: maintenance actions (recalculate, deactivate, reactivate)

Reads only require an authenticated user.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


class CanPostEntries(permissions.BasePermission):
    """Allows posting income/expense entries."""

    message = "You do not have permission to post ledger entries."

    def has_permission(self, request: Request, view: APIView) -> bool:
        return bool(
            request.user
            and request.user.is_authenticated
            and request.user.has_perm("ledger.add_ledgerentry")
        )


class CanReverseEntries(permissions.BasePermission):
    """Allows reversing committed entries."""

    message = "You do not have permission to reverse ledger entries."

    def has_permission(self, request: Request, view: APIView) -> bool:
        return bool(
            request.user
            and request.user.is_authenticated
            and request.user.has_perm("ledger.reverse_ledgerentry")
        )


class IsStaff(permissions.BasePermission):
    message = "Only staff can perform ledger maintenance."

    def has_permission(self, request: Request, view: APIView) -> bool:
        return bool(request.user and request.user.is_authenticated and request.user.is_staff)
