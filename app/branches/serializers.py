"""
Serializers for the branches API.

    BranchSerializer: Branch with its cashbox summary (read)
    BranchCreateSerializer: Branch fields plus opening cashbox balance (write)
"""

from __future__ import annotations

from rest_framework import serializers

from ledger.serializers import CashboxSerializer

from .models import Branch


class BranchSerializer(serializers.ModelSerializer):
    cashbox = CashboxSerializer(read_only=True)

    class Meta:
        model = Branch
        fields = [
            "id",
            "branch_code",
            "name",
            "address",
            "phone",
            "cashbox",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BranchCreateSerializer(serializers.Serializer):
    """
    Input for creating a branch.

    ``initial_balance`` seeds the branch cashbox; it is validated by the
    ledger (non-negative, two decimal places).
    """

    branch_code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=255)
    address = serializers.CharField(required=False, allow_blank=True, default="")
    phone = serializers.CharField(
        max_length=30, required=False, allow_blank=True, default=""
    )
    initial_balance = serializers.CharField(
        max_length=32, required=False, default="0.00"
    )
    cashbox_description = serializers.CharField(
        required=False, allow_blank=True, default=""
    )
