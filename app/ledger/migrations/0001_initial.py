import django.db.models.deletion
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("branches", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Cashbox",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        help_text="Display name of this cashbox", max_length=255
                    ),
                ),
                (
                    "description",
                    models.TextField(
                        blank=True, default="", help_text="Free-form description"
                    ),
                ),
                (
                    "initial_balance",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Opening balance, fixed at creation",
                        max_digits=15,
                    ),
                ),
                (
                    "current_balance",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Cached balance; initial_balance plus all signed entries",
                        max_digits=15,
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        db_index=True,
                        default=True,
                        help_text="Whether this cashbox accepts new postings",
                    ),
                ),
                (
                    "branch",
                    models.OneToOneField(
                        help_text="Branch owning this cashbox",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="cashbox",
                        to="branches.branch",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "cashboxes",
                "ordering": ["id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("initial_balance__gte", 0)),
                        name="cashbox_initial_balance_non_negative",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "direction",
                    models.CharField(
                        choices=[
                            ("income", "Income"),
                            ("expense", "Expense"),
                            ("reversal", "Reversal"),
                        ],
                        help_text="How this entry moves the balance",
                        max_length=10,
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Amount (always positive)",
                        max_digits=15,
                    ),
                ),
                (
                    "balance_after",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Cashbox balance immediately after this entry",
                        max_digits=15,
                    ),
                ),
                (
                    "category",
                    models.CharField(
                        db_index=True,
                        help_text="Reporting label (payment, expense, reversal, ...)",
                        max_length=50,
                    ),
                ),
                (
                    "description",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Human-readable description of this entry",
                    ),
                ),
                (
                    "reference_type",
                    models.CharField(
                        blank=True,
                        help_text="Type of related entity (e.g., 'payment', 'custody')",
                        max_length=50,
                        null=True,
                    ),
                ),
                (
                    "reference_id",
                    models.CharField(
                        blank=True,
                        help_text="Identifier of related entity",
                        max_length=64,
                        null=True,
                    ),
                ),
                (
                    "metadata",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Collaborator context; never interpreted by the ledger",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this entry was recorded",
                    ),
                ),
                (
                    "cashbox",
                    models.ForeignKey(
                        help_text="Cashbox this entry belongs to",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="entries",
                        to="ledger.cashbox",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        help_text="User who recorded this entry",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "reversed_entry",
                    models.ForeignKey(
                        blank=True,
                        help_text="Entry this reversal negates",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reversals",
                        to="ledger.ledgerentry",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "ledger entries",
                "ordering": ["id"],
                "permissions": [("reverse_ledgerentry", "Can reverse ledger entries")],
                "indexes": [
                    models.Index(
                        fields=["cashbox", "created_at"],
                        name="ledger_entry_cashbox_created",
                    ),
                    models.Index(
                        fields=["reference_type", "reference_id"],
                        name="ledger_entry_reference",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="ledger_entry_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(
                                ("direction", "reversal"),
                                ("reversed_entry__isnull", False),
                            ),
                            models.Q(
                                models.Q(("direction", "reversal"), _negated=True),
                                ("reversed_entry__isnull", True),
                            ),
                            _connector="OR",
                        ),
                        name="ledger_entry_reversal_has_target",
                    ),
                    models.UniqueConstraint(
                        fields=("reversed_entry",),
                        name="ledger_entry_single_reversal",
                    ),
                ],
            },
        ),
    ]
