"""
Recalculate cached cashbox balances from their entry streams.

Usage:
    python manage.py recalculate_cashboxes
    python manage.py recalculate_cashboxes --cashbox 3 --cashbox 7
    python manage.py recalculate_cashboxes --dry-run
"""

from django.core.management.base import BaseCommand, CommandError

from ledger.services import ReconciliationService


class Command(BaseCommand):
    help = "Replay ledger entries and repair drifted cashbox balances"

    def add_arguments(self, parser):
        parser.add_argument(
            "--cashbox",
            action="append",
            type=int,
            dest="cashbox_ids",
            help="Cashbox ID to recalculate (repeatable; default: all)",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report drift without writing corrected balances",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        result = ReconciliationService.run_sweep(
            cashbox_ids=options["cashbox_ids"],
            dry_run=dry_run,
        )
        if not result.success:
            raise CommandError(result.error)

        sweep = result.data
        for report in sweep.reports:
            if report.corrected:
                verb = "would change" if dry_run else "corrected"
                self.stdout.write(
                    self.style.WARNING(
                        f"Cashbox {report.cashbox_id}: {verb} "
                        f"{report.old_balance} -> {report.new_balance}"
                    )
                )

        self.stdout.write(
            self.style.SUCCESS(
                f"Checked {sweep.checked} cashbox(es), "
                f"{sweep.corrected} {'drifted' if dry_run else 'corrected'}"
            )
        )
