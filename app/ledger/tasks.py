"""
Celery tasks for ledger maintenance.

Tasks:
- reconcile_cashboxes: Periodic task that recalculates every cashbox
- recalculate_cashbox: Recalculate one cashbox on demand

Usage:
    # Typically called via celery-beat schedule
    from ledger.tasks import reconcile_cashboxes
    reconcile_cashboxes.delay()

    # Repair one cashbox
    from ledger.tasks import recalculate_cashbox
    recalculate_cashbox.delay(cashbox.id)
"""

from __future__ import annotations

import logging

from celery import shared_task

from ledger.exceptions import CashboxNotFound
from ledger.services import LedgerService, ReconciliationService

logger = logging.getLogger(__name__)


# =============================================================================
# Periodic Task: Reconcile All Cashboxes
# =============================================================================


@shared_task(bind=True)
def reconcile_cashboxes(
    self, cashbox_ids: list[int] | None = None, dry_run: bool = False
) -> dict:
    """
    Recalculate every cashbox balance from its entries.

    Each cashbox is locked only while it is being recalculated, so
    postings on other branches continue during the sweep.

    Args:
        cashbox_ids: Restrict the sweep to these cashboxes (default: all)
        dry_run: Report drift without correcting it

    Returns:
        Dict with:
        - checked: Number of cashboxes recalculated
        - corrected: Number whose cached balance disagreed with history
        - corrected_cashboxes: Report for each corrected cashbox
        or a failure response when a requested cashbox doesn't exist

    Note:
        This task is idempotent. A second run right after the first finds
        nothing to correct.
    """
    logger.info(
        "Starting cashbox reconciliation",
        extra={"cashbox_ids": cashbox_ids, "dry_run": dry_run},
    )

    result = ReconciliationService.run_sweep(cashbox_ids=cashbox_ids, dry_run=dry_run)
    if not result.success:
        logger.error(
            f"Cashbox reconciliation failed: {result.error}",
            extra={"error_code": result.error_code},
        )
        return result.to_response()

    summary = result.data.to_dict()
    logger.info(
        f"Cashbox reconciliation complete: {summary['corrected']} of "
        f"{summary['checked']} corrected",
        extra={"checked": summary["checked"], "corrected": summary["corrected"]},
    )
    return summary


# =============================================================================
# Single Cashbox Task
# =============================================================================


@shared_task(bind=True)
def recalculate_cashbox(self, cashbox_id: int) -> dict:
    """
    Recalculate one cashbox.

    Returns:
        The reconciliation report as a dict, or a not_found status
    """
    try:
        report = LedgerService.recalculate(cashbox_id)
    except CashboxNotFound:
        logger.error("Cashbox not found", extra={"cashbox_id": cashbox_id})
        return {"status": "not_found", "cashbox_id": cashbox_id}
    return report.to_dict()
