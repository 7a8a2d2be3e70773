"""
Reconciliation of charges logged before their order existed.

The webhook and checkout each re-check the other side after committing
their own write, so whichever commits second applies the logged charge.
The periodic sweep (CLI reconcile-payments) catches anything left over.
"""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from rest_api.models import Order, PaymentLog
from rest_api.repositories import OrderRepository, PaymentLogRepository
from shared.config.logging import payment_logger as logger, mask_reference
from shared.infrastructure.db import safe_commit
from .state_machine import PaymentSignal, apply_payment_signal


@dataclass
class ReconciliationReport:
    examined: int = 0
    applied: int = 0
    waiting: int = 0


class PaymentReconciler:
    """Applies unprocessed payment logs to their orders."""

    def __init__(self, db: Session):
        self._db = db
        self._orders = OrderRepository(db)
        self._logs = PaymentLogRepository(db)

    def reconcile_order(self, order: Order) -> int:
        """
        Apply every unprocessed success log for the order's reference.

        A log whose amount differs from the order amount is applied as a
        failure. Returns the number of logs consumed. Does not commit.
        """
        consumed = 0
        for entry in self._logs.find_unprocessed(order.reference_paiement):
            # Claim the entry first: a concurrent reconciler skips it
            if not self._logs.mark_processed(entry.id):
                continue
            consumed += 1
            self._apply(order, entry)
        return consumed

    def _apply(self, order: Order, entry: PaymentLog) -> None:
        if entry.amount != order.amount:
            logger.warning(
                "Logged charge amount differs from order",
                order_id=order.id,
                reference=mask_reference(order.reference_paiement),
                expected=order.amount,
                received=entry.amount,
            )
            signal = PaymentSignal.webhook_failure()
        else:
            signal = PaymentSignal.webhook_success()

        apply_payment_signal(
            self._orders,
            order.id,
            order.statut_paiement,
            signal,
            reference=order.reference_paiement,
        )

    def reconcile_pending(self) -> ReconciliationReport:
        """Sweep all unprocessed logs; commits once per reconciled order."""
        report = ReconciliationReport()
        seen: set[str] = set()

        for entry in self._logs.find_unprocessed():
            if entry.reference in seen:
                continue
            seen.add(entry.reference)
            report.examined += 1

            order = self._orders.find_by_reference(entry.reference)
            if order is None:
                report.waiting += 1
                continue

            report.applied += self.reconcile_order(order)
            safe_commit(self._db)

        logger.info(
            "Pending payments reconciled",
            examined=report.examined,
            applied=report.applied,
            waiting=report.waiting,
        )
        return report
