"""
Paystack webhook processing.

Runs after the signature check. Every business outcome is acknowledged
(the gateway retries anything but a 2xx); only storage failures propagate,
so the gateway redelivers and the idempotent handling absorbs the retry.
"""

from enum import Enum

from sqlalchemy.orm import Session

from rest_api.models import PaymentLog
from rest_api.repositories import OrderRepository, PaymentLogRepository
from shared.config.constants import PaymentLogStatus
from shared.config.logging import webhook_logger as logger, mask_email, mask_reference
from shared.infrastructure.db import safe_commit
from .reconciliation import PaymentReconciler
from .state_machine import PaymentSignal, apply_payment_signal
from .webhook_events import (
    ChargeData,
    ChargeFailedEvent,
    ChargeSuccessEvent,
    WebhookEvent,
)


class WebhookOutcome(str, Enum):
    APPLIED = "applied"        # order status changed
    DUPLICATE = "duplicate"    # already applied or already logged
    LOGGED = "logged"          # no order yet, charge kept for reconciliation
    DROPPED = "dropped"        # failure for an unknown order
    IGNORED = "ignored"        # event type not handled
    REJECTED = "rejected"      # success for the wrong amount, treated as failure


class PaystackWebhookProcessor:
    """
    Applies verified webhook events to orders.

    Usage:
        outcome = PaystackWebhookProcessor(db).process(event)
    """

    def __init__(self, db: Session):
        self._db = db
        self._orders = OrderRepository(db)
        self._logs = PaymentLogRepository(db)

    def process(self, event: WebhookEvent) -> WebhookOutcome:
        if isinstance(event, ChargeSuccessEvent):
            return self._on_charge_success(event.data)
        if isinstance(event, ChargeFailedEvent):
            return self._on_charge_failed(event.data)

        logger.info("Webhook event ignored", event=event.event)
        return WebhookOutcome.IGNORED

    def _on_charge_success(self, data: ChargeData) -> WebhookOutcome:
        order = self._orders.find_by_reference(data.reference)

        if order is None:
            return self._log_early_charge(data)

        if data.amount != order.amount:
            logger.warning(
                "Charge amount differs from order, rejecting",
                order_id=order.id,
                reference=mask_reference(data.reference),
                expected=order.amount,
                received=data.amount,
            )
            apply_payment_signal(
                self._orders,
                order.id,
                order.statut_paiement,
                PaymentSignal.webhook_failure(),
                reference=data.reference,
            )
            safe_commit(self._db)
            return WebhookOutcome.REJECTED

        result = apply_payment_signal(
            self._orders,
            order.id,
            order.statut_paiement,
            PaymentSignal.webhook_success(),
            reference=data.reference,
        )
        safe_commit(self._db)

        if result.applied:
            logger.info(
                "Order paid via webhook",
                order_id=order.id,
                order_number=order.order_number,
                reference=mask_reference(data.reference),
                amount=data.amount,
            )
            return WebhookOutcome.APPLIED
        return WebhookOutcome.DUPLICATE

    def _log_early_charge(self, data: ChargeData) -> WebhookOutcome:
        """Keep a charge whose order is not recorded yet."""
        inserted = self._logs.insert(
            PaymentLog(
                reference=data.reference,
                amount=data.amount,
                channel=data.channel,
                customer_email=data.customer_email,
                status=PaymentLogStatus.SUCCESS,
                payment_metadata=data.metadata,
                paid_at=data.paid_at,
                processed=False,
            )
        )
        safe_commit(self._db)

        if not inserted:
            logger.info(
                "Early charge already logged",
                reference=mask_reference(data.reference),
            )
            return WebhookOutcome.DUPLICATE

        logger.info(
            "Charge logged before its order",
            reference=mask_reference(data.reference),
            amount=data.amount,
            customer=mask_email(data.customer_email),
        )

        # The order may have been committed while the log was being written
        order = self._orders.find_by_reference(data.reference)
        if order is not None:
            consumed = PaymentReconciler(self._db).reconcile_order(order)
            safe_commit(self._db)
            if consumed:
                return WebhookOutcome.APPLIED

        return WebhookOutcome.LOGGED

    def _on_charge_failed(self, data: ChargeData) -> WebhookOutcome:
        order = self._orders.find_by_reference(data.reference)

        if order is None:
            logger.info(
                "Charge failure for unknown order dropped",
                reference=mask_reference(data.reference),
            )
            return WebhookOutcome.DROPPED

        result = apply_payment_signal(
            self._orders,
            order.id,
            order.statut_paiement,
            PaymentSignal.webhook_failure(),
            reference=data.reference,
        )
        safe_commit(self._db)

        return WebhookOutcome.APPLIED if result.applied else WebhookOutcome.DUPLICATE
