"""
Order payment state machine.

    en_attente --success--> paye   (statut -> confirmee)
    en_attente --failure--> echoue
    echoue --success (gateway query)--> paye

Every other (state, signal) pair is redundant: paye is final, and a webhook
success never overrides a recorded failure. A success obtained by querying
the gateway reflects the transaction's current state, so it may.

Transitions are applied with a conditional update (compare-and-swap on
statut_paiement). When two channels race on the same order, the first
update to land wins and the other observes a redundant transition.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from shared.config.constants import OrderStatus, PaymentStatus
from shared.config.logging import payment_logger as logger, mask_reference


class PaymentOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class SignalSource(str, Enum):
    """Where a payment signal comes from."""

    WEBHOOK = "webhook"
    # Server-side query of the gateway (checkout confirmation)
    GATEWAY_QUERY = "gateway_query"


@dataclass(frozen=True)
class PaymentSignal:
    outcome: PaymentOutcome
    source: SignalSource

    @classmethod
    def webhook_success(cls) -> "PaymentSignal":
        return cls(PaymentOutcome.SUCCESS, SignalSource.WEBHOOK)

    @classmethod
    def webhook_failure(cls) -> "PaymentSignal":
        return cls(PaymentOutcome.FAILURE, SignalSource.WEBHOOK)

    @classmethod
    def query_success(cls) -> "PaymentSignal":
        return cls(PaymentOutcome.SUCCESS, SignalSource.GATEWAY_QUERY)

    @classmethod
    def query_failure(cls) -> "PaymentSignal":
        return cls(PaymentOutcome.FAILURE, SignalSource.GATEWAY_QUERY)


def next_payment_state(current: str, signal: PaymentSignal) -> str | None:
    """Target statut_paiement for a signal, or None when it changes nothing."""
    if current == PaymentStatus.EN_ATTENTE:
        if signal.outcome is PaymentOutcome.SUCCESS:
            return PaymentStatus.PAYE
        return PaymentStatus.ECHOUE

    if (
        current == PaymentStatus.ECHOUE
        and signal.outcome is PaymentOutcome.SUCCESS
        and signal.source is SignalSource.GATEWAY_QUERY
    ):
        return PaymentStatus.PAYE

    return None


def source_states(target: str, signal: PaymentSignal) -> frozenset[str]:
    """States from which `signal` leads to `target`: the WHERE of the update."""
    return frozenset(
        state for state in PaymentStatus.ALL if next_payment_state(state, signal) == target
    )


def order_status_for(target: str) -> str | None:
    """Order lifecycle status that accompanies a payment status, if any."""
    if target == PaymentStatus.PAYE:
        return OrderStatus.CONFIRMEE
    return None


class PaymentStatusStore(Protocol):
    """Persistence operation the state machine needs (OrderRepository)."""

    def update_payment_status(
        self,
        order_id: int,
        to_status: str,
        from_statuses: frozenset[str],
        order_status: str | None = None,
    ) -> bool: ...


@dataclass(frozen=True)
class TransitionResult:
    applied: bool
    previous: str
    target: str | None


def apply_payment_signal(
    store: PaymentStatusStore,
    order_id: int,
    current: str,
    signal: PaymentSignal,
    reference: str | None = None,
) -> TransitionResult:
    """
    Apply a signal to an order whose last observed status is `current`.

    The update only matches rows still in a source state of the transition,
    so a stale `current` can never overwrite a concurrent terminal write.
    Does not commit.
    """
    target = next_payment_state(current, signal)
    if target is None:
        logger.info(
            "Payment signal redundant",
            order_id=order_id,
            reference=mask_reference(reference),
            current=current,
            outcome=signal.outcome.value,
            source=signal.source.value,
        )
        return TransitionResult(applied=False, previous=current, target=None)

    applied = store.update_payment_status(
        order_id,
        target,
        source_states(target, signal),
        order_status_for(target),
    )

    if applied:
        logger.info(
            "Payment status changed",
            order_id=order_id,
            reference=mask_reference(reference),
            previous=current,
            target=target,
            source=signal.source.value,
        )
    else:
        logger.info(
            "Payment transition lost the race",
            order_id=order_id,
            reference=mask_reference(reference),
            observed=current,
            target=target,
        )

    return TransitionResult(applied=applied, previous=current, target=target if applied else None)
