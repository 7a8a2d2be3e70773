"""
Payment Services - Paystack integration and the order payment state machine.

Provides:
- Paystack client (transaction verification, webhook signatures)
- Client-triggered verification
- Webhook event parsing and processing
- Reconciliation of charges received before their order
- Circuit breaker for gateway resilience
"""

from .circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerStats,
    CircuitBreakerError,
    CircuitState,
    paystack_breaker,
    get_all_breaker_stats,
)
from .paystack import (
    GatewayError,
    PaystackClient,
    PaystackTransaction,
    PaystackVerifyResponse,
    get_paystack_client,
)
from .state_machine import (
    PaymentOutcome,
    SignalSource,
    PaymentSignal,
    TransitionResult,
    next_payment_state,
    source_states,
    apply_payment_signal,
)
from .verification import PaymentVerifier, VerifiedPayment
from .webhook_events import (
    ChargeData,
    ChargeSuccessEvent,
    ChargeFailedEvent,
    UnhandledEvent,
    WebhookEvent,
    WebhookPayloadError,
    parse_webhook_event,
)
from .webhook import PaystackWebhookProcessor, WebhookOutcome
from .reconciliation import PaymentReconciler, ReconciliationReport
from .references import generate_order_number, generate_payment_reference

__all__ = [
    # Circuit breaker
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitBreakerStats",
    "CircuitBreakerError",
    "CircuitState",
    "paystack_breaker",
    "get_all_breaker_stats",
    # Gateway
    "GatewayError",
    "PaystackClient",
    "PaystackTransaction",
    "PaystackVerifyResponse",
    "get_paystack_client",
    # State machine
    "PaymentOutcome",
    "SignalSource",
    "PaymentSignal",
    "TransitionResult",
    "next_payment_state",
    "source_states",
    "apply_payment_signal",
    # Verification
    "PaymentVerifier",
    "VerifiedPayment",
    # Webhooks
    "ChargeData",
    "ChargeSuccessEvent",
    "ChargeFailedEvent",
    "UnhandledEvent",
    "WebhookEvent",
    "WebhookPayloadError",
    "parse_webhook_event",
    "PaystackWebhookProcessor",
    "WebhookOutcome",
    # Reconciliation
    "PaymentReconciler",
    "ReconciliationReport",
    # References
    "generate_order_number",
    "generate_payment_reference",
]
