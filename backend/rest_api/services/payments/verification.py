"""
Client-triggered payment verification.

Queries the gateway for a reference and checks that the transaction
succeeded for the expected amount. Never touches an order: the checkout
flow decides what to do with the result.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from shared.config.constants import ErrorMessages, GatewayTransactionStatus
from shared.config.logging import payment_logger as logger, mask_email, mask_reference
from shared.utils.exceptions import (
    AmountMismatchError,
    AppException,
    ConfigurationError,
    InternalError,
    PaymentNotSuccessfulError,
    TransactionNotFoundError,
    UpstreamUnavailableError,
    ValidationError,
)
from .circuit_breaker import CircuitBreakerError
from .paystack import GatewayError, PaystackClient, PaystackTransaction


@dataclass(frozen=True)
class VerifiedPayment:
    """A transaction the gateway confirmed as successful."""

    reference: str
    amount: int
    currency: str | None
    channel: str | None
    paid_at: datetime | None
    customer_email: str | None
    metadata: dict[str, Any] | None

    @classmethod
    def from_transaction(cls, transaction: PaystackTransaction) -> "VerifiedPayment":
        return cls(
            reference=transaction.reference,
            amount=transaction.amount,
            currency=transaction.currency,
            channel=transaction.channel,
            paid_at=transaction.paid_at,
            customer_email=transaction.customer_email,
            metadata=transaction.metadata,
        )


class PaymentVerifier:
    """
    Verify a payment reference against Paystack.

    Failure kinds map to HTTP statuses through the exception raised:
    400 missing reference / not successful / wrong amount, 404 unknown
    transaction, 500 misconfiguration or unexpected error, 502 gateway
    unreachable (retryable, nothing was changed).
    """

    GATEWAY = "Paystack"

    def __init__(self, client: PaystackClient):
        self._client = client

    async def verify(self, reference: str | None, expected_amount: int | None = None) -> VerifiedPayment:
        reference = (reference or "").strip()
        if not reference:
            raise ValidationError(ErrorMessages.MISSING_REFERENCE)

        if not self._client.configured:
            raise ConfigurationError("PAYSTACK_SECRET_KEY")

        try:
            transaction = await self._fetch(reference)
        except AppException:
            raise
        except Exception as e:
            logger.error(
                "Payment verification failed unexpectedly",
                reference=mask_reference(reference),
                error=str(e),
                exc_info=True,
            )
            raise InternalError(ErrorMessages.VERIFICATION_FAILED) from e

        if transaction.status != GatewayTransactionStatus.SUCCESS:
            raise PaymentNotSuccessfulError(
                transaction.status,
                reference=mask_reference(reference),
            )

        if expected_amount is not None and transaction.amount != expected_amount:
            raise AmountMismatchError(
                expected=expected_amount,
                received=transaction.amount,
                reference=mask_reference(reference),
            )

        logger.info(
            "Payment verified",
            reference=mask_reference(reference),
            amount=transaction.amount,
            channel=transaction.channel,
            customer=mask_email(transaction.customer_email),
        )
        return VerifiedPayment.from_transaction(transaction)

    async def _fetch(self, reference: str) -> PaystackTransaction:
        try:
            result = await self._client.verify_transaction(reference)
        except CircuitBreakerError as e:
            raise UpstreamUnavailableError(
                self.GATEWAY,
                detail=ErrorMessages.GATEWAY_ERROR,
                retry_after=max(1, int(e.retry_after)),
                reference=mask_reference(reference),
                circuit="open",
            ) from e
        except GatewayError as e:
            raise UpstreamUnavailableError(
                self.GATEWAY,
                detail=ErrorMessages.GATEWAY_ERROR,
                reference=mask_reference(reference),
                gateway_status=e.status_code,
            ) from e

        if not result.status or result.data is None:
            raise TransactionNotFoundError(
                result.message or None,
                reference=mask_reference(reference),
            )

        return result.data
