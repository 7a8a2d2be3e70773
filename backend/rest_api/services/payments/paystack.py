"""
Paystack gateway adapter.

Wraps the two gateway operations the payment flow needs:
- verify_transaction: GET /transaction/verify/{reference}, bearer-authenticated
- verify_signature: HMAC-SHA512 check of a webhook body

The outbound call is bounded by a timeout and guarded by the Paystack
circuit breaker. Amounts are whole XOF units (no sub-unit).
"""

from datetime import datetime
from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError, field_validator

from shared.config.logging import payment_logger as logger, mask_email, mask_reference
from shared.config.settings import get_settings
from shared.security.request_signing import WebhookSignatureVerifier
from .circuit_breaker import CircuitBreaker, paystack_breaker


class GatewayError(Exception):
    """
    The gateway could not be reached or answered with an error.

    `retryable` is False for 4xx answers: the gateway is healthy and the
    breaker does not count them.
    """

    def __init__(self, message: str, status_code: int | None = None, retryable: bool = True):
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message)


# =============================================================================
# Gateway payloads
# =============================================================================


class PaystackCustomer(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    email: str | None = None
    customer_code: str | None = None


class PaystackTransaction(BaseModel):
    """`data` of a verify response."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    status: str
    reference: str
    amount: int
    currency: str | None = None
    channel: str | None = None
    paid_at: datetime | None = None
    created_at: datetime | None = None
    customer: PaystackCustomer | None = None
    metadata: dict[str, Any] | None = None

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_object_or_none(cls, value: Any) -> Any:
        # Paystack sends "" or 0 when no metadata was attached
        return value if isinstance(value, dict) else None

    @property
    def customer_email(self) -> str | None:
        return self.customer.email if self.customer else None


class PaystackVerifyResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: bool
    message: str = ""
    data: PaystackTransaction | None = None


# =============================================================================
# Client
# =============================================================================


class PaystackClient:
    """
    Async Paystack API client.

    Usage:
        client = PaystackClient(secret_key=settings.paystack_secret_key)
        result = await client.verify_transaction("TLR_1735689600000_AB12CD")
        if result.status and result.data.status == "success":
            ...

    `transport` lets tests plug an httpx.MockTransport.
    """

    def __init__(
        self,
        secret_key: str,
        base_url: str = "https://api.paystack.co",
        timeout: float = 10.0,
        breaker: CircuitBreaker = paystack_breaker,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._secret_key = secret_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._breaker = breaker
        self._transport = transport
        self._signatures = WebhookSignatureVerifier(secret_key)

    @property
    def configured(self) -> bool:
        return bool(self._secret_key)

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    def verify_signature(self, body: bytes, signature: str | None) -> bool:
        """Check a webhook body against its x-paystack-signature header."""
        return self._signatures.verify(body, signature)

    async def verify_transaction(self, reference: str) -> PaystackVerifyResponse:
        """
        Fetch the current state of a transaction.

        Raises:
            GatewayError: timeout, transport error, non-2xx or unreadable body
            CircuitBreakerError: the breaker is open
        """
        async with self._breaker.call():
            return await self._get_verification(reference)

    async def _get_verification(self, reference: str) -> PaystackVerifyResponse:
        path = f"/transaction/verify/{quote(reference, safe='')}"

        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    path,
                    headers={
                        "Authorization": f"Bearer {self._secret_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.TimeoutException as e:
            logger.error("Paystack verify timed out", reference=mask_reference(reference))
            raise GatewayError("Paystack request timed out") from e
        except httpx.HTTPError as e:
            logger.error(
                "Paystack verify transport error",
                reference=mask_reference(reference),
                error=str(e),
            )
            raise GatewayError(f"Paystack transport error: {e}") from e

        if not response.is_success:
            logger.error(
                "Paystack API error",
                reference=mask_reference(reference),
                status_code=response.status_code,
            )
            raise GatewayError(
                f"Paystack answered {response.status_code}",
                status_code=response.status_code,
                retryable=response.status_code >= 500 or response.status_code == 429,
            )

        try:
            result = PaystackVerifyResponse.model_validate_json(response.content)
        except PydanticValidationError as e:
            logger.error(
                "Unreadable Paystack verify response",
                reference=mask_reference(reference),
                errors=e.error_count(),
            )
            raise GatewayError("Unreadable Paystack response", status_code=response.status_code) from e

        if result.status and result.data is None:
            raise GatewayError("Paystack response without data", status_code=response.status_code)

        if result.data is not None:
            logger.debug(
                "Paystack transaction fetched",
                reference=mask_reference(reference),
                status=result.data.status,
                amount=result.data.amount,
                customer=mask_email(result.data.customer_email),
            )

        return result


def get_paystack_client() -> PaystackClient:
    """
    FastAPI dependency providing the configured gateway client.

    Tests override it with a client bound to an httpx.MockTransport.
    """
    settings = get_settings()
    return PaystackClient(
        secret_key=settings.paystack_secret_key,
        base_url=settings.paystack_base_url,
        timeout=settings.paystack_timeout_seconds,
    )
