"""
Payment verification router.

Called by the client right after the Paystack widget reports completion.
Reports whether the gateway confirms the transaction; never changes an
order (the checkout flow uses /api/orders/{orderNumber}/confirm-payment).
"""

from fastapi import APIRouter, Depends, Query, Request

from shared.config.constants import Limits
from shared.config.settings import settings
from shared.security.rate_limit import limiter
from shared.utils.schemas import (
    VerifiedPaymentData,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from rest_api.services.payments.paystack import PaystackClient, get_paystack_client
from rest_api.services.payments.verification import PaymentVerifier, VerifiedPayment


router = APIRouter(prefix="/api/payment", tags=["payment"])


def _to_response(verified: VerifiedPayment) -> VerifyPaymentResponse:
    return VerifyPaymentResponse(
        data=VerifiedPaymentData(
            reference=verified.reference,
            amount=verified.amount,
            currency=verified.currency,
            channel=verified.channel,
            paid_at=verified.paid_at,
            customer_email=verified.customer_email,
            metadata=verified.metadata,
        )
    )


@router.post("/verify", response_model=VerifyPaymentResponse)
@limiter.limit(settings.verify_rate_limit)
async def verify_payment(
    request: Request,
    body: VerifyPaymentRequest,
    client: PaystackClient = Depends(get_paystack_client),
) -> VerifyPaymentResponse:
    """
    Verify a payment reference with Paystack.

    Errors: 400 missing reference, unsuccessful payment or wrong amount;
    404 unknown transaction; 500 server misconfiguration; 502 gateway
    unreachable (retryable).
    """
    verified = await PaymentVerifier(client).verify(body.reference, body.expected_amount)
    return _to_response(verified)


@router.get("/verify", response_model=VerifyPaymentResponse)
@limiter.limit(settings.verify_rate_limit)
async def verify_payment_by_query(
    request: Request,
    reference: str | None = Query(default=None, max_length=Limits.MAX_REFERENCE_LENGTH),
    client: PaystackClient = Depends(get_paystack_client),
) -> VerifyPaymentResponse:
    """Same as POST, for a redirect carrying ?reference=."""
    verified = await PaymentVerifier(client).verify(reference)
    return _to_response(verified)
