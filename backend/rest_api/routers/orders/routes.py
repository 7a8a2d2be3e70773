"""
Orders router.

Checkout records the order before payment; confirm-payment asks Paystack
for the transaction and applies the answer to the order.
"""

from fastapi import APIRouter, Depends, Path, Request, status
from sqlalchemy.orm import Session

from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.security.rate_limit import limiter
from shared.utils.schemas import ConfirmPaymentResponse, CreateOrderRequest, OrderOutput
from rest_api.services.domain import OrderService, order_to_output
from rest_api.services.payments.paystack import PaystackClient, get_paystack_client
from rest_api.services.payments.verification import PaymentVerifier


router = APIRouter(prefix="/api/orders", tags=["orders"])

OrderNumber = Path(min_length=1, max_length=20)


@router.post("", response_model=OrderOutput, status_code=status.HTTP_201_CREATED)
def create_order(
    body: CreateOrderRequest,
    db: Session = Depends(get_db),
) -> OrderOutput:
    """Price the items server-side and record the order (en_attente)."""
    order = OrderService(db).create_order(body)
    return order_to_output(order)


@router.get("/{order_number}", response_model=OrderOutput)
def get_order(
    order_number: str = OrderNumber,
    db: Session = Depends(get_db),
) -> OrderOutput:
    return order_to_output(OrderService(db).get_by_number(order_number))


@router.post("/{order_number}/confirm-payment", response_model=ConfirmPaymentResponse)
@limiter.limit(settings.verify_rate_limit)
async def confirm_payment(
    request: Request,
    order_number: str = OrderNumber,
    db: Session = Depends(get_db),
    client: PaystackClient = Depends(get_paystack_client),
) -> ConfirmPaymentResponse:
    """
    Verify the order's payment reference for the order amount.

    A failed or wrong-amount payment marks the order echoue and returns the
    verification error; abandoned or pending payments change nothing.
    """
    order, applied = await OrderService(db).confirm_payment(order_number, PaymentVerifier(client))
    return ConfirmPaymentResponse(applied=applied, order=order_to_output(order))
