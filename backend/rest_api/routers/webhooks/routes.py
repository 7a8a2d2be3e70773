"""
Paystack webhook router.

The signature is checked on the raw body before anything is parsed; a bad
or missing signature is the only business-level error returned. Every
other outcome is acknowledged with 200 so Paystack stops redelivering,
except storage failures (503), which should be redelivered.
"""

import json
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from slowapi.util import get_remote_address
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from shared.config.constants import ErrorMessages
from shared.config.logging import webhook_logger as logger, audit_webhook_event
from shared.infrastructure.db import get_db
from shared.security.request_signing import WebhookSignatureVerifier
from shared.utils.exceptions import AuthenticationError, PersistenceUnavailableError
from shared.utils.schemas import WebhookAck
from rest_api.services.payments.paystack import PaystackClient, get_paystack_client
from rest_api.services.payments.webhook import PaystackWebhookProcessor
from rest_api.services.payments.webhook_events import WebhookPayloadError, parse_webhook_event


router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])

PROVIDER = "paystack"


@router.post("/paystack", response_model=WebhookAck, response_model_exclude_none=True)
async def paystack_webhook(
    request: Request,
    db: Session = Depends(get_db),
    client: PaystackClient = Depends(get_paystack_client),
) -> WebhookAck:
    """Receive a Paystack event (charge.success, charge.failed, others ignored)."""
    body = await request.body()
    signature = request.headers.get(WebhookSignatureVerifier.HEADER_SIGNATURE)
    client_ip = get_remote_address(request)

    if not client.verify_signature(body, signature):
        if not client.configured:
            reason = "secret_not_configured"
        elif not signature:
            reason = "signature_missing"
        else:
            reason = "signature_mismatch"
        audit_webhook_event(
            "SIGNATURE_REJECTED",
            PROVIDER,
            success=False,
            reason=reason,
            ip_address=client_ip,
        )
        raise AuthenticationError(ErrorMessages.INVALID_SIGNATURE)

    try:
        event = parse_webhook_event(json.loads(body))
    except (ValueError, WebhookPayloadError) as e:
        # Redelivering an unreadable body would fail the same way
        logger.error("Webhook payload rejected", error=str(e), size=len(body))
        return WebhookAck(received=True, error=ErrorMessages.WEBHOOK_PROCESSING_ERROR)

    audit_webhook_event("DELIVERY_ACCEPTED", PROVIDER, success=True, ip_address=client_ip, event=event.event)

    try:
        outcome = await run_in_threadpool(PaystackWebhookProcessor(db).process, event)
    except SQLAlchemyError as e:
        logger.error("Webhook processing hit the database", event=event.event, error=str(e), exc_info=True)
        raise PersistenceUnavailableError("le traitement du webhook", event=event.event) from e

    logger.info("Webhook processed", event=event.event, outcome=outcome.value)
    return WebhookAck(received=True, status=outcome.value)


@router.get("/paystack")
def paystack_webhook_status():
    """Liveness probe for the webhook URL configured in the Paystack dashboard."""
    return {
        "status": "ok",
        "message": "Webhook Paystack actif",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
