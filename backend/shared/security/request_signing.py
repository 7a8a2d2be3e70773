"""
Webhook Signature Utilities.

HMAC-SHA512 signatures over the raw request body, as sent by Paystack in the
`x-paystack-signature` header. The shared secret is the Paystack secret key.
"""

import hmac
import hashlib
from typing import Optional

from shared.config.logging import get_logger

logger = get_logger(__name__)


class WebhookSignatureVerifier:
    """
    HMAC-SHA512 signing and verification of webhook bodies.

    Usage (verification):
        verifier = WebhookSignatureVerifier(secret=settings.paystack_secret_key)
        if verifier.verify(raw_body, request.headers.get(verifier.HEADER_SIGNATURE)):
            # Request is authentic

    Usage (signing, for tests and local tooling):
        signature = verifier.sign(raw_body)
    """

    HEADER_SIGNATURE = "x-paystack-signature"

    def __init__(self, secret: str):
        self._secret = secret.encode()

    @property
    def configured(self) -> bool:
        """False when no secret is set: every signature is then rejected."""
        return bool(self._secret)

    def sign(self, body: bytes | str) -> str:
        """Return the hex HMAC-SHA512 digest of the body."""
        if isinstance(body, str):
            body = body.encode()

        return hmac.new(self._secret, body, hashlib.sha512).hexdigest()

    def verify(self, body: bytes | str, signature: Optional[str]) -> bool:
        """
        Verify a webhook signature.

        The body must be the exact bytes received, before any JSON parsing.
        Returns False for a missing signature or an unconfigured secret.
        """
        if not self.configured:
            logger.error("Webhook secret not configured, rejecting signature")
            return False

        if not signature:
            logger.warning("Webhook signature missing")
            return False

        candidate = signature.strip().lower()
        if not candidate.isascii():
            logger.warning("Webhook signature is not hex")
            return False

        # Constant-time comparison, on bytes
        is_valid = hmac.compare_digest(self.sign(body).encode(), candidate.encode())

        if not is_valid:
            logger.warning("Invalid webhook signature")

        return is_valid
