"""
Security module: webhook signatures, rate limiting.
"""

from shared.security.request_signing import (
    WebhookSignatureVerifier,
)
from shared.security.rate_limit import (
    limiter,
    rate_limit_exceeded_handler,
)

__all__ = [
    # request_signing
    "WebhookSignatureVerifier",
    # rate_limit
    "limiter",
    "rate_limit_exceeded_handler",
]
