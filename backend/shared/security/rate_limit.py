"""
Rate limiting utilities using slowapi.
Protects the public payment verification endpoint from abuse.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from shared.config.logging import get_logger

logger = get_logger(__name__)

# Create limiter instance using client IP as key
limiter = Limiter(key_func=get_remote_address)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Custom handler for rate limit exceeded errors.
    Returns the standard error body with retry information.
    """
    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        client=get_remote_address(request),
        limit=str(exc.detail),
    )
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "Trop de requêtes. Veuillez réessayer plus tard.",
            "retryAfter": exc.detail,
        },
        headers={"Retry-After": "60"},
    )


# Usage in a router:
# from shared.security.rate_limit import limiter
#
# @router.post("/verify")
# @limiter.limit(settings.verify_rate_limit)
# async def verify_payment(request: Request, ...):
#     ...
