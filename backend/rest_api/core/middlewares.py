"""
Response hardening and request body checks.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from shared.config.settings import settings

# JSON-only API: nothing may be framed, embedded or loaded
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=(), payment=()",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
}
HSTS = "max-age=31536000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = HSTS
        return response


class ContentTypeValidationMiddleware(BaseHTTPMiddleware):
    """
    Bodies of POST/PUT/PATCH must be JSON (415 otherwise).

    The Paystack webhook is exempt: its raw bytes are checked against the
    signature before anything looks at them.
    """

    METHODS_WITH_BODY = frozenset({"POST", "PUT", "PATCH"})
    EXEMPT_PATHS = ("/api/webhooks/paystack", "/api/health")

    async def dispatch(self, request: Request, call_next):
        if request.method in self.METHODS_WITH_BODY and not request.url.path.startswith(self.EXEMPT_PATHS):
            media_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
            if media_type and media_type != "application/json":
                return JSONResponse(
                    status_code=415,
                    content={
                        "success": False,
                        "error": "Type de contenu non supporté. Utilisez application/json",
                    },
                )
        return await call_next(request)


def register_middlewares(app: FastAPI) -> None:
    # Last added runs first
    app.add_middleware(ContentTypeValidationMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
