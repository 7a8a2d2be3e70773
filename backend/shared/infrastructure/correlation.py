"""
Request correlation.

Every request carries an X-Request-ID so a checkout, the confirmation call
that follows it and the Paystack webhook it triggers can be traced through
the logs. Client-supplied IDs are kept only when they are short and made of
safe characters; anything else is replaced with a fresh UUID.
"""

import re
import uuid
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]+$")

_current_request_id: ContextVar[str | None] = ContextVar("talier_request_id", default=None)


def get_request_id() -> str | None:
    """ID of the request being served, None outside a request."""
    return _current_request_id.get()


def accept_request_id(candidate: str | None) -> str:
    """Keep a well-formed client ID, otherwise mint one."""
    if (
        candidate
        and len(candidate) <= MAX_REQUEST_ID_LENGTH
        and _SAFE_REQUEST_ID.match(candidate)
    ):
        return candidate
    return uuid.uuid4().hex


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = accept_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        token = _current_request_id.set(request_id)
        try:
            response = await call_next(request)
        finally:
            _current_request_id.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class CorrelationIdFilter:
    """Logging filter stamping records with the current request ID ("-" if none)."""

    def filter(self, record) -> bool:
        record.request_id = get_request_id() or "-"
        return True
