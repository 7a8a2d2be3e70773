"""
Utilities module: Exceptions, schemas.
"""

from shared.utils.exceptions import (
    AppException,
    NotFoundError,
    ValidationError,
    ConflictError,
    AuthenticationError,
    UpstreamUnavailableError,
)
from shared.utils.schemas import ErrorResponse

__all__ = [
    # exceptions
    "AppException",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "AuthenticationError",
    "UpstreamUnavailableError",
    # schemas
    "ErrorResponse",
]
