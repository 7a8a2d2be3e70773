"""
Application errors.

Each AppException subclass fixes an HTTP status and a log level. Raising one
logs it once, with its keyword context, and the handler in rest_api.core.errors
renders it as {"success": false, "error": <detail>, **extra}.

    raise NotFoundError("Commande", order_number)
    raise ValidationError("Le nombre de personnes doit être au moins 1")
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.constants import ErrorMessages
from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    status_code_default: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    log_level: str = "warning"

    def __init__(
        self,
        detail: str,
        *,
        status_code: int | None = None,
        headers: dict[str, str] | None = None,
        extra: dict[str, Any] | None = None,
        **log_context: Any,
    ):
        code = status_code or self.status_code_default
        getattr(logger, self.log_level)(detail, status_code=code, **log_context)
        self.extra = extra or {}
        super().__init__(status_code=code, detail=detail, headers=headers)


# 400


class ValidationError(AppException):
    status_code_default = status.HTTP_400_BAD_REQUEST


class PaymentNotSuccessfulError(ValidationError):
    """The gateway reports the transaction as failed, abandoned, etc."""

    def __init__(self, payment_status: str, **log_context: Any):
        self.payment_status = payment_status
        super().__init__(
            f"Paiement non réussi (statut: {payment_status})",
            extra={"paymentStatus": payment_status},
            payment_status=payment_status,
            **log_context,
        )


class AmountMismatchError(ValidationError):
    """Success for an amount other than the order's: a rejection, never a payment."""

    def __init__(self, expected: int, received: int, **log_context: Any):
        self.expected = expected
        self.received = received
        super().__init__(ErrorMessages.AMOUNT_MISMATCH, expected=expected, received=received, **log_context)


# 401


class AuthenticationError(AppException):
    """The response never says why; the reason only goes to the log."""

    status_code_default = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = ErrorMessages.INVALID_SIGNATURE, **log_context: Any):
        super().__init__(detail, **log_context)


# 404


class NotFoundError(AppException):
    status_code_default = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        detail = f"{entity} {entity_id} introuvable" if entity_id is not None else f"{entity} introuvable"
        super().__init__(detail, entity=entity, entity_id=entity_id, **log_context)


class OrderNotFoundError(NotFoundError):
    def __init__(self, identifier: str | None = None, **log_context: Any):
        super().__init__("Commande", identifier, **log_context)


class TransactionNotFoundError(AppException):
    """Paystack answered status: false for the reference."""

    status_code_default = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str | None = None, **log_context: Any):
        super().__init__(message or ErrorMessages.TRANSACTION_NOT_FOUND, **log_context)


# 409


class ConflictError(AppException):
    status_code_default = status.HTTP_409_CONFLICT


# 500


class InternalError(AppException):
    log_level = "error"

    def __init__(self, detail: str = "Erreur interne du serveur", **log_context: Any):
        super().__init__(detail, **log_context)


class ConfigurationError(InternalError):
    """A required server-side setting (e.g. the Paystack key) is missing."""

    def __init__(self, setting: str, **log_context: Any):
        super().__init__(ErrorMessages.SERVER_MISCONFIGURED, setting=setting, **log_context)


# 502 / 503


class UpstreamUnavailableError(AppException):
    """Paystack unreachable, failing or behind an open circuit. No order state was touched."""

    status_code_default = status.HTTP_502_BAD_GATEWAY
    log_level = "error"

    def __init__(
        self,
        service: str,
        detail: str | None = None,
        retry_after: int | None = None,
        **log_context: Any,
    ):
        super().__init__(
            detail or f"Erreur lors de la communication avec {service}",
            headers={"Retry-After": str(retry_after)} if retry_after else None,
            service=service,
            **log_context,
        )


class PersistenceUnavailableError(AppException):
    """Storage failed while applying an event; the sender should redeliver."""

    status_code_default = status.HTTP_503_SERVICE_UNAVAILABLE
    log_level = "error"

    def __init__(self, operation: str, **log_context: Any):
        super().__init__(
            f"Erreur de base de données pendant {operation}. Veuillez réessayer.",
            operation=operation,
            **log_context,
        )
