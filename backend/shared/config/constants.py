"""
Centralized constants for the backend application.
Avoids magic strings for statuses, tiers and slots.

Usage:
    from shared.config.constants import PaymentStatus, QualityTier

    if order.statut_paiement == PaymentStatus.PAYE:
        ...
"""

from decimal import Decimal
from typing import Final


# =============================================================================
# Planning
# =============================================================================


class MealSlot:
    """Time-of-day slot a planned meal belongs to."""

    BREAKFAST: Final[str] = "breakfast"
    LUNCH: Final[str] = "lunch"
    SNACK: Final[str] = "snack"
    DINNER: Final[str] = "dinner"

    ALL: Final[list[str]] = [BREAKFAST, LUNCH, SNACK, DINNER]


class MealCategory:
    """Dish category of a recipe or meal."""

    ENTREE: Final[str] = "entree"
    PRINCIPAL: Final[str] = "principal"
    ACCOMPAGNEMENT: Final[str] = "accompagnement"
    DESSERT: Final[str] = "dessert"
    BOISSON: Final[str] = "boisson"

    ALL: Final[list[str]] = [ENTREE, PRINCIPAL, ACCOMPAGNEMENT, DESSERT, BOISSON]


class QualityTier:
    """Ingredient grade a meal is priced at."""

    STANDARD: Final[str] = "standard"
    PREMIUM: Final[str] = "premium"
    BIO: Final[str] = "bio"

    ALL: Final[list[str]] = [STANDARD, PREMIUM, BIO]


QUALITY_MULTIPLIERS: Final[dict[str, Decimal]] = {
    QualityTier.STANDARD: Decimal("1"),
    QualityTier.PREMIUM: Decimal("1.5"),
    QualityTier.BIO: Decimal("2"),
}


# =============================================================================
# Orders & Payments
# =============================================================================


class PaymentStatus:
    """Order payment status (statut_paiement)."""

    EN_ATTENTE: Final[str] = "en_attente"
    PAYE: Final[str] = "paye"
    ECHOUE: Final[str] = "echoue"

    ALL: Final[list[str]] = [EN_ATTENTE, PAYE, ECHOUE]
    TERMINAL: Final[frozenset[str]] = frozenset({PAYE, ECHOUE})


class OrderStatus:
    """Order lifecycle status (statut)."""

    BROUILLON: Final[str] = "brouillon"
    CONFIRMEE: Final[str] = "confirmee"

    ALL: Final[list[str]] = [BROUILLON, CONFIRMEE]


class PaymentMethod:
    """How the customer pays at checkout."""

    PAYSTACK: Final[str] = "paystack"
    CASH: Final[str] = "cash"

    ALL: Final[list[str]] = [PAYSTACK, CASH]


class GatewayTransactionStatus:
    """Transaction status reported by the Paystack verify endpoint."""

    SUCCESS: Final[str] = "success"
    FAILED: Final[str] = "failed"
    ABANDONED: Final[str] = "abandoned"
    PENDING: Final[str] = "pending"


class WebhookEventType:
    """Paystack webhook event names handled by the payment state machine."""

    CHARGE_SUCCESS: Final[str] = "charge.success"
    CHARGE_FAILED: Final[str] = "charge.failed"


class PaymentLogStatus:
    """Status recorded on a payment log entry."""

    SUCCESS: Final[str] = "success"


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    MIN_PERSON_COUNT: Final[int] = 1
    MAX_PERSON_COUNT: Final[int] = 50

    MIN_FAMILY_SIZE: Final[int] = 1
    MAX_FAMILY_SIZE: Final[int] = 30

    # Largest quantity a shopping list line may be set to, in its own unit
    MAX_SHOPPING_QUANTITY: Final[int] = 100_000

    MAX_ORDER_ITEMS: Final[int] = 100
    MAX_REFERENCE_LENGTH: Final[int] = 100

    ORDER_NUMBER_ATTEMPTS: Final[int] = 5


# =============================================================================
# Error Messages
# =============================================================================


class ErrorMessages:
    """Standardized error messages in French."""

    MISSING_REFERENCE: Final[str] = "Référence de paiement manquante"
    SERVER_MISCONFIGURED: Final[str] = "Configuration serveur incorrecte"
    GATEWAY_ERROR: Final[str] = "Erreur de vérification Paystack"
    TRANSACTION_NOT_FOUND: Final[str] = "Transaction non trouvée"
    AMOUNT_MISMATCH: Final[str] = "Montant du paiement incorrect"
    VERIFICATION_FAILED: Final[str] = "Erreur serveur lors de la vérification"
    INVALID_SIGNATURE: Final[str] = "Signature invalide"
    WEBHOOK_PROCESSING_ERROR: Final[str] = "Erreur de traitement"
    INVALID_REQUEST: Final[str] = "Requête invalide"
