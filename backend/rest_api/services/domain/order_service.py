"""
Order Domain Service.

Checkout: prices the ordered meals server-side, records the order before
payment and reconciles charges that reached the webhook first. Payment
confirmation feeds the gateway's answer into the payment state machine.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rest_api.models import Order
from rest_api.repositories import (
    OrderRepository,
    RecipeRepository,
    recipe_to_template,
)
from rest_api.services.payments.reconciliation import PaymentReconciler, ReconciliationReport
from rest_api.services.payments.references import (
    generate_order_number,
    generate_payment_reference,
)
from rest_api.services.payments.state_machine import PaymentSignal, apply_payment_signal
from rest_api.services.payments.verification import PaymentVerifier
from rest_api.services.planning import delivery_fee_for, instantiate_meal
from shared.config.constants import (
    GatewayTransactionStatus,
    Limits,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from shared.config.logging import order_logger as logger, mask_email, mask_reference
from shared.config.settings import Settings, get_settings
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import (
    AmountMismatchError,
    ConflictError,
    InternalError,
    NotFoundError,
    OrderNotFoundError,
    PaymentNotSuccessfulError,
    ValidationError,
)
from shared.utils.schemas import CreateOrderRequest, OrderOutput


def order_to_output(order: Order) -> OrderOutput:
    return OrderOutput.model_validate(order, from_attributes=True)


class OrderService:
    """
    Domain service for checkout orders.

    Usage:
        service = OrderService(db)
        order = service.create_order(request)
    """

    def __init__(self, db: Session, settings: Settings | None = None):
        self._db = db
        self._settings = settings or get_settings()
        self._orders = OrderRepository(db)
        self._recipes = RecipeRepository(db)

    # =========================================================================
    # Checkout
    # =========================================================================

    def create_order(self, request: CreateOrderRequest) -> Order:
        """
        Record an order in en_attente / brouillon.

        Raises:
            NotFoundError: an item's recipe is not visible to the user
            ConflictError: the payment reference already has an order
        """
        reference = self._payment_reference(request)
        if self._orders.find_by_reference(reference) is not None:
            raise ConflictError(
                "Une commande existe déjà pour cette référence de paiement",
                reference=mask_reference(reference),
            )

        meals = []
        for item in request.items:
            recipe = self._recipes.find_visible(item.recipe_id, request.user_id)
            if recipe is None:
                raise NotFoundError("Recette", item.recipe_id)
            meals.append(
                instantiate_meal(recipe_to_template(recipe), item.person_count, item.quality)
            )

        subtotal = sum(meal.price for meal in meals)
        delivery_fee = delivery_fee_for(
            subtotal,
            self._settings.delivery_fee,
            self._settings.free_delivery_threshold,
        )

        order = Order(
            order_number=self._new_order_number(),
            reference_paiement=reference,
            statut_paiement=PaymentStatus.EN_ATTENTE,
            statut=OrderStatus.BROUILLON,
            methode_paiement=request.payment_method,
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            amount=subtotal + delivery_fee,
            currency=self._settings.currency,
            user_id=request.user_id,
            customer_email=request.customer_email,
            items=[meal.to_dict() for meal in meals],
            delivery_info=request.delivery_info.model_dump(by_alias=True),
        )
        self._orders.save(order)

        try:
            safe_commit(self._db)
        except IntegrityError as e:
            raise ConflictError(
                "Une commande existe déjà pour cette référence de paiement",
                reference=mask_reference(reference),
            ) from e

        logger.info(
            "Order created",
            order_id=order.id,
            order_number=order.order_number,
            reference=mask_reference(reference),
            amount=order.amount,
            items=len(meals),
            method=order.methode_paiement,
            customer=mask_email(order.customer_email),
        )

        # A charge may have reached the webhook before this commit
        if PaymentReconciler(self._db).reconcile_order(order):
            safe_commit(self._db)
            self._db.refresh(order)

        return order

    def _payment_reference(self, request: CreateOrderRequest) -> str:
        if request.payment_method == PaymentMethod.CASH:
            return generate_payment_reference(self._settings.cash_reference_prefix)
        if request.reference and request.reference.strip():
            return request.reference.strip()
        return generate_payment_reference(self._settings.order_number_prefix)

    def _new_order_number(self) -> str:
        for _ in range(Limits.ORDER_NUMBER_ATTEMPTS):
            number = generate_order_number(self._settings.order_number_prefix)
            if not self._orders.number_exists(number):
                return number
        raise InternalError("Impossible de générer un numéro de commande unique")

    # =========================================================================
    # Queries
    # =========================================================================

    def get_by_number(self, order_number: str) -> Order:
        order = self._orders.find_by_number(order_number)
        if order is None:
            raise OrderNotFoundError(order_number)
        return order

    # =========================================================================
    # Payment
    # =========================================================================

    async def confirm_payment(self, order_number: str, verifier: PaymentVerifier) -> tuple[Order, bool]:
        """
        Verify the order's payment with the gateway and apply the result.

        The gateway answer is a gateway-query signal: a success may override
        an earlier webhook failure. A failed transaction or a wrong amount
        marks the order echoue before the error is raised; abandoned and
        pending transactions leave it untouched.

        Returns (order, applied).
        """
        order = self.get_by_number(order_number)
        if order.methode_paiement == PaymentMethod.CASH:
            raise ValidationError(
                "Cette commande est payable à la livraison",
                order_number=order_number,
            )

        try:
            await verifier.verify(order.reference_paiement, expected_amount=order.amount)
        except PaymentNotSuccessfulError as e:
            if e.payment_status == GatewayTransactionStatus.FAILED:
                self._apply(order, PaymentSignal.query_failure())
            raise
        except AmountMismatchError:
            self._apply(order, PaymentSignal.query_failure())
            raise

        applied = self._apply(order, PaymentSignal.query_success())
        return order, applied

    def _apply(self, order: Order, signal: PaymentSignal) -> bool:
        result = apply_payment_signal(
            self._orders,
            order.id,
            order.statut_paiement,
            signal,
            reference=order.reference_paiement,
        )
        safe_commit(self._db)
        self._db.refresh(order)
        return result.applied

    def reconcile_pending_payments(self) -> ReconciliationReport:
        return PaymentReconciler(self._db).reconcile_pending()
