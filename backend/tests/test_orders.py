"""
Tests for checkout orders, payment confirmation and reconciliation.
"""

import pytest
from sqlalchemy import select

from rest_api.models import Order, PaymentLog
from rest_api.repositories import PaymentLogRepository
from rest_api.services.domain import OrderService
from rest_api.services.payments.references import ORDER_NUMBER_PATTERN, REFERENCE_PATTERN
from shared.config.constants import OrderStatus, PaymentStatus
from shared.utils.exceptions import ConflictError, NotFoundError
from shared.utils.schemas import CreateOrderRequest
from tests.conftest import make_order, order_payload


ORDERS_URL = "/api/orders"


def create(client, payload) -> dict:
    response = client.post(ORDERS_URL, json=payload)
    assert response.status_code == 201, response.json()
    return response.json()


class TestCreateOrder:

    def test_prices_items_server_side(self, client, seed_recipes):
        data = create(client, order_payload(seed_recipes["poulet"].id, person_count=2, quality="premium"))

        assert data["subtotal"] == 6000
        # Free delivery from 5000
        assert data["deliveryFee"] == 0
        assert data["amount"] == 6000
        assert data["currency"] == "XOF"
        assert data["statutPaiement"] == PaymentStatus.EN_ATTENTE
        assert data["statut"] == OrderStatus.BROUILLON
        assert data["methodePaiement"] == "paystack"
        assert ORDER_NUMBER_PATTERN.match(data["orderNumber"])

    def test_small_order_pays_delivery(self, client, seed_recipes):
        data = create(client, order_payload(seed_recipes["poulet"].id, person_count=1))

        assert data["subtotal"] == 2000
        assert data["deliveryFee"] == 1000
        assert data["amount"] == 3000

    def test_items_snapshot_meals(self, client, seed_recipes):
        data = create(client, order_payload(seed_recipes["thieb"].id, person_count=2, quality="bio"))

        item = data["items"][0]
        assert item["name"] == "Thieboudienne"
        assert item["personCount"] == 2
        assert item["quality"] == "bio"
        assert item["price"] == 10000
        assert [line["name"] for line in item["ingredients"]] == ["riz ", "Poisson"]
        assert data["deliveryInfo"]["fullName"] == "Awa Diop"

    def test_client_reference_kept(self, client, seed_recipes):
        data = create(client, order_payload(seed_recipes["poulet"].id, reference="TLR_1735689600000_AB12CD"))

        assert data["referencePaiement"] == "TLR_1735689600000_AB12CD"

    def test_reference_generated_when_absent(self, client, seed_recipes):
        data = create(client, order_payload(seed_recipes["poulet"].id))

        assert REFERENCE_PATTERN.match(data["referencePaiement"])
        assert data["referencePaiement"].startswith("TLR_")

    def test_cash_order_gets_cash_reference(self, client, seed_recipes):
        data = create(client, order_payload(seed_recipes["poulet"].id, paymentMethod="cash", reference="ignored"))

        assert data["referencePaiement"].startswith("CASH_")
        assert data["methodePaiement"] == "cash"

    def test_duplicate_reference_conflicts(self, client, seed_recipes):
        payload = order_payload(seed_recipes["poulet"].id, reference="TLR_1735689600000_AB12CD")
        create(client, payload)

        response = client.post(ORDERS_URL, json=payload)

        assert response.status_code == 409

    def test_custom_recipe_of_owner(self, client, seed_recipes):
        data = create(client, order_payload(seed_recipes["custom"].id, person_count=1))

        assert data["subtotal"] == 1500

    def test_custom_recipe_of_someone_else_not_found(self, client, seed_recipes):
        response = client.post(ORDERS_URL, json=order_payload(seed_recipes["foreign"].id))

        assert response.status_code == 404

    def test_unvalidated_recipe_not_found(self, client, seed_recipes):
        response = client.post(ORDERS_URL, json=order_payload(seed_recipes["pending"].id))

        assert response.status_code == 404

    def test_empty_items_rejected(self, client, seed_recipes):
        payload = order_payload(seed_recipes["poulet"].id)
        payload["items"] = []

        response = client.post(ORDERS_URL, json=payload)

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_zero_people_rejected(self, client, seed_recipes):
        response = client.post(ORDERS_URL, json=order_payload(seed_recipes["poulet"].id, person_count=0))

        assert response.status_code == 400

    def test_get_by_number(self, client, seed_recipes):
        created = create(client, order_payload(seed_recipes["poulet"].id))

        response = client.get(f"{ORDERS_URL}/{created['orderNumber']}")

        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    def test_get_unknown_number(self, client):
        response = client.get(f"{ORDERS_URL}/TLR2501019999")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Commande TLR2501019999 introuvable"}


class TestOrderServiceDirect:
    """OrderService without the HTTP layer."""

    def test_conflict_raised_before_pricing(self, db_session, seed_recipes):
        make_order(db_session, reference="TLR_1735689600000_AB12CD")
        request = CreateOrderRequest.model_validate(
            order_payload(seed_recipes["poulet"].id, reference="TLR_1735689600000_AB12CD")
        )

        with pytest.raises(ConflictError):
            OrderService(db_session).create_order(request)

    def test_unknown_recipe(self, db_session, seed_recipes):
        request = CreateOrderRequest.model_validate(order_payload(999_999))

        with pytest.raises(NotFoundError):
            OrderService(db_session).create_order(request)

        assert db_session.query(Order).count() == 0


class TestConfirmPayment:
    """POST /api/orders/{orderNumber}/confirm-payment."""

    @pytest.fixture
    def order(self, db_session):
        return make_order(db_session, reference="TLR250101AB12", amount=10000)

    def confirm(self, client, order):
        return client.post(f"{ORDERS_URL}/{order.order_number}/confirm-payment")

    def test_success_pays_order(self, client, paystack, order, db_session):
        paystack.add(order.reference_paiement, amount=10000)

        response = self.confirm(client, order)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["applied"] is True
        assert data["order"]["statutPaiement"] == PaymentStatus.PAYE
        assert data["order"]["statut"] == OrderStatus.CONFIRMEE

    def test_second_confirmation_not_applied(self, client, paystack, order):
        paystack.add(order.reference_paiement, amount=10000)

        self.confirm(client, order)
        response = self.confirm(client, order)

        assert response.status_code == 200
        assert response.json()["applied"] is False
        assert response.json()["order"]["statutPaiement"] == PaymentStatus.PAYE

    def test_amount_mismatch_fails_order(self, client, paystack, order, db_session):
        paystack.add(order.reference_paiement, amount=9000)

        response = self.confirm(client, order)

        assert response.status_code == 400
        assert response.json()["error"] == "Montant du paiement incorrect"
        db_session.refresh(order)
        assert order.statut_paiement == PaymentStatus.ECHOUE

    def test_failed_transaction_fails_order(self, client, paystack, order, db_session):
        paystack.add(order.reference_paiement, status="failed", amount=10000)

        response = self.confirm(client, order)

        assert response.status_code == 400
        assert response.json()["paymentStatus"] == "failed"
        db_session.refresh(order)
        assert order.statut_paiement == PaymentStatus.ECHOUE

    def test_query_success_recovers_failed_order(self, client, paystack, order, db_session):
        paystack.add(order.reference_paiement, status="failed", amount=10000)
        self.confirm(client, order)

        paystack.add(order.reference_paiement, status="success", amount=10000)
        response = self.confirm(client, order)

        assert response.status_code == 200
        assert response.json()["applied"] is True
        assert response.json()["order"]["statutPaiement"] == PaymentStatus.PAYE

    def test_abandoned_leaves_order_pending(self, client, paystack, order, db_session):
        paystack.add(order.reference_paiement, status="abandoned", amount=10000)

        response = self.confirm(client, order)

        assert response.status_code == 400
        db_session.refresh(order)
        assert order.statut_paiement == PaymentStatus.EN_ATTENTE

    def test_gateway_down_leaves_order_pending(self, client, paystack, order, db_session):
        paystack.status_code = 502

        response = self.confirm(client, order)

        assert response.status_code == 502
        db_session.refresh(order)
        assert order.statut_paiement == PaymentStatus.EN_ATTENTE

    def test_paid_order_never_fails(self, client, paystack, db_session):
        order = make_order(db_session, reference="TLR250101AB12", amount=10000, statut_paiement=PaymentStatus.PAYE)
        paystack.add(order.reference_paiement, status="failed", amount=10000)

        self.confirm(client, order)

        db_session.refresh(order)
        assert order.statut_paiement == PaymentStatus.PAYE

    def test_cash_order_rejected(self, client, paystack, db_session):
        order = make_order(db_session, reference="CASH_1735689600000_AB12CD", methode_paiement="cash")

        response = self.confirm(client, order)

        assert response.status_code == 400
        assert paystack.requests == []

    def test_unknown_order(self, client):
        response = client.post(f"{ORDERS_URL}/TLR2501019999/confirm-payment")

        assert response.status_code == 404


class TestReconciliation:
    """Charges logged before their order."""

    def log_charge(self, db_session, reference: str, amount: int) -> PaymentLog:
        entry = PaymentLog(reference=reference, amount=amount, status="success", processed=False)
        assert PaymentLogRepository(db_session).insert(entry) is True
        db_session.commit()
        return entry

    def test_sweep_applies_waiting_charges(self, db_session):
        self.log_charge(db_session, "TLR_A", 5000)
        self.log_charge(db_session, "TLR_B", 7000)
        # Order A appears without going through checkout reconciliation
        order = make_order(db_session, reference="TLR_A", amount=5000)

        report = OrderService(db_session).reconcile_pending_payments()

        assert (report.examined, report.applied, report.waiting) == (2, 1, 1)
        db_session.refresh(order)
        assert order.statut_paiement == PaymentStatus.PAYE

    def test_sweep_is_idempotent(self, db_session):
        self.log_charge(db_session, "TLR_A", 5000)
        make_order(db_session, reference="TLR_A", amount=5000)
        service = OrderService(db_session)

        service.reconcile_pending_payments()
        report = service.reconcile_pending_payments()

        assert report.examined == 0
        assert report.applied == 0

    def test_duplicate_log_refused(self, db_session):
        self.log_charge(db_session, "TLR_A", 5000)

        inserted = PaymentLogRepository(db_session).insert(
            PaymentLog(reference="TLR_A", amount=5000, status="success", processed=False)
        )

        assert inserted is False
        assert len(list(db_session.scalars(select(PaymentLog)))) == 1

    def test_claimed_entry_not_claimed_twice(self, db_session):
        entry = self.log_charge(db_session, "TLR_A", 5000)
        repo = PaymentLogRepository(db_session)

        assert repo.mark_processed(entry.id) is True
        assert repo.mark_processed(entry.id) is False

