"""
Tests for the Paystack webhook endpoint.
"""

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from rest_api.models import Order, PaymentLog
from rest_api.services.payments.webhook import PaystackWebhookProcessor
from shared.config.constants import OrderStatus, PaymentStatus
from tests.conftest import make_order, order_payload, sign_body, webhook_body


WEBHOOK_URL = "/api/webhooks/paystack"
REFERENCE = "TLR_1735689600000_AB12CD"


def post_webhook(client, body: bytes, signature: str | bytes | None = "valid"):
    headers = {"Content-Type": "application/json"}
    if signature == "valid":
        headers["x-paystack-signature"] = sign_body(body)
    elif signature is not None:
        headers["x-paystack-signature"] = signature
    return client.post(WEBHOOK_URL, content=body, headers=headers)


def payment_logs(db_session) -> list[PaymentLog]:
    return list(db_session.scalars(select(PaymentLog)))


class TestWebhookSignature:

    def test_bad_signature_rejected_and_order_unchanged(self, client, db_session):
        order = make_order(db_session, reference=REFERENCE, amount=5000)
        body = webhook_body("charge.success", REFERENCE, 5000)

        response = post_webhook(client, body, signature="0" * 128)

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Signature invalide"}
        db_session.refresh(order)
        assert order.statut_paiement == PaymentStatus.EN_ATTENTE

    def test_missing_signature_rejected(self, client):
        response = post_webhook(client, webhook_body("charge.success", REFERENCE, 5000), signature=None)

        assert response.status_code == 401

    def test_signature_of_other_body_rejected(self, client, db_session):
        make_order(db_session, reference=REFERENCE, amount=5000)
        signed = webhook_body("charge.success", REFERENCE, 5)
        sent = webhook_body("charge.success", REFERENCE, 5000)

        response = post_webhook(client, sent, signature=sign_body(signed))

        assert response.status_code == 401

    def test_non_ascii_signature_rejected(self, client, db_session):
        order = make_order(db_session, reference=REFERENCE, amount=5000)

        response = post_webhook(client, webhook_body("charge.success", REFERENCE, 5000), signature=b"\xe9" * 4)

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Signature invalide"}
        db_session.refresh(order)
        assert order.statut_paiement == PaymentStatus.EN_ATTENTE

    def test_unparseable_body_acknowledged_with_error(self, client):
        body = b"not json at all"

        response = post_webhook(client, body)

        assert response.status_code == 200
        assert response.json() == {"received": True, "error": "Erreur de traitement"}

    def test_liveness_probe(self, client):
        response = client.get(WEBHOOK_URL)

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert "timestamp" in response.json()


class TestChargeSuccess:

    def test_pays_order(self, client, db_session):
        order = make_order(db_session, reference=REFERENCE, amount=5000)

        response = post_webhook(client, webhook_body("charge.success", REFERENCE, 5000))

        assert response.status_code == 200
        assert response.json() == {"received": True, "status": "applied"}
        db_session.refresh(order)
        assert order.statut_paiement == PaymentStatus.PAYE
        assert order.statut == OrderStatus.CONFIRMEE

    def test_redelivery_is_a_single_transition(self, client, db_session):
        make_order(db_session, reference=REFERENCE, amount=5000)
        body = webhook_body("charge.success", REFERENCE, 5000)

        first = post_webhook(client, body)
        second = post_webhook(client, body)

        assert first.json()["status"] == "applied"
        assert second.json()["status"] == "duplicate"

    def test_wrong_amount_fails_order(self, client, db_session):
        order = make_order(db_session, reference=REFERENCE, amount=5000)

        response = post_webhook(client, webhook_body("charge.success", REFERENCE, 500))

        assert response.status_code == 200
        assert response.json()["status"] == "rejected"
        db_session.refresh(order)
        assert order.statut_paiement == PaymentStatus.ECHOUE

    def test_success_after_failure_does_not_override(self, client, db_session):
        order = make_order(db_session, reference=REFERENCE, amount=5000)

        post_webhook(client, webhook_body("charge.failed", REFERENCE, 5000))
        response = post_webhook(client, webhook_body("charge.success", REFERENCE, 5000))

        assert response.json()["status"] == "duplicate"
        db_session.refresh(order)
        assert order.statut_paiement == PaymentStatus.ECHOUE

    def test_unknown_reference_logged_once(self, client, db_session):
        body = webhook_body("charge.success", REFERENCE, 5000)

        first = post_webhook(client, body)
        second = post_webhook(client, body)

        assert first.json()["status"] == "logged"
        assert second.json()["status"] == "duplicate"
        logs = payment_logs(db_session)
        assert len(logs) == 1
        assert logs[0].reference == REFERENCE
        assert logs[0].amount == 5000
        assert logs[0].processed is False
        assert logs[0].customer_email == "awa@talier.sn"
        assert logs[0].payment_metadata == {"order_type": "meal_plan"}

    def test_logged_charge_applied_when_order_is_created(self, client, db_session, seed_recipes):
        post_webhook(client, webhook_body("charge.success", REFERENCE, 5000))

        # Poulet Yassa for 2 = 4000, plus 1000 delivery
        response = client.post(
            "/api/orders",
            json=order_payload(seed_recipes["poulet"].id, reference=REFERENCE),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["amount"] == 5000
        assert data["statutPaiement"] == PaymentStatus.PAYE
        assert data["statut"] == OrderStatus.CONFIRMEE
        assert payment_logs(db_session)[0].processed is True

    def test_logged_charge_with_other_amount_fails_new_order(self, client, db_session, seed_recipes):
        post_webhook(client, webhook_body("charge.success", REFERENCE, 100))

        response = client.post(
            "/api/orders",
            json=order_payload(seed_recipes["poulet"].id, reference=REFERENCE),
        )

        assert response.json()["statutPaiement"] == PaymentStatus.ECHOUE

    def test_storage_failure_asks_for_redelivery(self, client, db_session, monkeypatch):
        def broken(self, event):
            raise OperationalError("UPDATE orders", {}, Exception("database is locked"))

        monkeypatch.setattr(PaystackWebhookProcessor, "process", broken)

        response = post_webhook(client, webhook_body("charge.success", REFERENCE, 5000))

        assert response.status_code == 503
        assert response.json()["success"] is False


class TestChargeFailed:

    def test_fails_pending_order(self, client, db_session):
        order = make_order(db_session, reference=REFERENCE, amount=5000)

        response = post_webhook(client, webhook_body("charge.failed", REFERENCE, 5000))

        assert response.json() == {"received": True, "status": "applied"}
        db_session.refresh(order)
        assert order.statut_paiement == PaymentStatus.ECHOUE
        assert order.statut == OrderStatus.BROUILLON

    def test_never_overrides_paid_order(self, client, db_session):
        order = make_order(db_session, reference=REFERENCE, amount=5000, statut_paiement=PaymentStatus.PAYE)

        response = post_webhook(client, webhook_body("charge.failed", REFERENCE, 5000))

        assert response.json()["status"] == "duplicate"
        db_session.refresh(order)
        assert order.statut_paiement == PaymentStatus.PAYE

    def test_unknown_reference_dropped(self, client, db_session):
        response = post_webhook(client, webhook_body("charge.failed", REFERENCE, 5000))

        assert response.json()["status"] == "dropped"
        assert payment_logs(db_session) == []
        assert db_session.query(Order).count() == 0


class TestOtherEvents:

    def test_ignored(self, client, db_session):
        order = make_order(db_session, reference=REFERENCE, amount=5000)
        body = b'{"event": "transfer.success", "data": {"reference": "TLR_1735689600000_AB12CD"}}'

        response = post_webhook(client, body)

        assert response.json() == {"received": True, "status": "ignored"}
        db_session.refresh(order)
        assert order.statut_paiement == PaymentStatus.EN_ATTENTE
