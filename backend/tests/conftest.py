"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Settings are read when shared.config.settings is first imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PAYSTACK_SECRET_KEY"] = "sk_test_secret"
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"

import hashlib
import hmac
import json
from decimal import Decimal
from urllib.parse import unquote

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from rest_api.models import (
    Base, Menu, MenuItem, Order, Recipe, RecipeIngredient,
)
from rest_api.services.payments.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    is_gateway_failure,
)
from rest_api.services.payments.paystack import PaystackClient, get_paystack_client
from shared.config.constants import OrderStatus, PaymentMethod, PaymentStatus
from shared.infrastructure.db import get_db
from shared.security.rate_limit import limiter


PAYSTACK_SECRET = "sk_test_secret"
USER_ID = "user-1"
OTHER_USER_ID = "user-2"


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def sign_body(body: bytes | str, secret: str = PAYSTACK_SECRET) -> str:
    """x-paystack-signature for a raw body."""
    if isinstance(body, str):
        body = body.encode()
    return hmac.new(secret.encode(), body, hashlib.sha512).hexdigest()


def webhook_body(event: str, reference: str, amount: int, **data) -> bytes:
    payload = {
        "event": event,
        "data": {
            "id": 4099260516,
            "reference": reference,
            "amount": amount,
            "status": "success" if event == "charge.success" else "failed",
            "channel": "card",
            "currency": "XOF",
            "paid_at": "2025-01-01T10:00:00.000Z",
            "customer": {"email": "awa@talier.sn", "customer_code": "CUS_xnxdt6s1zg1f4nx"},
            "metadata": {"order_type": "meal_plan"},
            **data,
        },
    }
    return json.dumps(payload).encode()


class FakePaystack:
    """
    In-memory stand-in for GET /transaction/verify/{reference}.

    Unknown references answer 200 with status false, like the real API
    answers a well-formed lookup of a reference it never saw.
    """

    def __init__(self):
        self.transactions: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.error: Exception | None = None

    def add(self, reference: str, status: str = "success", amount: int = 10000, **fields) -> dict:
        transaction = {
            "id": len(self.transactions) + 1,
            "domain": "test",
            "status": status,
            "reference": reference,
            "amount": amount,
            "currency": "XOF",
            "channel": "card",
            "paid_at": "2025-01-01T10:00:00.000Z",
            "created_at": "2025-01-01T09:59:00.000Z",
            "customer": {"id": 1, "email": "awa@talier.sn", "customer_code": "CUS_xnxdt6s1zg1f4nx"},
            "metadata": {"order_type": "meal_plan"},
            **fields,
        }
        self.transactions[reference] = transaction
        return transaction

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"status": False, "message": "Gateway error"})

        # raw_path keeps an escaped "/" inside the reference
        reference = unquote(request.url.raw_path.decode().split("?", 1)[0].rsplit("/", 1)[-1])
        transaction = self.transactions.get(reference)
        if transaction is None:
            return httpx.Response(
                200, json={"status": False, "message": "Transaction reference not found"}
            )
        return httpx.Response(
            200, json={"status": True, "message": "Verification successful", "data": transaction}
        )


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def paystack():
    return FakePaystack()


@pytest.fixture
def breaker():
    """A breaker per test so failures never leak between tests."""
    return CircuitBreaker(
        CircuitBreakerConfig(
            name="paystack",
            failure_threshold=2,
            success_threshold=1,
            timeout_seconds=30.0,
            is_failure=is_gateway_failure,
        )
    )


@pytest.fixture
def paystack_client(paystack, breaker):
    return PaystackClient(
        secret_key=PAYSTACK_SECRET,
        base_url="https://api.paystack.test",
        breaker=breaker,
        transport=httpx.MockTransport(paystack.handler),
    )


@pytest.fixture(scope="function")
def client(db_session, paystack_client):
    """
    Create a test client with database session and gateway overrides.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_paystack_client] = lambda: paystack_client
    limiter.reset()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def seed_recipes(db_session):
    """
    Predefined and custom recipes.

    Ingredient lines are for one person at standard quality.
    """
    poulet = Recipe(
        name="Poulet Yassa",
        category="principal",
        base_price=2000,
        origin_continent="Afrique",
        origin_country="Sénégal",
        is_custom=False,
        is_validated=True,
        ingredients=[
            RecipeIngredient(position=0, name="Poulet", unit="kg", quantity=Decimal("0.25"), price=1200),
            RecipeIngredient(position=1, name="Oignon", unit="kg", quantity=Decimal("0.2"), price=200),
            RecipeIngredient(position=2, name="Riz", unit="kg", quantity=Decimal("0.15"), price=150),
        ],
    )
    thieb = Recipe(
        name="Thieboudienne",
        category="principal",
        base_price=2500,
        origin_continent="Afrique",
        origin_country="Sénégal",
        is_custom=False,
        is_validated=True,
        ingredients=[
            RecipeIngredient(position=0, name="riz ", unit="KG", quantity=Decimal("0.2"), price=200),
            RecipeIngredient(position=1, name="Poisson", unit="kg", quantity=Decimal("0.2"), price=1500),
        ],
    )
    pending = Recipe(
        name="Mafé",
        category="principal",
        base_price=2200,
        is_custom=False,
        is_validated=False,
    )
    custom = Recipe(
        name="Salade maison",
        category="entree",
        base_price=1500,
        is_custom=True,
        is_validated=False,
        owner_id=USER_ID,
        ingredients=[
            RecipeIngredient(position=0, name="Laitue", unit="piece", quantity=Decimal("1"), price=300),
        ],
    )
    foreign = Recipe(
        name="Salade voisine",
        category="entree",
        base_price=1800,
        is_custom=True,
        is_validated=False,
        owner_id=OTHER_USER_ID,
    )
    db_session.add_all([poulet, thieb, pending, custom, foreign])
    db_session.commit()

    return {
        "poulet": poulet,
        "thieb": thieb,
        "pending": pending,
        "custom": custom,
        "foreign": foreign,
    }


@pytest.fixture
def seed_menu(db_session, seed_recipes):
    """Shared menu; its dessert names a recipe that does not exist."""
    menu = Menu(
        name="Menu Dakar",
        items=[
            MenuItem(position=0, meal_type="principal", recipe_name="Poulet Yassa"),
            MenuItem(position=1, meal_type="principal", recipe_name="Thieboudienne"),
            MenuItem(position=2, meal_type="dessert", recipe_name="Thiakry"),
        ],
    )
    db_session.add(menu)
    db_session.commit()
    return menu


def make_order(
    db_session,
    reference: str = "TLR250101AB12",
    amount: int = 10000,
    statut_paiement: str = PaymentStatus.EN_ATTENTE,
    methode_paiement: str = PaymentMethod.PAYSTACK,
    order_number: str = "TLR2501010001",
) -> Order:
    """Insert an order directly, bypassing checkout pricing."""
    order = Order(
        order_number=order_number,
        reference_paiement=reference,
        statut_paiement=statut_paiement,
        statut=OrderStatus.CONFIRMEE if statut_paiement == PaymentStatus.PAYE else OrderStatus.BROUILLON,
        methode_paiement=methode_paiement,
        subtotal=amount,
        delivery_fee=0,
        amount=amount,
        currency="XOF",
        user_id=USER_ID,
        customer_email="awa@talier.sn",
        items=[],
        delivery_info={"fullName": "Awa Diop", "phone": "+221770000000", "address": "12 rue Carnot"},
    )
    db_session.add(order)
    db_session.commit()
    db_session.refresh(order)
    return order


def order_payload(recipe_id: int, person_count: int = 2, quality: str = "standard", **fields) -> dict:
    payload = {
        "userId": USER_ID,
        "customerEmail": "awa@talier.sn",
        "items": [{"recipeId": recipe_id, "personCount": person_count, "quality": quality}],
        "deliveryInfo": {
            "fullName": "Awa Diop",
            "phone": "+221770000000",
            "address": "12 rue Carnot",
            "city": "Dakar",
        },
        "paymentMethod": "paystack",
    }
    payload.update(fields)
    return payload
