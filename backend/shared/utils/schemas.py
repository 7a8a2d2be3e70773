"""
Shared Pydantic schemas used across the application.

JSON bodies use camelCase (referencePaiement, expectedAmount, paidAt) while
Python attributes stay snake_case.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from shared.config.constants import Limits


# =============================================================================
# Common Types
# =============================================================================

QualityTierName = Literal["standard", "premium", "bio"]
MealSlotName = Literal["breakfast", "lunch", "snack", "dinner"]
PaymentMethodName = Literal["paystack", "cash"]
PaymentStatusName = Literal["en_attente", "paye", "echoue"]


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, accepting both spellings."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Body of every error response."""

    success: bool = False
    error: str


# =============================================================================
# Payment Verification Schemas
# =============================================================================


class VerifyPaymentRequest(CamelModel):
    """Body of POST /api/payment/verify."""

    reference: str | None = Field(default=None, max_length=Limits.MAX_REFERENCE_LENGTH)
    expected_amount: int | None = Field(default=None, ge=0)


class VerifiedPaymentData(CamelModel):
    """Transaction details returned once a payment is verified."""

    reference: str
    amount: int
    currency: str | None = None
    channel: str | None = None
    paid_at: datetime | None = None
    customer_email: str | None = None
    metadata: dict[str, Any] | None = None


class VerifyPaymentResponse(CamelModel):
    """Successful verification response."""

    success: bool = True
    verified: bool = True
    data: VerifiedPaymentData


class WebhookAck(BaseModel):
    """Acknowledgement sent back to the gateway."""

    received: bool = True
    status: str | None = None
    error: str | None = None


# =============================================================================
# Meal Schemas
# =============================================================================


class IngredientOutput(CamelModel):
    """Ingredient snapshot frozen into a planned or ordered meal."""

    name: str
    unit: str
    quantity: float
    price: int


class MealOutput(CamelModel):
    """A meal priced for a person count and quality tier."""

    recipe_id: int | None = None
    name: str
    category: str
    unit_price: int
    person_count: int
    quality: str
    price: int
    ingredients: list[IngredientOutput] = Field(default_factory=list)


class RecipeOutput(CamelModel):
    """A recipe offered to a user for planning or ordering."""

    id: int
    name: str
    category: str
    base_price: int
    origin_continent: str | None = None
    origin_country: str | None = None
    is_custom: bool
    is_validated: bool
    ingredients: list[IngredientOutput] = Field(default_factory=list)


# =============================================================================
# Order Schemas
# =============================================================================


class OrderItemInput(CamelModel):
    """A recipe ordered for a number of people at a quality tier."""

    recipe_id: int
    person_count: int = Field(default=1, ge=Limits.MIN_PERSON_COUNT, le=Limits.MAX_PERSON_COUNT)
    quality: QualityTierName = "standard"


class DeliveryInfoInput(CamelModel):
    """Where and to whom the order is delivered."""

    full_name: str = Field(min_length=1, max_length=120)
    phone: str = Field(min_length=4, max_length=30)
    address: str = Field(min_length=1, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=500)


class CreateOrderRequest(CamelModel):
    """Checkout request: the order is recorded before payment settles."""

    user_id: str | None = Field(default=None, max_length=64)
    customer_email: EmailStr | None = None
    items: list[OrderItemInput] = Field(min_length=1, max_length=Limits.MAX_ORDER_ITEMS)
    delivery_info: DeliveryInfoInput
    payment_method: PaymentMethodName = "paystack"
    reference: str | None = Field(default=None, max_length=Limits.MAX_REFERENCE_LENGTH)


class OrderOutput(CamelModel):
    """Order as returned to the checkout flow."""

    id: int
    order_number: str
    reference_paiement: str
    statut_paiement: str
    statut: str
    methode_paiement: str
    subtotal: int
    delivery_fee: int
    amount: int
    currency: str
    customer_email: str | None = None
    user_id: str | None = None
    items: list[dict[str, Any]]
    delivery_info: dict[str, Any]
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ConfirmPaymentResponse(CamelModel):
    """Result of confirming a checkout payment against the gateway."""

    success: bool = True
    applied: bool
    order: OrderOutput


# =============================================================================
# Planning Schemas
# =============================================================================


class AddMealRequest(CamelModel):
    """Plan one recipe on a date and slot."""

    date: date
    slot: MealSlotName
    recipe_id: int
    person_count: int = Field(default=1, ge=Limits.MIN_PERSON_COUNT, le=Limits.MAX_PERSON_COUNT)
    quality: QualityTierName = "standard"


class AddMenuRequest(CamelModel):
    """Plan every recipe of a menu on a date and slot."""

    date: date
    slot: MealSlotName
    menu_id: int
    person_count: int = Field(default=1, ge=Limits.MIN_PERSON_COUNT, le=Limits.MAX_PERSON_COUNT)
    quality: QualityTierName = "standard"


class PlanningEntryOutput(CamelModel):
    """A meal planned on a date and slot."""

    id: int
    date: date
    slot: str
    meal: MealOutput


class PlanningDayOutput(CamelModel):
    """All entries of one day with per-slot and daily totals."""

    date: date
    entries: list[PlanningEntryOutput]
    slot_totals: dict[str, int]
    total: int


class PlanningOutput(CamelModel):
    """A user's planning, grouped by day."""

    user_id: str
    family_size: int
    days: list[PlanningDayOutput]
    total: int


class FamilySizeOutput(CamelModel):
    """Household size of a user."""

    user_id: str
    family_size: int


class UpdateFamilySizeRequest(CamelModel):
    """Change the household size."""

    family_size: int = Field(ge=Limits.MIN_FAMILY_SIZE, le=Limits.MAX_FAMILY_SIZE)


# =============================================================================
# Shopping List Schemas
# =============================================================================


class ShoppingListRequest(CamelModel):
    """Edits the caller applies on top of the consolidated list."""

    today: date | None = None
    quantities: dict[str, Annotated[Decimal, Field(le=Limits.MAX_SHOPPING_QUANTITY)]] = Field(default_factory=dict)
    excluded: list[str] = Field(default_factory=list)


class ShoppingListLineOutput(CamelModel):
    """One consolidated ingredient line."""

    key: str
    name: str
    unit: str
    quantity: float
    price_per_unit: float
    total_price: int
    excluded: bool
    overridden: bool


class ShoppingListOutput(CamelModel):
    """Consolidated shopping list for the planned days from today on."""

    user_id: str
    today: date
    family_size: int
    lines: list[ShoppingListLineOutput]
    total: int
