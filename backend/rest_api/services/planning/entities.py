"""
Planning value objects.

Plain frozen dataclasses with no persistence dependency: the pricing,
assembly and consolidation functions work on these, and repositories map
ORM rows to and from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class IngredientSnapshot:
    """An ingredient line: quantity in `unit`, price in whole currency units."""

    name: str
    unit: str
    quantity: Decimal
    price: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "unit": self.unit,
            "quantity": str(self.quantity),
            "price": self.price,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IngredientSnapshot:
        return cls(
            name=data["name"],
            unit=data.get("unit", ""),
            quantity=Decimal(str(data.get("quantity", 0))),
            price=int(data.get("price", 0)),
        )


@dataclass(frozen=True)
class RecipeTemplate:
    """A recipe as offered for planning; ingredient lines are for one person."""

    id: int | None
    name: str
    category: str
    base_price: int
    ingredients: tuple[IngredientSnapshot, ...] = ()
    origin_continent: str | None = None
    origin_country: str | None = None
    is_custom: bool = False
    is_validated: bool = True


@dataclass(frozen=True)
class MenuRef:
    """A menu line pointing at a recipe by name."""

    meal_type: str
    recipe_name: str


@dataclass(frozen=True)
class MenuTemplate:
    id: int | None
    name: str
    items: tuple[MenuRef, ...] = ()


@dataclass(frozen=True)
class Meal:
    """
    A recipe instantiated for a person count and quality tier.

    The ingredient snapshot is taken at instantiation; later recipe edits
    never reach an existing Meal.
    """

    name: str
    category: str
    unit_price: int
    person_count: int
    quality: str
    price: int
    ingredients: tuple[IngredientSnapshot, ...] = ()
    recipe_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "recipeId": self.recipe_id,
            "name": self.name,
            "category": self.category,
            "unitPrice": self.unit_price,
            "personCount": self.person_count,
            "quality": self.quality,
            "price": self.price,
            "ingredients": [ingredient.to_dict() for ingredient in self.ingredients],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Meal:
        return cls(
            name=data["name"],
            category=data.get("category", ""),
            unit_price=int(data.get("unitPrice", 0)),
            person_count=int(data.get("personCount", 1)),
            quality=data.get("quality", "standard"),
            price=int(data.get("price", 0)),
            ingredients=tuple(
                IngredientSnapshot.from_dict(item) for item in data.get("ingredients", [])
            ),
            recipe_id=data.get("recipeId"),
        )


@dataclass(frozen=True)
class PlannedMeal:
    """A Meal placed on a date and slot of a user's planning."""

    planned_for: date
    slot: str
    meal: Meal
    entry_id: int | None = field(default=None, compare=False)
