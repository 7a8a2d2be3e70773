"""
Planning core: pricing, meal/menu assembly and shopping list consolidation.

Pure functions over the value objects in `entities`; no database access.
"""

from .entities import (
    IngredientSnapshot,
    RecipeTemplate,
    MenuRef,
    MenuTemplate,
    Meal,
    PlannedMeal,
)
from .pricing import (
    round_currency,
    quality_multiplier,
    unit_line_price,
    delivery_fee_for,
)
from .assembly import instantiate_meal, instantiate_menu
from .consolidation import (
    ConsolidatedLine,
    ShoppingLineView,
    ShoppingListSession,
    consolidate,
    ingredient_key,
)

__all__ = [
    # entities
    "IngredientSnapshot",
    "RecipeTemplate",
    "MenuRef",
    "MenuTemplate",
    "Meal",
    "PlannedMeal",
    # pricing
    "round_currency",
    "quality_multiplier",
    "unit_line_price",
    "delivery_fee_for",
    # assembly
    "instantiate_meal",
    "instantiate_menu",
    # consolidation
    "ConsolidatedLine",
    "ShoppingLineView",
    "ShoppingListSession",
    "consolidate",
    "ingredient_key",
]
