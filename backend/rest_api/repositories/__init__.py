"""
Repository Pattern implementation.
The persistence gateway: every read and write of orders, payment logs,
planning and recipes goes through these classes.

Usage:
    from rest_api.repositories import OrderRepository

    repo = OrderRepository(db)
    order = repo.find_by_reference("TLR_1735689600000_AB12CD")
"""

from .base import BaseRepository
from .order import OrderRepository
from .payment_log import PaymentLogRepository
from .planning import PlanningRepository, entry_to_planned_meal
from .recipe import RecipeRepository, recipe_to_template, menu_to_template

__all__ = [
    # Base
    "BaseRepository",
    # Orders & payments
    "OrderRepository",
    "PaymentLogRepository",
    # Planning
    "PlanningRepository",
    "entry_to_planned_meal",
    # Recipes
    "RecipeRepository",
    "recipe_to_template",
    "menu_to_template",
]
