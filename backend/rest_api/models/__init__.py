"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class and TimestampMixin
- recipe: Recipe, RecipeIngredient, Menu, MenuItem
- planning: PlanningEntry, Household
- order: Order
- payment_log: PaymentLog
"""

# Base classes
from .base import Base, TimestampMixin

# Catalog
from .recipe import Recipe, RecipeIngredient, Menu, MenuItem

# Planning
from .planning import PlanningEntry, Household

# Orders & payments
from .order import Order
from .payment_log import PaymentLog

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Catalog
    "Recipe",
    "RecipeIngredient",
    "Menu",
    "MenuItem",
    # Planning
    "PlanningEntry",
    "Household",
    # Orders & payments
    "Order",
    "PaymentLog",
]
