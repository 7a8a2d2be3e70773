"""
Planning router - meals, household size, shopping list.
"""

from .routes import router

__all__ = ["router"]
