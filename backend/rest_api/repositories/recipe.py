"""
Recipe Repository - Data access for recipes and menus.

A user sees every validated predefined recipe plus their own custom ones.
Rows are mapped to planning value objects so the planning core never sees
the ORM.
"""

from typing import Sequence

from sqlalchemy import Select, and_, or_, select
from sqlalchemy.orm import selectinload

from rest_api.models import Menu, Recipe
from rest_api.services.planning.entities import (
    IngredientSnapshot,
    MenuRef,
    MenuTemplate,
    RecipeTemplate,
)
from .base import BaseRepository


def recipe_to_template(recipe: Recipe) -> RecipeTemplate:
    return RecipeTemplate(
        id=recipe.id,
        name=recipe.name,
        category=recipe.category,
        base_price=recipe.base_price,
        ingredients=tuple(
            IngredientSnapshot(
                name=line.name,
                unit=line.unit,
                quantity=line.quantity,
                price=line.price,
            )
            for line in recipe.ingredients
        ),
        origin_continent=recipe.origin_continent,
        origin_country=recipe.origin_country,
        is_custom=recipe.is_custom,
        is_validated=recipe.is_validated,
    )


def menu_to_template(menu: Menu) -> MenuTemplate:
    return MenuTemplate(
        id=menu.id,
        name=menu.name,
        items=tuple(MenuRef(item.meal_type, item.recipe_name) for item in menu.items),
    )


class RecipeRepository(BaseRepository[Recipe]):
    """
    Repository for Recipe and Menu entities.

    Guarantees eager loading of recipe ingredients and menu items.
    """

    @property
    def model(self) -> type[Recipe]:
        return Recipe

    def _visible_query(self, user_id: str | None) -> Select:
        shared_recipes = and_(Recipe.is_custom.is_(False), Recipe.is_validated.is_(True))
        if user_id is None:
            condition = shared_recipes
        else:
            condition = or_(
                shared_recipes,
                and_(Recipe.is_custom.is_(True), Recipe.owner_id == user_id),
            )
        return (
            select(Recipe)
            .where(condition)
            .options(selectinload(Recipe.ingredients))
        )

    def list_available(self, user_id: str | None) -> Sequence[Recipe]:
        """Predefined recipes first, then the user's own, each by id."""
        query = self._visible_query(user_id).order_by(Recipe.is_custom, Recipe.id)
        return self._db.execute(query).scalars().unique().all()

    def find_visible(self, recipe_id: int, user_id: str | None) -> Recipe | None:
        return self._db.scalar(self._visible_query(user_id).where(Recipe.id == recipe_id))

    def find_menu(self, menu_id: int, user_id: str | None) -> Menu | None:
        """A shared menu (no owner) or one owned by the user."""
        query = (
            select(Menu)
            .where(Menu.id == menu_id)
            .options(selectinload(Menu.items))
        )
        if user_id is None:
            query = query.where(Menu.owner_id.is_(None))
        else:
            query = query.where(or_(Menu.owner_id.is_(None), Menu.owner_id == user_id))
        return self._db.scalar(query)
