"""
Recipe Models: Recipe, RecipeIngredient, Menu, MenuItem.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IdType, TimestampMixin


class Recipe(TimestampMixin, Base):
    """
    A dish template meals are instantiated from.

    Predefined recipes are seeded and shared once validated. Custom recipes
    belong to the user who created them (owner_id) and are only offered to
    that user.
    """

    __tablename__ = "recipe"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(30), nullable=False)
    # Price for one person at standard quality, whole currency units
    base_price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    origin_continent: Mapped[Optional[str]] = mapped_column(String(60))
    origin_country: Mapped[Optional[str]] = mapped_column(String(60))
    is_custom: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_validated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    owner_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)

    ingredients: Mapped[list["RecipeIngredient"]] = relationship(
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeIngredient.position",
    )

    __table_args__ = (
        CheckConstraint("base_price >= 0", name="chk_recipe_base_price_non_negative"),
        Index("ix_recipe_visibility", "is_custom", "is_validated"),
    )

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, name={self.name!r}, base_price={self.base_price}, custom={self.is_custom})>"


class RecipeIngredient(Base):
    """Ingredient line of a recipe, for one person at standard quality."""

    __tablename__ = "recipe_ingredient"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    recipe_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("recipe.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    unit: Mapped[str] = mapped_column(String(30), nullable=False, default="")
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False, default=0)
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    recipe: Mapped["Recipe"] = relationship(back_populates="ingredients")

    def __repr__(self) -> str:
        return f"<RecipeIngredient(recipe={self.recipe_id}, name={self.name!r}, qty={self.quantity} {self.unit})>"


class Menu(TimestampMixin, Base):
    """
    A named sequence of recipe references.

    Items point at recipes by name and are resolved when the menu is used.
    """

    __tablename__ = "menu"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    owner_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)

    items: Mapped[list["MenuItem"]] = relationship(
        back_populates="menu",
        cascade="all, delete-orphan",
        order_by="MenuItem.position",
    )

    def __repr__(self) -> str:
        return f"<Menu(id={self.id}, name={self.name!r}, items={len(self.items)})>"


class MenuItem(Base):
    """One (meal type, recipe name) reference of a menu."""

    __tablename__ = "menu_item"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    menu_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("menu.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    meal_type: Mapped[str] = mapped_column(String(30), nullable=False)
    recipe_name: Mapped[str] = mapped_column(String(150), nullable=False)

    menu: Mapped["Menu"] = relationship(back_populates="items")
