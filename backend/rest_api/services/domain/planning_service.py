"""
Planning Domain Service.

Adds and removes planned meals, keeps the household size and builds the
shopping list from the user's planning.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping

from sqlalchemy.orm import Session

from rest_api.models import PlanningEntry
from rest_api.repositories import (
    PlanningRepository,
    RecipeRepository,
    entry_to_planned_meal,
    menu_to_template,
    recipe_to_template,
)
from rest_api.services.planning import (
    Meal,
    PlannedMeal,
    ShoppingListSession,
    instantiate_meal,
    instantiate_menu,
)
from shared.config.constants import Limits, MealSlot
from shared.config.logging import planning_logger as logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import NotFoundError, ValidationError
from shared.utils.schemas import (
    AddMealRequest,
    AddMenuRequest,
    IngredientOutput,
    MealOutput,
    PlanningDayOutput,
    PlanningEntryOutput,
    PlanningOutput,
    RecipeOutput,
    ShoppingListLineOutput,
    ShoppingListOutput,
)


def meal_to_output(meal: Meal) -> MealOutput:
    return MealOutput(
        recipe_id=meal.recipe_id,
        name=meal.name,
        category=meal.category,
        unit_price=meal.unit_price,
        person_count=meal.person_count,
        quality=meal.quality,
        price=meal.price,
        ingredients=[
            IngredientOutput(
                name=ingredient.name,
                unit=ingredient.unit,
                quantity=float(ingredient.quantity),
                price=ingredient.price,
            )
            for ingredient in meal.ingredients
        ],
    )


def entry_to_output(entry: PlanningEntry) -> PlanningEntryOutput:
    planned = entry_to_planned_meal(entry)
    return PlanningEntryOutput(
        id=entry.id,
        date=planned.planned_for,
        slot=planned.slot,
        meal=meal_to_output(planned.meal),
    )


class PlanningService:
    """
    Domain service for meal planning.

    Usage:
        service = PlanningService(db)
        entry = service.add_meal(user_id, request)
    """

    def __init__(self, db: Session):
        self._db = db
        self._planning = PlanningRepository(db)
        self._recipes = RecipeRepository(db)

    # =========================================================================
    # Recipes
    # =========================================================================

    def list_recipes(self, user_id: str) -> list[RecipeOutput]:
        """Validated predefined recipes plus the user's own."""
        outputs = []
        for recipe in self._recipes.list_available(user_id):
            template = recipe_to_template(recipe)
            outputs.append(
                RecipeOutput(
                    id=recipe.id,
                    name=template.name,
                    category=template.category,
                    base_price=template.base_price,
                    origin_continent=template.origin_continent,
                    origin_country=template.origin_country,
                    is_custom=template.is_custom,
                    is_validated=template.is_validated,
                    ingredients=[
                        IngredientOutput(
                            name=line.name,
                            unit=line.unit,
                            quantity=float(line.quantity),
                            price=line.price,
                        )
                        for line in template.ingredients
                    ],
                )
            )
        return outputs

    # =========================================================================
    # Planning entries
    # =========================================================================

    def add_meal(self, user_id: str, request: AddMealRequest) -> PlanningEntry:
        recipe = self._recipes.find_visible(request.recipe_id, user_id)
        if recipe is None:
            raise NotFoundError("Recette", request.recipe_id, user_id=user_id)

        meal = instantiate_meal(recipe_to_template(recipe), request.person_count, request.quality)
        entry = self._planning.add_entry(
            user_id, PlannedMeal(planned_for=request.date, slot=request.slot, meal=meal)
        )
        safe_commit(self._db)

        logger.info(
            "Meal planned",
            user_id=user_id,
            entry_id=entry.id,
            date=request.date.isoformat(),
            slot=request.slot,
            recipe_id=request.recipe_id,
            price=meal.price,
        )
        return entry

    def add_menu(self, user_id: str, request: AddMenuRequest) -> list[PlanningEntry]:
        """One entry per menu recipe that still resolves by name."""
        menu = self._recipes.find_menu(request.menu_id, user_id)
        if menu is None:
            raise NotFoundError("Menu", request.menu_id, user_id=user_id)

        template = menu_to_template(menu)
        recipes = [recipe_to_template(recipe) for recipe in self._recipes.list_available(user_id)]
        meals = instantiate_menu(template, request.person_count, recipes, request.quality)

        entries = [
            self._planning.add_entry(
                user_id, PlannedMeal(planned_for=request.date, slot=request.slot, meal=meal)
            )
            for meal in meals
        ]
        safe_commit(self._db)

        logger.info(
            "Menu planned",
            user_id=user_id,
            menu_id=request.menu_id,
            date=request.date.isoformat(),
            slot=request.slot,
            resolved=len(meals),
            referenced=len(template.items),
        )
        return entries

    def remove_entry(self, user_id: str, entry_id: int) -> None:
        entry = self._planning.find_entry(entry_id, user_id)
        if entry is None:
            raise NotFoundError("Repas planifié", entry_id, user_id=user_id)

        self._planning.delete(entry)
        safe_commit(self._db)
        logger.info("Planned meal removed", user_id=user_id, entry_id=entry_id)

    def get_planning(self, user_id: str) -> PlanningOutput:
        """Entries grouped by day; totals are meal prices x family size."""
        family_size = self._planning.get_family_size(user_id)
        by_day: dict[date, list[PlanningEntry]] = defaultdict(list)
        for entry in self._planning.load_entries(user_id):
            by_day[entry.planned_for].append(entry)

        days = []
        for day in sorted(by_day):
            outputs = [entry_to_output(entry) for entry in by_day[day]]
            slot_totals = {slot: 0 for slot in MealSlot.ALL}
            for output in outputs:
                slot_totals[output.slot] = slot_totals.get(output.slot, 0) + output.meal.price * family_size
            days.append(
                PlanningDayOutput(
                    date=day,
                    entries=outputs,
                    slot_totals=slot_totals,
                    total=sum(slot_totals.values()),
                )
            )

        return PlanningOutput(
            user_id=user_id,
            family_size=family_size,
            days=days,
            total=sum(day.total for day in days),
        )

    # =========================================================================
    # Household
    # =========================================================================

    def get_family_size(self, user_id: str) -> int:
        return self._planning.get_family_size(user_id)

    def set_family_size(self, user_id: str, family_size: int) -> int:
        if family_size < Limits.MIN_FAMILY_SIZE:
            raise ValidationError(
                "La taille du foyer doit être au moins 1",
                user_id=user_id,
                family_size=family_size,
            )
        household = self._planning.set_family_size(user_id, family_size)
        safe_commit(self._db)
        logger.info("Family size updated", user_id=user_id, family_size=family_size)
        return household.family_size

    # =========================================================================
    # Shopping list
    # =========================================================================

    def shopping_session(self, user_id: str, today: date) -> tuple[ShoppingListSession, int]:
        """A fresh editing session over today's consolidation."""
        family_size = self._planning.get_family_size(user_id)
        session = ShoppingListSession.start(
            self._planning.load_planned_meals(user_id),
            today,
            family_size,
        )
        return session, family_size

    def shopping_list(
        self,
        user_id: str,
        today: date,
        quantities: Mapping[str, Decimal] | None = None,
        excluded: Iterable[str] = (),
    ) -> ShoppingListOutput:
        """Consolidate and replay the caller's edits."""
        session, family_size = self.shopping_session(user_id, today)
        session.apply_edits(quantities or {}, excluded)

        return ShoppingListOutput(
            user_id=user_id,
            today=today,
            family_size=family_size,
            lines=[
                ShoppingListLineOutput(
                    key=line.key,
                    name=line.name,
                    unit=line.unit,
                    quantity=float(line.quantity),
                    price_per_unit=float(line.price_per_unit),
                    total_price=line.total_price,
                    excluded=line.excluded,
                    overridden=line.overridden,
                )
                for line in session.view()
            ],
            total=session.total(),
        )
