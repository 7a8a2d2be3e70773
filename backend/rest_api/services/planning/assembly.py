"""
Meal and menu assembly.

Builds Meals from recipe templates for a person count and quality tier.
Family size is not applied here; it is applied once, at shopping-list
consolidation.
"""

from collections.abc import Iterable

from shared.config.constants import Limits, QualityTier
from shared.config.logging import planning_logger as logger
from shared.utils.exceptions import ValidationError
from .entities import IngredientSnapshot, Meal, MenuTemplate, RecipeTemplate
from .pricing import quality_multiplier, round_currency, to_decimal, unit_line_price


def _validate_person_count(person_count: int) -> None:
    if person_count < Limits.MIN_PERSON_COUNT:
        raise ValidationError(
            "Le nombre de personnes doit être au moins 1",
            person_count=person_count,
        )


def instantiate_meal(
    recipe: RecipeTemplate,
    person_count: int,
    quality: str = QualityTier.STANDARD,
) -> Meal:
    """
    Instantiate a recipe for `person_count` people at `quality`.

    Every ingredient quantity and price is scaled by
    person_count x quality multiplier. The meal price is the recipe base
    price for that many people at that tier.

    Raises:
        ValidationError: person_count < 1
    """
    _validate_person_count(person_count)

    scale = to_decimal(person_count) * quality_multiplier(quality)
    ingredients = tuple(
        IngredientSnapshot(
            name=ingredient.name,
            unit=ingredient.unit,
            quantity=ingredient.quantity * scale,
            price=round_currency(to_decimal(ingredient.price) * scale),
        )
        for ingredient in recipe.ingredients
    )

    return Meal(
        name=recipe.name,
        category=recipe.category,
        unit_price=recipe.base_price,
        person_count=person_count,
        quality=quality,
        price=unit_line_price(recipe.base_price, person_count, quality),
        ingredients=ingredients,
        recipe_id=recipe.id,
    )


def instantiate_menu(
    menu: MenuTemplate,
    person_count: int,
    recipes: Iterable[RecipeTemplate],
    quality: str = QualityTier.STANDARD,
) -> list[Meal]:
    """
    Instantiate every recipe a menu names, in menu order.

    Names are resolved against `recipes` (the recipes visible to the user);
    when several share a name the first one wins. A name that resolves to
    nothing is skipped.

    Raises:
        ValidationError: person_count < 1
    """
    _validate_person_count(person_count)

    by_name: dict[str, RecipeTemplate] = {}
    for recipe in recipes:
        by_name.setdefault(recipe.name, recipe)

    meals: list[Meal] = []
    for ref in menu.items:
        recipe = by_name.get(ref.recipe_name)
        if recipe is None:
            logger.debug(
                "Menu recipe not found, skipping",
                menu_id=menu.id,
                menu_name=menu.name,
                recipe_name=ref.recipe_name,
            )
            continue
        meals.append(instantiate_meal(recipe, person_count, quality))

    return meals
