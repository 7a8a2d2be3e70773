"""
Tests for meal assembly, ingredient consolidation and shopping list edits.
"""

from datetime import date
from decimal import Decimal

import pytest

from rest_api.services.planning import (
    IngredientSnapshot,
    Meal,
    MenuRef,
    MenuTemplate,
    PlannedMeal,
    RecipeTemplate,
    ShoppingListSession,
    consolidate,
    ingredient_key,
    instantiate_meal,
    instantiate_menu,
)
from shared.utils.exceptions import NotFoundError, ValidationError


TODAY = date(2025, 6, 1)

POULET = RecipeTemplate(
    id=1,
    name="Poulet Yassa",
    category="principal",
    base_price=2000,
    ingredients=(
        IngredientSnapshot("Poulet", "kg", Decimal("0.25"), 1200),
        IngredientSnapshot("Oignon", "kg", Decimal("0.2"), 200),
    ),
)

THIEB = RecipeTemplate(
    id=2,
    name="Thieboudienne",
    category="principal",
    base_price=2500,
    ingredients=(
        IngredientSnapshot("Riz", "kg", Decimal("0.2"), 200),
        IngredientSnapshot("Poisson", "kg", Decimal("0.2"), 1500),
    ),
)


def planned(meal: Meal, day: date = TODAY, slot: str = "lunch") -> PlannedMeal:
    return PlannedMeal(planned_for=day, slot=slot, meal=meal)


class TestInstantiateMeal:
    """A recipe becomes a meal for a person count and tier."""

    def test_premium_for_two(self):
        meal = instantiate_meal(POULET, 2, "premium")

        assert meal.price == 6000
        assert meal.unit_price == 2000
        assert meal.person_count == 2
        assert meal.quality == "premium"
        assert meal.recipe_id == 1

    def test_ingredients_scale_with_people_and_tier(self):
        meal = instantiate_meal(POULET, 2, "premium")

        poulet = meal.ingredients[0]
        assert poulet.quantity == Decimal("0.75")
        assert poulet.price == 3600

    def test_standard_for_one_keeps_recipe_figures(self):
        meal = instantiate_meal(THIEB, 1)

        assert meal.price == 2500
        assert [i.quantity for i in meal.ingredients] == [Decimal("0.2"), Decimal("0.2")]

    def test_zero_people_rejected(self):
        with pytest.raises(ValidationError) as exc:
            instantiate_meal(POULET, 0)

        assert exc.value.status_code == 400

    def test_meal_survives_dict_round_trip(self):
        meal = instantiate_meal(POULET, 3, "bio")

        assert Meal.from_dict(meal.to_dict()) == meal


class TestInstantiateMenu:
    """Menus reference recipes by name."""

    def test_resolves_in_menu_order(self):
        menu = MenuTemplate(
            id=10,
            name="Menu Dakar",
            items=(MenuRef("principal", "Thieboudienne"), MenuRef("principal", "Poulet Yassa")),
        )

        meals = instantiate_menu(menu, 2, [POULET, THIEB])

        assert [meal.name for meal in meals] == ["Thieboudienne", "Poulet Yassa"]
        assert [meal.price for meal in meals] == [5000, 4000]

    def test_missing_name_is_skipped(self):
        menu = MenuTemplate(
            id=10,
            name="Menu Dakar",
            items=(MenuRef("principal", "Poulet Yassa"), MenuRef("dessert", "Thiakry")),
        )

        meals = instantiate_menu(menu, 1, [POULET, THIEB])

        assert [meal.name for meal in meals] == ["Poulet Yassa"]

    def test_first_recipe_wins_on_duplicate_names(self):
        copy = RecipeTemplate(id=99, name="Poulet Yassa", category="principal", base_price=9999)
        menu = MenuTemplate(id=10, name="Menu", items=(MenuRef("principal", "Poulet Yassa"),))

        meals = instantiate_menu(menu, 1, [POULET, copy])

        assert meals[0].recipe_id == 1

    def test_names_match_exactly(self):
        menu = MenuTemplate(id=10, name="Menu", items=(MenuRef("principal", "poulet yassa"),))

        assert instantiate_menu(menu, 1, [POULET]) == []

    def test_zero_people_rejected(self):
        menu = MenuTemplate(id=10, name="Menu", items=())

        with pytest.raises(ValidationError):
            instantiate_menu(menu, 0, [POULET])


class TestConsolidate:
    """Planned ingredients fold into one line per (name, unit)."""

    def test_key_ignores_case_and_spaces(self):
        assert ingredient_key(" Riz ", "KG") == ingredient_key("riz", "kg") == "riz|kg"

    def test_same_ingredient_merges(self):
        rice_a = Meal("A", "principal", 100, 1, "standard", 100,
                      (IngredientSnapshot("Riz", "kg", Decimal("0.15"), 150),))
        rice_b = Meal("B", "principal", 100, 1, "standard", 100,
                      (IngredientSnapshot("riz ", "KG", Decimal("0.2"), 200),))

        lines = consolidate([planned(rice_a), planned(rice_b)], TODAY)

        assert list(lines) == ["riz|kg"]
        line = lines["riz|kg"]
        assert line.quantity == Decimal("0.35")
        assert line.total_price == 350
        # Label of the first occurrence
        assert (line.name, line.unit) == ("Riz", "kg")

    def test_different_units_stay_apart(self):
        meal = Meal("A", "principal", 100, 1, "standard", 100, (
            IngredientSnapshot("Lait", "l", Decimal("1"), 500),
            IngredientSnapshot("Lait", "ml", Decimal("200"), 100),
        ))

        lines = consolidate([planned(meal)], TODAY)

        assert set(lines) == {"lait|l", "lait|ml"}

    def test_past_entries_skipped_today_kept(self):
        meal = instantiate_meal(THIEB, 1)

        lines = consolidate(
            [planned(meal, date(2025, 5, 31)), planned(meal, TODAY), planned(meal, date(2025, 6, 2))],
            TODAY,
        )

        assert lines["riz|kg"].quantity == Decimal("0.4")
        assert lines["poisson|kg"].total_price == 3000

    def test_family_size_scales_quantity_and_price(self):
        meal = instantiate_meal(THIEB, 1)

        lines = consolidate([planned(meal)], TODAY, family_size=3)

        assert lines["riz|kg"].quantity == Decimal("0.6")
        assert lines["riz|kg"].total_price == 600
        assert lines["poisson|kg"].total_price == 4500

    def test_family_size_below_one_rejected(self):
        with pytest.raises(ValidationError):
            consolidate([], TODAY, family_size=0)

    def test_empty_planning(self):
        assert consolidate([], TODAY) == {}


class TestShoppingListSession:
    """Edits never alter the consolidated figures."""

    @pytest.fixture
    def session(self):
        return ShoppingListSession.start(
            [planned(instantiate_meal(POULET, 1)), planned(instantiate_meal(THIEB, 1))],
            TODAY,
            family_size=2,
        )

    def test_total_sums_lines(self, session):
        # (1200 + 200 + 200 + 1500) x 2
        assert session.total() == 6200

    def test_override_reprices_at_unit_price(self, session):
        # poulet: 0.5 kg for 2400 -> 4800 per kg
        session.set_quantity("poulet|kg", Decimal("1"))

        line = session.line("poulet|kg")
        assert line.quantity == Decimal("1")
        assert line.total_price == 4800
        assert line.overridden is True
        assert session.total() == 6200 - 2400 + 4800

    def test_clear_override_restores_original(self, session):
        session.set_quantity("poulet|kg", Decimal("1"))
        session.clear_quantity("poulet|kg")

        line = session.line("poulet|kg")
        assert line.quantity == Decimal("0.5")
        assert line.total_price == 2400
        assert line.overridden is False

    def test_exclude_removes_from_total_and_restore_brings_back(self, session):
        session.exclude("poisson|kg")
        assert session.total() == 6200 - 3000
        assert session.line("poisson|kg").excluded is True

        session.restore("poisson|kg")
        assert session.total() == 6200

    def test_non_positive_override_rejected(self, session):
        with pytest.raises(ValidationError):
            session.set_quantity("riz|kg", 0)

    def test_oversized_override_rejected(self, session):
        with pytest.raises(ValidationError):
            session.set_quantity("poulet|kg", Decimal("1e40"))

        assert "poulet|kg" not in session.overrides
        assert session.total() == 6200

    def test_largest_allowed_override_prices(self, session):
        session.set_quantity("poulet|kg", Decimal("100000"))

        assert session.line("poulet|kg").total_price == 480_000_000

    def test_non_finite_override_rejected(self, session):
        with pytest.raises(ValidationError):
            session.set_quantity("poulet|kg", Decimal("Infinity"))

    def test_unknown_key_rejected(self, session):
        with pytest.raises(NotFoundError):
            session.exclude("sel|g")

    def test_apply_edits_ignores_stale_keys(self, session):
        session.apply_edits({"sel|g": Decimal("10"), "riz|kg": Decimal("1")}, ["beurre|g", "oignon|kg"])

        assert session.line("riz|kg").total_price == 1000
        assert session.line("oignon|kg").excluded is True
        assert "sel|g" not in session.overrides

    def test_view_keeps_consolidation_order(self, session):
        assert [line.key for line in session.view()] == [
            "poulet|kg", "oignon|kg", "riz|kg", "poisson|kg",
        ]
