"""
Ingredient consolidation.

Folds a user's planned meals into one shopping list line per
(ingredient name, unit), scaled by the household family size, and lets the
caller edit that list through a ShoppingListSession.

Quantities are Decimal and prices integers, so aggregation is exact and
does not depend on the order entries are visited in.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal

from shared.config.constants import Limits
from shared.config.logging import planning_logger as logger
from shared.utils.exceptions import NotFoundError, ValidationError
from .entities import PlannedMeal
from .pricing import round_currency, to_decimal


def ingredient_key(name: str, unit: str) -> str:
    """Aggregation key: case and surrounding spaces do not split a line."""
    return f"{name.strip().lower()}|{unit.strip().lower()}"


@dataclass(frozen=True)
class ConsolidatedLine:
    key: str
    name: str
    unit: str
    quantity: Decimal
    total_price: int

    @property
    def price_per_unit(self) -> Decimal:
        """total_price / quantity, or 0 for a zero quantity."""
        if self.quantity == 0:
            return Decimal(0)
        return Decimal(self.total_price) / self.quantity

    def with_quantity(self, quantity: Decimal) -> ConsolidatedLine:
        """This line at another quantity, priced at its unit price."""
        return replace(
            self,
            quantity=quantity,
            total_price=round_currency(self.price_per_unit * quantity),
        )


def consolidate(
    entries: Iterable[PlannedMeal],
    today: date,
    family_size: int = 1,
) -> dict[str, ConsolidatedLine]:
    """
    Aggregate the ingredients of every entry planned today or later.

    Each ingredient's quantity and price are multiplied by family_size.
    The result keeps the order in which keys first appear; the display name
    and unit are those of the first occurrence.

    Raises:
        ValidationError: family_size < 1
    """
    if family_size < Limits.MIN_FAMILY_SIZE:
        raise ValidationError(
            "La taille du foyer doit être au moins 1",
            family_size=family_size,
        )

    quantities: dict[str, Decimal] = {}
    prices: dict[str, int] = {}
    labels: dict[str, tuple[str, str]] = {}
    skipped = 0

    for entry in entries:
        if entry.planned_for < today:
            skipped += 1
            continue
        for ingredient in entry.meal.ingredients:
            key = ingredient_key(ingredient.name, ingredient.unit)
            if key not in labels:
                labels[key] = (ingredient.name.strip(), ingredient.unit.strip())
                quantities[key] = Decimal(0)
                prices[key] = 0
            quantities[key] += to_decimal(ingredient.quantity) * family_size
            prices[key] += ingredient.price * family_size

    logger.debug(
        "Shopping list consolidated",
        lines=len(labels),
        past_entries_skipped=skipped,
        family_size=family_size,
    )

    return {
        key: ConsolidatedLine(
            key=key,
            name=name,
            unit=unit,
            quantity=quantities[key],
            total_price=prices[key],
        )
        for key, (name, unit) in labels.items()
    }


@dataclass(frozen=True)
class ShoppingLineView:
    """A line as shown to the user, after session edits."""

    key: str
    name: str
    unit: str
    quantity: Decimal
    price_per_unit: Decimal
    total_price: int
    excluded: bool
    overridden: bool


@dataclass
class ShoppingListSession:
    """
    Editable view over a consolidated list.

    Overrides and exclusions live only in this object; the consolidated
    lines themselves are never modified, so clearing an override or
    restoring an exclusion gives back the original figures.
    """

    lines: dict[str, ConsolidatedLine]
    overrides: dict[str, Decimal] = field(default_factory=dict)
    excluded: set[str] = field(default_factory=set)

    @classmethod
    def start(
        cls,
        entries: Iterable[PlannedMeal],
        today: date,
        family_size: int = 1,
    ) -> ShoppingListSession:
        return cls(lines=consolidate(entries, today, family_size))

    def _require(self, key: str) -> ConsolidatedLine:
        line = self.lines.get(key)
        if line is None:
            raise NotFoundError("Ingrédient", key)
        return line

    def set_quantity(self, key: str, quantity: Decimal | int | float) -> None:
        """Override a line's quantity; its price follows its unit price."""
        self._require(key)
        quantity = to_decimal(quantity)
        if not quantity.is_finite() or quantity <= 0:
            raise ValidationError(
                "La quantité doit être supérieure à 0",
                key=key,
                quantity=str(quantity),
            )
        if quantity > Limits.MAX_SHOPPING_QUANTITY:
            raise ValidationError(
                f"La quantité ne peut pas dépasser {Limits.MAX_SHOPPING_QUANTITY}",
                key=key,
                quantity=str(quantity),
            )
        self.overrides[key] = quantity

    def clear_quantity(self, key: str) -> None:
        self._require(key)
        self.overrides.pop(key, None)

    def exclude(self, key: str) -> None:
        self._require(key)
        self.excluded.add(key)

    def restore(self, key: str) -> None:
        self._require(key)
        self.excluded.discard(key)

    def apply_edits(
        self,
        quantities: Mapping[str, Decimal | int | float],
        excluded: Iterable[str],
    ) -> None:
        """
        Replay edits kept by the caller.

        Keys no longer in the list (the planning changed since) are ignored.
        """
        for key, quantity in quantities.items():
            if key in self.lines:
                self.set_quantity(key, quantity)
        for key in excluded:
            if key in self.lines:
                self.exclude(key)

    def line(self, key: str) -> ShoppingLineView:
        base = self._require(key)
        override = self.overrides.get(key)
        current = base.with_quantity(override) if override is not None else base
        return ShoppingLineView(
            key=key,
            name=base.name,
            unit=base.unit,
            quantity=current.quantity,
            price_per_unit=base.price_per_unit,
            total_price=current.total_price,
            excluded=key in self.excluded,
            overridden=override is not None,
        )

    def view(self) -> list[ShoppingLineView]:
        return [self.line(key) for key in self.lines]

    def total(self) -> int:
        """Sum of the prices of every line not excluded."""
        return sum(line.total_price for line in self.view() if not line.excluded)
