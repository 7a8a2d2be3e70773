"""
Planning Repository - Data access for planning entries and household size.
"""

from typing import Sequence

from sqlalchemy import select

from rest_api.models import Household, PlanningEntry
from rest_api.services.planning.entities import Meal, PlannedMeal
from shared.config.constants import Limits
from .base import BaseRepository


def entry_to_planned_meal(entry: PlanningEntry) -> PlannedMeal:
    return PlannedMeal(
        planned_for=entry.planned_for,
        slot=entry.slot,
        meal=Meal.from_dict(entry.meal),
        entry_id=entry.id,
    )


class PlanningRepository(BaseRepository[PlanningEntry]):
    """Repository for PlanningEntry and Household entities."""

    @property
    def model(self) -> type[PlanningEntry]:
        return PlanningEntry

    def load_entries(self, user_id: str) -> Sequence[PlanningEntry]:
        """All entries of a user, by date then creation order."""
        return self._db.execute(
            select(PlanningEntry)
            .where(PlanningEntry.user_id == user_id)
            .order_by(PlanningEntry.planned_for, PlanningEntry.id)
        ).scalars().all()

    def load_planned_meals(self, user_id: str) -> list[PlannedMeal]:
        return [entry_to_planned_meal(entry) for entry in self.load_entries(user_id)]

    def add_entry(self, user_id: str, planned: PlannedMeal) -> PlanningEntry:
        return self.add(
            PlanningEntry(
                user_id=user_id,
                planned_for=planned.planned_for,
                slot=planned.slot,
                recipe_id=planned.meal.recipe_id,
                meal=planned.meal.to_dict(),
            )
        )

    def find_entry(self, entry_id: int, user_id: str) -> PlanningEntry | None:
        """An entry only resolves for its owner."""
        return self._db.scalar(
            select(PlanningEntry).where(
                PlanningEntry.id == entry_id,
                PlanningEntry.user_id == user_id,
            )
        )

    def get_family_size(self, user_id: str) -> int:
        household = self._db.get(Household, user_id)
        if household is None:
            return Limits.MIN_FAMILY_SIZE
        return household.family_size

    def set_family_size(self, user_id: str, family_size: int) -> Household:
        household = self._db.get(Household, user_id)
        if household is None:
            household = Household(user_id=user_id, family_size=family_size)
            self._db.add(household)
        else:
            household.family_size = family_size
        self._db.flush()
        return household
