"""
Planning Models: PlanningEntry, Household.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from sqlalchemy import JSON, CheckConstraint, Date, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, IdType, TimestampMixin


class PlanningEntry(TimestampMixin, Base):
    """
    A meal planned on a date and slot.

    `meal` is the snapshot taken when the entry was created (name, category,
    prices, ingredient lines). Entries are never updated in place: removing
    and re-adding is the only way to change one.
    """

    __tablename__ = "planning_entry"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    planned_for: Mapped[date] = mapped_column(Date, nullable=False)
    slot: Mapped[str] = mapped_column(String(20), nullable=False)
    recipe_id: Mapped[Optional[int]] = mapped_column(IdType)
    meal: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "slot IN ('breakfast', 'lunch', 'snack', 'dinner')",
            name="chk_planning_slot",
        ),
        Index("ix_planning_user_date", "user_id", "planned_for"),
    )

    def __repr__(self) -> str:
        return f"<PlanningEntry(id={self.id}, user={self.user_id}, date={self.planned_for}, slot={self.slot})>"


class Household(TimestampMixin, Base):
    """Household size of a user, applied when consolidating the shopping list."""

    __tablename__ = "household"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    family_size: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint("family_size >= 1", name="chk_household_family_size_positive"),
    )

    def __repr__(self) -> str:
        return f"<Household(user={self.user_id}, family_size={self.family_size})>"
