"""
Planning router.

Per-user planning, household size, recipes offered to the user and the
consolidated shopping list. The caller owns shopping list edits and sends
them back with each request.
"""

from datetime import date

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    AddMealRequest,
    AddMenuRequest,
    FamilySizeOutput,
    PlanningEntryOutput,
    PlanningOutput,
    RecipeOutput,
    ShoppingListOutput,
    ShoppingListRequest,
    UpdateFamilySizeRequest,
)
from rest_api.services.domain import PlanningService, entry_to_output


router = APIRouter(prefix="/api/users/{user_id}", tags=["planning"])

UserId = Path(min_length=1, max_length=64)


@router.get("/recipes", response_model=list[RecipeOutput])
def list_recipes(
    user_id: str = UserId,
    db: Session = Depends(get_db),
) -> list[RecipeOutput]:
    """Validated predefined recipes plus the user's custom ones."""
    return PlanningService(db).list_recipes(user_id)


@router.get("/planning", response_model=PlanningOutput)
def get_planning(
    user_id: str = UserId,
    db: Session = Depends(get_db),
) -> PlanningOutput:
    return PlanningService(db).get_planning(user_id)


@router.post(
    "/planning/meals",
    response_model=PlanningEntryOutput,
    status_code=status.HTTP_201_CREATED,
)
def add_meal(
    body: AddMealRequest,
    user_id: str = UserId,
    db: Session = Depends(get_db),
) -> PlanningEntryOutput:
    entry = PlanningService(db).add_meal(user_id, body)
    return entry_to_output(entry)


@router.post(
    "/planning/menus",
    response_model=list[PlanningEntryOutput],
    status_code=status.HTTP_201_CREATED,
)
def add_menu(
    body: AddMenuRequest,
    user_id: str = UserId,
    db: Session = Depends(get_db),
) -> list[PlanningEntryOutput]:
    """Plan every recipe of a menu; names that no longer resolve are skipped."""
    entries = PlanningService(db).add_menu(user_id, body)
    return [entry_to_output(entry) for entry in entries]


@router.delete("/planning/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_entry(
    entry_id: int,
    user_id: str = UserId,
    db: Session = Depends(get_db),
) -> Response:
    PlanningService(db).remove_entry(user_id, entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/family-size", response_model=FamilySizeOutput)
def get_family_size(
    user_id: str = UserId,
    db: Session = Depends(get_db),
) -> FamilySizeOutput:
    return FamilySizeOutput(
        user_id=user_id,
        family_size=PlanningService(db).get_family_size(user_id),
    )


@router.put("/family-size", response_model=FamilySizeOutput)
def update_family_size(
    body: UpdateFamilySizeRequest,
    user_id: str = UserId,
    db: Session = Depends(get_db),
) -> FamilySizeOutput:
    return FamilySizeOutput(
        user_id=user_id,
        family_size=PlanningService(db).set_family_size(user_id, body.family_size),
    )


@router.post("/shopping-list", response_model=ShoppingListOutput)
def shopping_list(
    body: ShoppingListRequest,
    user_id: str = UserId,
    db: Session = Depends(get_db),
) -> ShoppingListOutput:
    """
    Consolidate the planning from `today` (server date by default) and
    replay the caller's quantity overrides and exclusions.
    """
    return PlanningService(db).shopping_list(
        user_id,
        body.today or date.today(),
        body.quantities,
        body.excluded,
    )
