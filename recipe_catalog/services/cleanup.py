"""Recipe deletion and orphaned reference-data cleanup.

Dependent rows are deleted child-first inside one transaction. Ingredient
and unit rows that lost their last association are purged in the same
transaction; the stored image file is removed only after commit.
"""

import logging
from typing import Iterable

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..db import transaction
from ..errors import NotFoundError
from ..models import (
    Dish,
    DishImage,
    DishIngredient,
    Ingredient,
    InstructionStep,
    Recipe,
    Unit,
)
from .storage import ImageStorage

logger = logging.getLogger("recipe_catalog.cleanup")


def current_reference_ids(db: Session, dish_id: int) -> tuple[set[int], set[int]]:
    """Ingredient ids and unit ids currently associated with a dish."""
    rows = db.execute(
        select(DishIngredient.ingredient_id, DishIngredient.unit_id)
        .where(DishIngredient.dish_id == dish_id)
    ).all()
    ingredient_ids = {r.ingredient_id for r in rows if r.ingredient_id is not None}
    unit_ids = {r.unit_id for r in rows if r.unit_id is not None}
    return ingredient_ids, unit_ids


def _purge_unreferenced(db: Session, model, reference_column, candidate_ids: Iterable[int]) -> list[int]:
    ids = set(candidate_ids)
    if not ids:
        return []

    still_used = set(
        db.scalars(select(reference_column).where(reference_column.in_(ids)).distinct())
    )
    orphaned = sorted(ids - still_used)
    if orphaned:
        db.execute(
            delete(model).where(model.id.in_(orphaned)).execution_options(synchronize_session=False)
        )
    return orphaned


def purge_unused_references(
    db: Session, ingredient_ids: Iterable[int], unit_ids: Iterable[int]
) -> tuple[list[int], list[int]]:
    """
    Delete the given ingredient/unit rows that no association references.

    Must run after the caller's own association rows were removed (and any
    replacements flushed), otherwise a row used only by this dish looks
    still in use.
    """
    removed_ingredients = _purge_unreferenced(
        db, Ingredient, DishIngredient.ingredient_id, ingredient_ids
    )
    removed_units = _purge_unreferenced(db, Unit, DishIngredient.unit_id, unit_ids)
    if removed_ingredients or removed_units:
        logger.info(
            f"Purged {len(removed_ingredients)} unused ingredients, {len(removed_units)} unused units"
        )
    return removed_ingredients, removed_units


def delete_recipe(db: Session, storage: ImageStorage, dish_id: int) -> None:
    """Delete a dish with all dependent rows, orphaned reference data and its image file."""
    with transaction(db):
        exists = db.scalar(select(Dish.id).where(Dish.id == dish_id))
        if exists is None:
            raise NotFoundError("Recipe not found")

        image_filename = db.scalar(
            select(DishImage.image_filename).where(DishImage.dish_id == dish_id)
        )
        ingredient_ids, unit_ids = current_reference_ids(db, dish_id)

        # Child tables first, dish last
        for model, column in (
            (InstructionStep, InstructionStep.dish_id),
            (DishIngredient, DishIngredient.dish_id),
            (DishImage, DishImage.dish_id),
            (Recipe, Recipe.dish_id),
            (Dish, Dish.id),
        ):
            db.execute(
                delete(model).where(column == dish_id).execution_options(synchronize_session=False)
            )

        purge_unused_references(db, ingredient_ids, unit_ids)

    logger.info(f"Deleted recipe {dish_id}")

    # The database delete is authoritative; file removal is best effort
    if image_filename:
        storage.delete(image_filename)
