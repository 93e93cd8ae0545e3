"""Transactional recipe create/update.

A recipe spans five tables (dishes, recipes, instruction_steps,
dish_ingredients, dish_images). Each write is one transaction: either every
row lands or none does.
"""

import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db import transaction
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import (
    Category,
    Dish,
    DishImage,
    DishIngredient,
    Ingredient,
    InstructionStep,
    Recipe,
    Unit,
)
from ..schemas import IngredientEntry, RecipeSpec
from .cleanup import current_reference_ids, purge_unused_references
from .reference_data import resolve_or_create
from .storage import ImageStorage

logger = logging.getLogger("recipe_catalog.writer")

DUPLICATE_NAME_MESSAGE = "Dish with this name already exists"


def _ensure_category(db: Session, category_id: int) -> None:
    if db.scalar(select(Category.id).where(Category.id == category_id)) is None:
        raise ValidationError(f"Unknown category_id: {category_id}")


def _name_taken(db: Session, name: str, exclude_id: Optional[int] = None) -> bool:
    stmt = select(Dish.id).where(Dish.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Dish.id != exclude_id)
    return db.scalar(stmt) is not None


def _insert_steps(db: Session, dish_id: int, instructions: list[str]) -> None:
    db.add_all(
        InstructionStep(dish_id=dish_id, step_number=i, content=text)
        for i, text in enumerate(instructions, start=1)
    )
    db.flush()


def _insert_ingredients(db: Session, dish_id: int, ingredients: list[IngredientEntry]) -> None:
    """Resolve each entry's ingredient/unit in input order and link it to the dish."""
    for position, entry in enumerate(ingredients):
        ingredient_id = resolve_or_create(db, Ingredient, entry.name)
        unit_id = resolve_or_create(db, Unit, entry.unit)
        db.add(
            DishIngredient(
                dish_id=dish_id,
                ingredient_id=ingredient_id,
                unit_id=unit_id,
                quantity=entry.quantity,
                position=position,
            )
        )
    # Orphan checks and readers run plain SELECTs; autoflush is off
    db.flush()


def create_recipe(db: Session, spec: RecipeSpec, image_filename: Optional[str] = None) -> int:
    """Create a dish with its recipe, steps, ingredients and optional image. Returns the dish id."""
    with transaction(db):
        _ensure_category(db, spec.category_id)
        if _name_taken(db, spec.name):
            raise ConflictError(DUPLICATE_NAME_MESSAGE)

        dish = Dish(name=spec.name, category_id=spec.category_id)
        db.add(dish)
        try:
            db.flush()
        except IntegrityError as e:
            # Lost a race with another create of the same name
            raise ConflictError(DUPLICATE_NAME_MESSAGE) from e
        dish_id = dish.id

        db.add(
            Recipe(
                dish_id=dish_id,
                prep_time_minutes=spec.prep_time,
                cook_time_minutes=spec.cook_time,
                servings=spec.servings,
            )
        )
        _insert_steps(db, dish_id, spec.instructions)
        _insert_ingredients(db, dish_id, spec.ingredients)

        if image_filename:
            db.add(DishImage(dish_id=dish_id, image_filename=image_filename))

    logger.info(
        f"Created recipe {dish_id} '{spec.name}' with {len(spec.instructions)} steps, "
        f"{len(spec.ingredients)} ingredients"
    )
    return dish_id


def _replace_image(db: Session, dish_id: int, image_filename: Optional[str]) -> Optional[str]:
    """Point the dish at a new image. Returns the filename that was replaced, if any."""
    if not image_filename:
        return None

    current = db.get(DishImage, dish_id)
    if current is None:
        db.add(DishImage(dish_id=dish_id, image_filename=image_filename))
        return None

    old_filename = current.image_filename
    current.image_filename = image_filename
    return old_filename if old_filename != image_filename else None


def update_recipe(
    db: Session,
    storage: ImageStorage,
    dish_id: int,
    spec: RecipeSpec,
    image_filename: Optional[str] = None,
) -> None:
    """
    Replace a recipe's contents.

    Steps and ingredient associations are deleted and reinserted. Ingredient
    and unit rows left unreferenced by the replacement are purged. Without a
    new image the existing one is kept.
    """
    with transaction(db):
        dish = db.get(Dish, dish_id)
        if dish is None:
            raise NotFoundError("Recipe not found")
        _ensure_category(db, spec.category_id)
        if _name_taken(db, spec.name, exclude_id=dish_id):
            raise ConflictError(DUPLICATE_NAME_MESSAGE)

        dish.name = spec.name
        dish.category_id = spec.category_id

        recipe = db.get(Recipe, dish_id)
        if recipe is None:
            recipe = Recipe(dish_id=dish_id)
            db.add(recipe)
        recipe.prep_time_minutes = spec.prep_time
        recipe.cook_time_minutes = spec.cook_time
        recipe.servings = spec.servings
        db.flush()

        db.execute(
            delete(InstructionStep)
            .where(InstructionStep.dish_id == dish_id)
            .execution_options(synchronize_session=False)
        )
        _insert_steps(db, dish_id, spec.instructions)

        old_ingredient_ids, old_unit_ids = current_reference_ids(db, dish_id)
        db.execute(
            delete(DishIngredient)
            .where(DishIngredient.dish_id == dish_id)
            .execution_options(synchronize_session=False)
        )
        _insert_ingredients(db, dish_id, spec.ingredients)
        purge_unused_references(db, old_ingredient_ids, old_unit_ids)

        replaced_filename = _replace_image(db, dish_id, image_filename)

    logger.info(f"Updated recipe {dish_id} '{spec.name}'")

    if replaced_filename:
        # Committed already; a leftover file is not worth failing the request
        if not storage.delete(replaced_filename):
            logger.warning(f"Old image {replaced_filename} for recipe {dish_id} was not removed")
