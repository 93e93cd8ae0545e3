"""Read-only recipe views.

Listings return ``RecipeSummaryOut`` rows (id, name, image URL). Dishes
without an image are included with ``image_url=None``.
"""

from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ..errors import NotFoundError, ValidationError
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
from ..schemas import (
    CategoryOut,
    IngredientOut,
    RecipeDetailOut,
    RecipeIngredientOut,
    RecipeSummaryOut,
)
from ..settings import settings
from .reference_data import normalize_name
from .storage import image_url


def _summary_query():
    return (
        select(Dish.id, Dish.name, DishImage.image_filename)
        .select_from(Dish)
        .outerjoin(DishImage, DishImage.dish_id == Dish.id)
    )


def _to_summaries(rows) -> list[RecipeSummaryOut]:
    return [
        RecipeSummaryOut(id=r.id, name=r.name, image_url=image_url(r.image_filename))
        for r in rows
    ]


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def list_recipes(db: Session) -> list[RecipeSummaryOut]:
    rows = db.execute(_summary_query().order_by(Dish.id)).all()
    return _to_summaries(rows)


def list_ingredients(db: Session) -> list[IngredientOut]:
    rows = db.scalars(select(Ingredient).order_by(Ingredient.name)).all()
    return [IngredientOut.model_validate(r) for r in rows]


def list_categories(db: Session) -> list[CategoryOut]:
    """All categories except the reserved ingredient pseudo-category."""
    rows = db.scalars(
        select(Category)
        .where(Category.name != settings.reserved_category)
        .order_by(Category.name)
    ).all()
    return [CategoryOut.model_validate(r) for r in rows]


def list_by_category(db: Session, category_name: str) -> list[RecipeSummaryOut]:
    rows = db.execute(
        _summary_query()
        .join(Category, Category.id == Dish.category_id)
        .where(Category.name == category_name)
        .order_by(Dish.id)
    ).all()
    return _to_summaries(rows)


def list_by_category_id(db: Session, category_id: int) -> list[RecipeSummaryOut]:
    rows = db.execute(
        _summary_query().where(Dish.category_id == category_id).order_by(Dish.id)
    ).all()
    return _to_summaries(rows)


def list_by_ingredient(db: Session, ingredient_name: str) -> list[RecipeSummaryOut]:
    """Dishes using the named ingredient, one row per dish."""
    rows = db.execute(
        _summary_query()
        .join(DishIngredient, DishIngredient.dish_id == Dish.id)
        .join(Ingredient, Ingredient.id == DishIngredient.ingredient_id)
        .where(Ingredient.name == normalize_name(ingredient_name))
        .distinct()
        .order_by(Dish.id)
    ).all()
    return _to_summaries(rows)


def search(db: Session, query: Optional[str]) -> list[RecipeSummaryOut]:
    """Case-insensitive substring match on dish name or any ingredient name."""
    if not query or not query.strip():
        raise ValidationError("Search query is required")

    pattern = f"%{_escape_like(query.strip())}%"
    rows = db.execute(
        _summary_query()
        .outerjoin(DishIngredient, DishIngredient.dish_id == Dish.id)
        .outerjoin(Ingredient, Ingredient.id == DishIngredient.ingredient_id)
        .where(
            or_(
                Dish.name.ilike(pattern, escape="\\"),
                Ingredient.name.ilike(pattern, escape="\\"),
            )
        )
        .distinct()
        .order_by(Dish.name)
    ).all()
    return _to_summaries(rows)


def _ingredients_for(db: Session, dish_id: int) -> list[RecipeIngredientOut]:
    rows = db.execute(
        select(Ingredient.name, DishIngredient.quantity, Unit.name.label("unit_name"))
        .select_from(DishIngredient)
        .join(Ingredient, Ingredient.id == DishIngredient.ingredient_id)
        .outerjoin(Unit, Unit.id == DishIngredient.unit_id)
        .where(DishIngredient.dish_id == dish_id)
        .order_by(DishIngredient.position)
    ).all()
    return [
        RecipeIngredientOut(name=r.name, quantity=r.quantity, unit=r.unit_name or "")
        for r in rows
    ]


def _instructions_for(db: Session, dish_id: int) -> list[str]:
    return list(
        db.scalars(
            select(InstructionStep.content)
            .where(InstructionStep.dish_id == dish_id)
            .order_by(InstructionStep.step_number)
        )
    )


def _detail_query():
    return (
        select(
            Dish.id,
            Dish.name,
            Dish.category_id,
            Category.name.label("category_name"),
            DishImage.image_filename,
            Recipe.prep_time_minutes,
            Recipe.cook_time_minutes,
            Recipe.servings,
        )
        .select_from(Dish)
        .outerjoin(Category, Category.id == Dish.category_id)
        .outerjoin(DishImage, DishImage.dish_id == Dish.id)
        .outerjoin(Recipe, Recipe.dish_id == Dish.id)
    )


def _to_detail(db: Session, row) -> RecipeDetailOut:
    return RecipeDetailOut(
        id=row.id,
        name=row.name,
        category_id=row.category_id,
        category=row.category_name,
        image_url=image_url(row.image_filename),
        prep_time=row.prep_time_minutes,
        cook_time=row.cook_time_minutes,
        servings=row.servings,
        instructions=_instructions_for(db, row.id),
        ingredients=_ingredients_for(db, row.id),
    )


def get_recipe(db: Session, dish_id: int) -> RecipeDetailOut:
    row = db.execute(_detail_query().where(Dish.id == dish_id)).first()
    if row is None:
        raise NotFoundError("Recipe not found")
    return _to_detail(db, row)


def list_full_recipes(db: Session) -> list[RecipeDetailOut]:
    # One detail per dish; fine at catalog scale
    rows = db.execute(_detail_query().order_by(Dish.id)).all()
    return [_to_detail(db, r) for r in rows]
