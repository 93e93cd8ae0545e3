"""Recipes API router.

Endpoints:
- POST /api/recipes - Create recipe (multipart, optional image)
- PUT /api/recipes/{id} - Replace recipe (omit image to keep the current one)
- DELETE /api/recipes/{id} - Delete recipe and orphaned reference data
- GET /api/recipes/{id} - Recipe detail
- GET /api/recipes/simple - Recipe list (id, name, image_url)
- GET /api/recipes/full - Recipe list with details
- GET /api/recipes/ingredients - All ingredients
- GET /api/recipes/categories - Categories (reserved pseudo-category hidden)
- GET /api/recipes/by-category/{category} - Filter by category name
- GET /api/recipes/by-category-id/{category_id} - Filter by category id
- GET /api/recipes/by-ingredient/{name} - Filter by ingredient name
- GET /api/recipes/search?query= - Name/ingredient substring search
"""

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from ..deps import get_db, get_image_storage, limiter
from ..errors import ValidationError
from ..schemas import (
    CategoryOut,
    IngredientOut,
    RecipeDetailOut,
    RecipeSpec,
    RecipeSummaryOut,
    RecipeWriteResult,
)
from ..services import cleanup, recipe_reader, recipe_writer
from ..services.storage import ImageStorage
from ..settings import settings

router = APIRouter()
logger = logging.getLogger("recipe_catalog.recipes")


def _decode_json_list(raw: Optional[str]) -> Any:
    if raw is None or not raw.strip():
        return []
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError("Invalid instructions or ingredients format") from e


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


def parse_recipe_form(
    name: Optional[str],
    category_id: Optional[str],
    prep_time: Optional[str],
    cook_time: Optional[str],
    servings: Optional[str],
    instructions: Optional[str],
    ingredients: Optional[str],
) -> RecipeSpec:
    """Turn the multipart form fields into a validated RecipeSpec.

    instructions and ingredients arrive as JSON-encoded arrays.
    """
    instruction_list = _decode_json_list(instructions)
    ingredient_list = _decode_json_list(ingredients)
    if not isinstance(instruction_list, list) or not isinstance(ingredient_list, list):
        raise ValidationError("Invalid instructions or ingredients format")

    if not (name and name.strip()) or not category_id or not instruction_list or not ingredient_list:
        raise ValidationError("Missing required fields")

    try:
        return RecipeSpec.model_validate(
            {
                "name": name,
                "category_id": category_id,
                "prep_time": prep_time,
                "cook_time": cook_time,
                "servings": servings,
                "instructions": instruction_list,
                "ingredients": ingredient_list,
            }
        )
    except PydanticValidationError as e:
        raise ValidationError(_describe(e)) from e


def _store_upload(storage: ImageStorage, image: Optional[UploadFile]) -> Optional[str]:
    if image is None or not image.filename:
        return None
    return storage.save(image.filename, image.file.read())


# --- Writes ---


@router.post("/recipes", response_model=RecipeWriteResult, status_code=201)
@limiter.limit(settings.write_rate_limit)
def create_recipe(
    request: Request,
    name: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
    prep_time: Optional[str] = Form(None),
    cook_time: Optional[str] = Form(None),
    servings: Optional[str] = Form(None),
    instructions: Optional[str] = Form(None),
    ingredients: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
):
    """Create a recipe with its steps, ingredients and optional image."""
    spec = parse_recipe_form(name, category_id, prep_time, cook_time, servings, instructions, ingredients)
    image_filename = _store_upload(storage, image)

    try:
        dish_id = recipe_writer.create_recipe(db, spec, image_filename)
    except Exception:
        if image_filename:
            storage.delete(image_filename)
        raise

    return RecipeWriteResult(message="Recipe created", dish_id=dish_id)


@router.put("/recipes/{dish_id}", response_model=RecipeWriteResult)
@limiter.limit(settings.write_rate_limit)
def update_recipe(
    request: Request,
    dish_id: int,
    name: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
    prep_time: Optional[str] = Form(None),
    cook_time: Optional[str] = Form(None),
    servings: Optional[str] = Form(None),
    instructions: Optional[str] = Form(None),
    ingredients: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
):
    """Replace a recipe. Steps and ingredients are replaced wholesale."""
    spec = parse_recipe_form(name, category_id, prep_time, cook_time, servings, instructions, ingredients)
    image_filename = _store_upload(storage, image)

    try:
        recipe_writer.update_recipe(db, storage, dish_id, spec, image_filename)
    except Exception:
        if image_filename:
            storage.delete(image_filename)
        raise

    return RecipeWriteResult(message="Recipe updated", dish_id=dish_id)


@router.delete("/recipes/{dish_id}", response_model=RecipeWriteResult)
@limiter.limit(settings.write_rate_limit)
def delete_recipe(
    request: Request,
    dish_id: int,
    db: Session = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
):
    """Delete a recipe, its unused ingredients/units and its image file."""
    cleanup.delete_recipe(db, storage, dish_id)
    return RecipeWriteResult(message="Recipe and unused data deleted", dish_id=dish_id)


# --- Reads (fixed paths before /recipes/{dish_id}) ---


@router.get("/recipes/simple", response_model=list[RecipeSummaryOut])
def list_simple(db: Session = Depends(get_db)):
    return recipe_reader.list_recipes(db)


@router.get("/recipes/full", response_model=list[RecipeDetailOut])
def list_full(db: Session = Depends(get_db)):
    return recipe_reader.list_full_recipes(db)


@router.get("/recipes/ingredients", response_model=list[IngredientOut])
def list_ingredients(db: Session = Depends(get_db)):
    return recipe_reader.list_ingredients(db)


@router.get("/recipes/categories", response_model=list[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return recipe_reader.list_categories(db)


@router.get("/recipes/by-category/{category}", response_model=list[RecipeSummaryOut])
def list_by_category(category: str, db: Session = Depends(get_db)):
    return recipe_reader.list_by_category(db, category)


@router.get("/recipes/by-category-id/{category_id}", response_model=list[RecipeSummaryOut])
def list_by_category_id(category_id: int, db: Session = Depends(get_db)):
    return recipe_reader.list_by_category_id(db, category_id)


@router.get("/recipes/by-ingredient/{name}", response_model=list[RecipeSummaryOut])
def list_by_ingredient(name: str, db: Session = Depends(get_db)):
    return recipe_reader.list_by_ingredient(db, name)


@router.get("/recipes/search", response_model=list[RecipeSummaryOut])
def search_recipes(query: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """Search recipes by name or ingredient (case-insensitive substring)."""
    return recipe_reader.search(db, query)


@router.get("/recipes/{dish_id}", response_model=RecipeDetailOut)
def get_recipe(dish_id: int, db: Session = Depends(get_db)):
    return recipe_reader.get_recipe(db, dish_id)
